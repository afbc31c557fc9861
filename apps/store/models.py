"""
Store models - esquema destino de la migración.

Las tablas y columnas conservan los nombres del esquema origen ("User",
"categoryId", "createdAt", ...) vía db_table/db_column, así un mismo nombre de
columna identifica el campo en ambas bases. Los IDs son strings asignados por
el origen y se copian tal cual.
"""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

ID_MAX_LENGTH = 191


def identifier_field(max_length=ID_MAX_LENGTH):
    return models.CharField(_("id"), primary_key=True, max_length=max_length, db_column='id')


class TimeStampedModel(models.Model):
    """
    Abstract base model with createdAt/updatedAt.

    No usa auto_now: los timestamps del origen deben sobrevivir a la migración.
    """

    created_at = models.DateTimeField(_("created at"), default=timezone.now, db_column='createdAt')
    updated_at = models.DateTimeField(_("updated at"), default=timezone.now, db_column='updatedAt')

    class Meta:
        abstract = True


class User(TimeStampedModel):
    ROLE_USER = 'USER'
    ROLE_ADMIN = 'ADMIN'

    ROLE_CHOICES = (
        (ROLE_USER, _('User')),
        (ROLE_ADMIN, _('Admin')),
    )

    id = identifier_field()
    email = models.CharField(_("email"), max_length=191, unique=True)
    name = models.CharField(_("name"), max_length=191, null=True, blank=True)
    role = models.CharField(_("role"), max_length=20, choices=ROLE_CHOICES, default=ROLE_USER)
    zip_code = models.CharField(_("zip code"), max_length=20, null=True, blank=True, db_column='zipCode')
    address_line1 = models.CharField(_("address line 1"), max_length=255, null=True, blank=True, db_column='addressLine1')
    address_line2 = models.CharField(_("address line 2"), max_length=255, null=True, blank=True, db_column='addressLine2')
    city = models.CharField(_("city"), max_length=100, null=True, blank=True)
    state = models.CharField(_("state"), max_length=100, null=True, blank=True)
    country = models.CharField(_("country"), max_length=100, null=True, blank=True)
    phone_number = models.CharField(_("phone number"), max_length=30, null=True, blank=True, db_column='phoneNumber')
    country_code = models.CharField(_("country code"), max_length=10, null=True, blank=True, db_column='countryCode')

    class Meta:
        db_table = 'User'

    def __str__(self):
        return self.email


class Category(models.Model):
    id = identifier_field()
    name = models.CharField(_("name"), max_length=191)

    class Meta:
        db_table = 'Category'

    def __str__(self):
        return self.name


class Tag(models.Model):
    id = identifier_field()
    name = models.CharField(_("name"), max_length=191)

    class Meta:
        db_table = 'Tag'

    def __str__(self):
        return self.name


class Size(models.Model):
    id = identifier_field()
    name = models.CharField(_("name"), max_length=191)

    class Meta:
        db_table = 'Size'

    def __str__(self):
        return self.name


class Product(TimeStampedModel):
    DESCRIPTION_MAX_LENGTH = 1000

    id = identifier_field()
    sku = models.CharField(_("SKU"), max_length=191, null=True, blank=True)
    name = models.CharField(_("name"), max_length=191)
    # VARCHAR(1000) en destino: el origen es TEXT y se trunca al migrar
    description = models.CharField(_("description"), max_length=DESCRIPTION_MAX_LENGTH, null=True, blank=True)
    price = models.DecimalField(_("price"), max_digits=12, decimal_places=2)
    crossed_price = models.DecimalField(
        _("crossed price"), max_digits=12, decimal_places=2, null=True, blank=True, db_column='crossedPrice'
    )
    stock = models.IntegerField(_("stock"), default=0)
    is_available = models.BooleanField(_("available"), default=True, db_column='isAvailable')
    has_sizing = models.BooleanField(_("has sizing"), default=False, db_column='hasSizing')
    category = models.ForeignKey(
        Category,
        on_delete=models.CASCADE,
        related_name='products',
        db_column='categoryId'
    )

    class Meta:
        db_table = 'Product'

    def __str__(self):
        return self.name


class ProductTag(models.Model):
    """
    Relación producto-tag. El origen (relación implícita) no tiene id propio:
    el id es "<productId>:<tagId>", estable entre corridas.
    """

    id = identifier_field(max_length=ID_MAX_LENGTH * 2 + 1)
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='product_tags', db_column='productId')
    tag = models.ForeignKey(Tag, on_delete=models.CASCADE, related_name='product_tags', db_column='tagId')

    class Meta:
        db_table = 'ProductTag'
        unique_together = ('product', 'tag')


class ProductSize(models.Model):
    id = identifier_field()
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='product_sizes', db_column='productId')
    size = models.ForeignKey(Size, on_delete=models.CASCADE, related_name='product_sizes', db_column='sizeId')
    stock = models.IntegerField(_("stock"), default=0)

    class Meta:
        db_table = 'ProductSize'


class Media(TimeStampedModel):
    TYPE_PRODUCT = 'product'

    id = identifier_field()
    url = models.CharField(_("url"), max_length=1000)
    mime_type = models.CharField(_("mime type"), max_length=100, null=True, blank=True, db_column='mimeType')
    type = models.CharField(_("type"), max_length=50, null=True, blank=True)
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name='media',
        null=True,
        blank=True,
        db_column='productId'
    )
    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        related_name='media',
        null=True,
        blank=True,
        db_column='userId'
    )

    class Meta:
        db_table = 'Media'


class Cart(TimeStampedModel):
    id = identifier_field()
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='carts', db_column='userId')

    class Meta:
        db_table = 'Cart'


class CartItem(models.Model):
    id = identifier_field()
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name='items', db_column='cartId')
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='cart_items', db_column='productId')
    quantity = models.IntegerField(_("quantity"), default=1)

    class Meta:
        db_table = 'CartItem'


class Offer(TimeStampedModel):
    id = identifier_field()
    code = models.CharField(_("code"), max_length=191, unique=True)
    name = models.CharField(_("name"), max_length=191)
    description = models.TextField(_("description"), null=True, blank=True)
    discount_type = models.CharField(_("discount type"), max_length=30, db_column='discountType')
    discount_value = models.DecimalField(_("discount value"), max_digits=12, decimal_places=2, db_column='discountValue')
    min_order_value = models.DecimalField(
        _("min order value"), max_digits=12, decimal_places=2, null=True, blank=True, db_column='minOrderValue'
    )
    max_discount = models.DecimalField(
        _("max discount"), max_digits=12, decimal_places=2, null=True, blank=True, db_column='maxDiscount'
    )
    applicable_tags = models.JSONField(_("applicable tags"), null=True, blank=True, db_column='applicableTags')
    applicable_categories = models.JSONField(
        _("applicable categories"), null=True, blank=True, db_column='applicableCategories'
    )
    is_active = models.BooleanField(_("active"), default=True, db_column='isActive')
    start_date = models.DateTimeField(_("start date"), null=True, blank=True, db_column='startDate')
    end_date = models.DateTimeField(_("end date"), null=True, blank=True, db_column='endDate')
    usage_limit = models.IntegerField(_("usage limit"), null=True, blank=True, db_column='usageLimit')
    usage_count = models.IntegerField(_("usage count"), default=0, db_column='usageCount')

    class Meta:
        db_table = 'Offer'

    def __str__(self):
        return self.code


def money_field(verbose_name, column, null=True):
    return models.DecimalField(
        verbose_name, max_digits=12, decimal_places=2, null=null, blank=null, db_column=column
    )


class Order(TimeStampedModel):
    id = identifier_field()
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='orders', db_column='userId')
    total = money_field(_("total"), 'total', null=False)
    status = models.CharField(_("status"), max_length=30, default='PENDING')
    payment_method = models.CharField(_("payment method"), max_length=30, null=True, blank=True, db_column='paymentMethod')
    razorpay_order_id = models.CharField(
        _("razorpay order id"), max_length=191, null=True, blank=True, db_column='razorpayOrderId'
    )
    payment_id = models.CharField(_("payment id"), max_length=191, null=True, blank=True, db_column='paymentId')
    waybill_number = models.CharField(_("waybill number"), max_length=191, null=True, blank=True, db_column='waybillNumber')
    zip_code = models.CharField(_("zip code"), max_length=20, null=True, blank=True, db_column='zipCode')
    address_line1 = models.CharField(_("address line 1"), max_length=255, null=True, blank=True, db_column='addressLine1')
    address_line2 = models.CharField(_("address line 2"), max_length=255, null=True, blank=True, db_column='addressLine2')
    city = models.CharField(_("city"), max_length=100, null=True, blank=True)
    state = models.CharField(_("state"), max_length=100, null=True, blank=True)
    country = models.CharField(_("country"), max_length=100, null=True, blank=True)
    phone_number = models.CharField(_("phone number"), max_length=30, null=True, blank=True, db_column='phoneNumber')
    email = models.CharField(_("email"), max_length=191, null=True, blank=True)
    subtotal = money_field(_("subtotal"), 'subtotal')
    shipping = money_field(_("shipping"), 'shipping')
    tax = money_field(_("tax"), 'tax')
    offer_discount = money_field(_("offer discount"), 'offerDiscount')
    prepaid_discount = money_field(_("prepaid discount"), 'prepaidDiscount')
    applied_discount = money_field(_("applied discount"), 'appliedDiscount')

    class Meta:
        db_table = 'Order'


class OrderItem(models.Model):
    id = identifier_field()
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items', db_column='orderId')
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='order_items', db_column='productId')
    quantity = models.IntegerField(_("quantity"), default=1)
    size = models.CharField(_("size"), max_length=50, null=True, blank=True)
    price = money_field(_("price"), 'price', null=False)

    class Meta:
        db_table = 'OrderItem'


class Review(TimeStampedModel):
    id = identifier_field()
    rating = models.IntegerField(_("rating"))
    comment = models.TextField(_("comment"), null=True, blank=True)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='reviews', db_column='userId')
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='reviews', db_column='productId')
    order = models.ForeignKey(
        Order,
        on_delete=models.SET_NULL,
        related_name='reviews',
        null=True,
        blank=True,
        db_column='orderId'
    )
    is_verified = models.BooleanField(_("verified"), default=False, db_column='isVerified')

    class Meta:
        db_table = 'Review'


class HomePageImage(TimeStampedModel):
    id = identifier_field()
    type = models.CharField(_("type"), max_length=50)
    image_url = models.CharField(_("image url"), max_length=1000, db_column='imageUrl')
    mobile_image_url = models.CharField(
        _("mobile image url"), max_length=1000, null=True, blank=True, db_column='mobileImageUrl'
    )
    alt_text = models.CharField(_("alt text"), max_length=255, null=True, blank=True, db_column='altText')
    title = models.CharField(_("title"), max_length=255, null=True, blank=True)
    subtitle = models.CharField(_("subtitle"), max_length=255, null=True, blank=True)
    color = models.CharField(_("color"), max_length=50, null=True, blank=True)
    href = models.CharField(_("href"), max_length=1000, null=True, blank=True)
    order = models.IntegerField(_("order"), default=0)
    is_active = models.BooleanField(_("active"), default=True, db_column='isActive')

    class Meta:
        db_table = 'HomePageImage'


class TopPickProduct(TimeStampedModel):
    id = identifier_field()
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='top_picks', db_column='productId')
    order = models.IntegerField(_("order"), default=0)

    class Meta:
        db_table = 'TopPickProduct'
