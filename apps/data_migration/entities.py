"""
Registro de entidades migradas.

Cada EntitySpec declara su tabla origen, sus dependencias (aristas FK) y las
reglas de transformación. El orden de migración NO se escribe a mano: se
calcula con utils.migration_order() a partir de depends_on. Agregar una
entidad = declarar su EntitySpec.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from django.apps import apps

from .exceptions import ConfigurationError


@dataclass
class EntitySpec:
    name: str
    model_path: str
    source_table: str
    depends_on: Tuple[str, ...] = ()
    # Upsert por identidad (entidades maestras base); el resto es insert-only
    upsert: bool = False
    # Entidades hijas: se migran por padre, justo después de que el padre se escribe
    parent: Optional[str] = None
    parent_column: Optional[str] = None
    # Columnas origen que identifican la fila
    identity: Tuple[str, ...] = ('id',)
    # Campos modelo -> columna origen, cuando difieren del db_column destino
    column_map: Dict[str, str] = field(default_factory=dict)
    # Campos que se cortan al max_length del destino
    truncate: Tuple[str, ...] = ()
    # Valor por defecto cuando el origen trae null/vacío
    defaults: Dict[str, Any] = field(default_factory=dict)
    # La relación origen puede no existir en algunos despliegues
    optional: bool = False

    @property
    def model(self):
        app_label, model_name = self.model_path.split('.')
        return apps.get_model(app_label, model_name)

    @property
    def is_child(self):
        return self.parent is not None

    def source_id(self, raw_row):
        """Identificador legible de la fila origen, para logs y reporte."""
        values = [raw_row.get(column) for column in self.identity]
        if len(values) == 1:
            return values[0]
        return ':'.join('' if value is None else str(value) for value in values)

    def __str__(self):
        return self.name


ENTITY_SPECS = (
    EntitySpec('User', 'store.User', 'User', upsert=True, defaults={'role': 'USER'}),
    EntitySpec('Category', 'store.Category', 'Category', upsert=True),
    EntitySpec('Tag', 'store.Tag', 'Tag', upsert=True),
    EntitySpec('Size', 'store.Size', 'Size', upsert=True),
    EntitySpec(
        'Product', 'store.Product', 'Product',
        depends_on=('Category',),
        truncate=('description',),
    ),
    EntitySpec(
        'ProductTag', 'store.ProductTag', '_ProductToTag',
        depends_on=('Product', 'Tag'),
        parent='Product',
        parent_column='A',
        identity=('A', 'B'),
        column_map={'product': 'A', 'tag': 'B'},
        optional=True,
    ),
    EntitySpec(
        'ProductSize', 'store.ProductSize', 'ProductSize',
        depends_on=('Product', 'Size'),
        parent='Product',
        parent_column='productId',
    ),
    EntitySpec('Media', 'store.Media', 'Media', depends_on=('Product', 'User')),
    EntitySpec('Cart', 'store.Cart', 'Cart', depends_on=('User',)),
    EntitySpec(
        'CartItem', 'store.CartItem', 'CartItem',
        depends_on=('Cart', 'Product'),
        parent='Cart',
        parent_column='cartId',
    ),
    EntitySpec('Offer', 'store.Offer', 'Offer'),
    EntitySpec('Order', 'store.Order', 'Order', depends_on=('User',)),
    EntitySpec(
        'OrderItem', 'store.OrderItem', 'OrderItem',
        depends_on=('Order', 'Product'),
        parent='Order',
        parent_column='orderId',
    ),
    EntitySpec('Review', 'store.Review', 'Review', depends_on=('User', 'Product', 'Order')),
    EntitySpec('HomePageImage', 'store.HomePageImage', 'HomePageImage'),
    EntitySpec('TopPickProduct', 'store.TopPickProduct', 'TopPickProduct', depends_on=('Product',)),
)


class EntityRegistry:
    """Acceso por nombre a las EntitySpec, conservando el orden de declaración."""

    def __init__(self, specs=ENTITY_SPECS):
        self.specs = list(specs)
        self._by_name = {}
        for spec in self.specs:
            if spec.name in self._by_name:
                raise ConfigurationError(f"Entity declared twice: {spec.name}")
            self._by_name[spec.name] = spec

    def __iter__(self):
        return iter(self.specs)

    def __len__(self):
        return len(self.specs)

    def __contains__(self, name):
        return name in self._by_name

    def get(self, name) -> EntitySpec:
        return self._by_name[name]

    def names(self):
        return [spec.name for spec in self.specs]

    def children_of(self, name):
        return [spec for spec in self.specs if spec.parent == name]
