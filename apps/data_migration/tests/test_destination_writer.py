"""
Tests for DestinationWriter.
"""

from decimal import Decimal, InvalidOperation
from unittest import mock

from django.test import TestCase

from apps.data_migration.entities import EntityRegistry
from apps.data_migration.exceptions import WriteError
from apps.data_migration.services import DestinationWriter
from apps.data_migration.utils import reset_order
from apps.store.models import Category, Product, ProductTag, Tag, User


class DestinationWriterTestCase(TestCase):
    """Tests para escrituras en destino."""

    def setUp(self):
        self.registry = EntityRegistry()
        self.writer = DestinationWriter()

    def test_write_master_creates_then_updates(self):
        """Test upsert por identidad."""
        user = self.registry.get('User')

        self.writer.write_master(user, {'id': 'u1', 'email': 'a@test.com', 'role': 'USER'})
        self.writer.write_master(user, {'id': 'u1', 'email': 'a@test.com', 'role': 'ADMIN'})

        self.assertEqual(User.objects.count(), 1)
        self.assertEqual(User.objects.get(pk='u1').role, 'ADMIN')

    def test_write_detail_preserves_source_id(self):
        """Test insert conserva el id del origen."""
        Category.objects.create(id='c1', name='Shirts')

        self.writer.write(
            self.registry.get('Product'),
            {'id': 'prod-abc', 'name': 'Shirt', 'price': Decimal('10.00'), 'category_id': 'c1'},
        )

        product = Product.objects.get(pk='prod-abc')
        self.assertEqual(product.category_id, 'c1')

    def test_write_detail_duplicate_raises_write_error(self):
        """Test insert-only: un id repetido falla solo ese registro."""
        Category.objects.create(id='c1', name='Shirts')
        product = self.registry.get('Product')
        row = {'id': 'p1', 'name': 'Shirt', 'price': Decimal('10.00'), 'category_id': 'c1'}

        self.writer.write(product, row)
        with self.assertRaises(WriteError):
            self.writer.write(product, row)

        self.assertEqual(Product.objects.count(), 1)

    def test_dangling_reference_raises_write_error(self):
        """Test FK hacia fila inexistente -> WriteError, nada escrito."""
        with self.assertRaises(WriteError) as ctx:
            self.writer.write(
                self.registry.get('Product'),
                {'id': 'p1', 'name': 'Shirt', 'price': Decimal('10.00'), 'category_id': 'nope'},
                source_id='p1',
            )

        self.assertEqual(ctx.exception.source_id, 'p1')
        self.assertIn('categoryId', str(ctx.exception))
        self.assertFalse(Product.objects.exists())

    def test_unexpected_save_error_raises_write_error(self):
        """Test cualquier excepción al guardar queda como fallo del registro."""
        Category.objects.create(id='c1', name='Shirts')

        with mock.patch('django.db.models.query.QuerySet.create', side_effect=InvalidOperation('format_number')):
            with self.assertRaises(WriteError) as ctx:
                self.writer.write(
                    self.registry.get('Product'),
                    {'id': 'p1', 'name': 'Shirt', 'price': Decimal('1.00'), 'category_id': 'c1'},
                )

        self.assertIsInstance(ctx.exception.cause, InvalidOperation)
        self.assertFalse(Product.objects.exists())

    def test_join_relation_keyed_by_pair(self):
        Category.objects.create(id='c1', name='Shirts')
        Product.objects.create(id='p1', name='Shirt', price=Decimal('1.00'), category_id='c1')
        Tag.objects.create(id='t1', name='summer')

        self.writer.write(
            self.registry.get('ProductTag'),
            {'id': 'p1:t1', 'product_id': 'p1', 'tag_id': 't1'},
            source_id='p1:t1',
        )

        self.assertEqual(ProductTag.objects.get(pk='p1:t1').tag_id, 't1')

    def test_reset_empties_all_tables(self):
        """Test reset vacía todas las entidades."""
        Category.objects.create(id='c1', name='Shirts')
        Product.objects.create(id='p1', name='Shirt', price=Decimal('1.00'), category_id='c1')
        User.objects.create(id='u1', email='a@test.com')

        self.writer.reset([self.registry.get(name) for name in reset_order(self.registry)])

        self.assertFalse(User.objects.exists())
        self.assertFalse(Category.objects.exists())
        self.assertFalse(Product.objects.exists())
