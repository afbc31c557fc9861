"""
Tests for IntegrityVerificationService.
"""

from decimal import Decimal

from django.test import TestCase

from apps.data_migration.entities import EntityRegistry
from apps.data_migration.services import IntegrityVerificationService, MigrationReport
from apps.store.models import Category, Order, OrderItem, Product, User


class IntegrityVerificationTestCase(TestCase):
    """Tests para la verificación post-migración."""

    def setUp(self):
        self.service = IntegrityVerificationService(EntityRegistry())
        Category.objects.create(id='c1', name='Shirts')
        Product.objects.create(id='p1', name='Shirt', price=Decimal('1.00'), category_id='c1')
        User.objects.create(id='u1', email='a@test.com')
        Order.objects.create(id='o1', user_id='u1', total=Decimal('1.00'))

    def test_consistent_destination_passes(self):
        result = self.service.verify_all()

        self.assertTrue(result['success'])
        self.assertEqual(result['errors'], [])

    def test_broken_reference_detected(self):
        """Test FK colgante reportada como error."""
        OrderItem.objects.create(id='oi1', order_id='o1', product_id='ghost', price=Decimal('1.00'))

        result = self.service.verify_all()

        self.assertFalse(result['success'])
        self.assertIn('OrderItem.product: 1 referencias rotas', result['errors'])

        # Las FKs de SQLite se verifican al cerrar el test
        OrderItem.objects.filter(pk='oi1').delete()

    def test_counts_against_report(self):
        """Test menos filas que las reportadas es error, más filas es warning."""
        report = MigrationReport()
        report.record_success('User')
        report.record_success('User')
        report.record_success('Category')
        report.stats('Product')

        result = self.service.verify_all(report)

        self.assertIn('User: esperados 2, actual 1', result['errors'])
        self.assertEqual(len(result['warnings']), 1)
        self.assertIn('Product', result['warnings'][0])
