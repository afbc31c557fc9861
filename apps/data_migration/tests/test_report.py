"""
Tests for MigrationReport.
"""

import json
import os
import tempfile

from django.test import SimpleTestCase

from apps.data_migration.exceptions import StoreConnectionError
from apps.data_migration.services import MigrationReport


class MigrationReportTestCase(SimpleTestCase):
    """Tests para el reporte de la corrida."""

    def setUp(self):
        self.report = MigrationReport(order=['User', 'Order'])
        self.report.record_success('User')
        self.report.record_skip('User')
        self.report.record_success('Order')
        self.report.record_failure('OrderItem', 'oi2', 'write: productId=ghost references missing Product')

    def test_attempted_vs_migrated(self):
        stats = self.report.stats('User')

        self.assertEqual(stats.attempted, 2)
        self.assertEqual(stats.succeeded, 1)
        self.assertEqual(self.report.total_attempted, 4)
        self.assertEqual(self.report.total_migrated, 2)
        self.assertEqual(self.report.total_failed, 1)

    def test_abort_keeps_sanitized_error(self):
        self.report.abort(StoreConnectionError('source', 'could not connect to postgres://admin:secret@db:5432/shop'))

        self.assertEqual(self.report.status, 'aborted')
        self.assertNotIn('secret', self.report.fatal_error)
        self.assertFalse(self.report.succeeded)

    def test_summary_lines(self):
        self.report.status = 'completed'
        self.report.finish()

        summary = '\n'.join(self.report.summary_lines())

        self.assertIn('status: completed', summary)
        self.assertIn('Failed: OrderItem id=oi2', summary)
        self.assertIn('Duration:', summary)

    def test_save_json(self):
        self.report.finish()

        with tempfile.TemporaryDirectory() as tmp_dir:
            path = os.path.join(tmp_dir, 'report.json')
            self.report.save(path)

            with open(path) as f:
                data = json.load(f)

        self.assertEqual(data['entities']['User'], {'attempted': 2, 'succeeded': 1, 'failed': 0, 'skipped': 1})
        self.assertEqual(data['failures'][0]['source_id'], 'oi2')
        self.assertEqual(data['status'], 'pending')
