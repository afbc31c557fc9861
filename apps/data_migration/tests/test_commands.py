"""
Tests for management commands.
"""

import json
import tempfile
from io import StringIO
from pathlib import Path
from unittest import mock

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from apps.data_migration.services import DataMigrationService, SourceReader
from apps.data_migration.services.report import STATUS_CANCELLED, MigrationReport
from apps.store.models import Media, OrderItem, User

from .fakes import FakeSourceReader, store_tables


class MigrateStoreDataCommandTestCase(TestCase):
    """Tests para migrate_store_data."""

    def test_missing_source_url_is_fatal(self):
        """Test sin SOURCE_DATABASE_URL -> CommandError (exit 1)."""
        with self.assertRaises(CommandError) as ctx:
            call_command('migrate_store_data', stdout=StringIO())

        self.assertIn('SOURCE_DATABASE_URL', str(ctx.exception))

    def test_completes_with_record_failures(self):
        """Test fallos por registro no cambian el exit code."""
        reader = FakeSourceReader(store_tables())
        out = StringIO()

        with mock.patch.object(SourceReader, 'connect', return_value=reader) as connect:
            call_command('migrate_store_data', '--source-url', 'postgres://reader@db/shop', stdout=out)

        connect.assert_called_once_with('postgres://reader@db/shop')
        output = out.getvalue()
        self.assertIn('MIGRATION SUMMARY - status: completed', output)
        self.assertIn('2 registros fallidos', output)
        self.assertEqual(User.objects.count(), 2)
        self.assertEqual(OrderItem.objects.count(), 2)

    def test_report_file(self):
        reader = FakeSourceReader(store_tables())

        with tempfile.TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir) / 'report.json'
            with mock.patch.object(SourceReader, 'connect', return_value=reader):
                call_command(
                    'migrate_store_data', '--source-url', 'postgres://reader@db/shop',
                    '--report-file', str(path), '--no-verify', stdout=StringIO(),
                )

            data = json.loads(path.read_text())

        self.assertEqual(data['status'], 'completed')
        self.assertEqual(data['entities']['OrderItem']['failed'], 1)

    def test_cancelled_run_exits_cleanly(self):
        """Test corrida cancelada -> aviso de cancelación, sin CommandError."""
        report = MigrationReport(status=STATUS_CANCELLED)
        report.finish()
        out = StringIO()

        with mock.patch.object(DataMigrationService, 'run', return_value=report):
            call_command('migrate_store_data', '--source-url', 'postgres://reader@db/shop', stdout=out)

        output = out.getvalue()
        self.assertIn('Migración cancelada', output)
        self.assertNotIn('completada', output)

    def test_dry_run(self):
        reader = FakeSourceReader(store_tables())
        out = StringIO()

        with mock.patch.object(SourceReader, 'connect', return_value=reader):
            call_command('migrate_store_data', '--source-url', 'postgres://reader@db/shop', '--dry-run', stdout=out)

        self.assertIn('(dry run)', out.getvalue())
        self.assertFalse(User.objects.exists())


class MediaCommandsTestCase(TestCase):
    """Tests para los comandos de media."""

    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp_dir.cleanup)
        self.public_dir = Path(self.tmp_dir.name)
        (self.public_dir / 'products').mkdir()
        (self.public_dir / 'products' / 'orphan.jpg').write_bytes(b'data')

    def test_clean_orphan_files_dry_run_by_default(self):
        out = StringIO()

        call_command('clean_orphan_files', '--public-dir', str(self.public_dir), stdout=out)

        self.assertIn('HUÉRFANO', out.getvalue())
        self.assertTrue((self.public_dir / 'products' / 'orphan.jpg').exists())

    def test_clean_orphan_files_delete(self):
        call_command('clean_orphan_files', '--public-dir', str(self.public_dir), '--delete', stdout=StringIO())

        self.assertFalse((self.public_dir / 'products' / 'orphan.jpg').exists())

    def test_relocate_remote_media_dry_run(self):
        Media.objects.create(id='m1', url='https://cdn.example.com/products/a.jpg')
        out = StringIO()

        call_command('relocate_remote_media', '--public-dir', str(self.public_dir), '--dry-run', stdout=out)

        self.assertIn('Media actualizados:        1', out.getvalue())
        self.assertEqual(Media.objects.get(pk='m1').url, 'https://cdn.example.com/products/a.jpg')

    def test_compress_product_images(self):
        out = StringIO()

        call_command('compress_product_images', '--public-dir', str(self.public_dir), '--quality', '70', stdout=out)

        self.assertIn('quality=70', out.getvalue())
        self.assertIn('Imágenes procesadas:    0', out.getvalue())
