"""
🚀 COMANDO: Migrar datos de la tienda PostgreSQL -> MySQL

Uso:
    # Origen y destino desde entorno (SOURCE_DATABASE_URL, DATABASE_URL)
    python manage.py migrate_store_data

    # Simular: leer y transformar sin resetear ni escribir
    python manage.py migrate_store_data --dry-run

    # Reporte JSON
    python manage.py migrate_store_data --report-file /tmp/store-migration.json
"""

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from apps.data_migration.services import DataMigrationService, MigrationContext
from apps.data_migration.services.report import STATUS_CANCELLED


class Command(BaseCommand):
    help = 'Migra todos los datos de la tienda desde la base origen (PostgreSQL) a la base destino'

    def add_arguments(self, parser):
        parser.add_argument(
            '--source-url',
            help='Connection string del origen (default: SOURCE_DATABASE_URL)'
        )
        parser.add_argument(
            '--database',
            default='default',
            help='Alias de la base destino (default: default)'
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Leer y transformar sin resetear ni escribir el destino'
        )
        parser.add_argument(
            '--no-verify',
            action='store_true',
            help='No verificar integridad post-migración'
        )
        parser.add_argument(
            '--child-workers',
            type=int,
            help='Lecturas concurrentes de filas hijas (default: MIGRATION_CHILD_FETCH_WORKERS)'
        )
        parser.add_argument(
            '--report-file',
            help='Guardar el reporte como JSON en esta ruta'
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS('🚀 Iniciando migración de datos de la tienda...'))
        self.stdout.write('')

        if options['dry_run']:
            self.stdout.write(self.style.WARNING('[DRY RUN] El destino no se modificará'))
        else:
            self.stdout.write(self.style.WARNING('⚠️  Las tablas destino se vaciarán antes de migrar'))
        self.stdout.write('')

        source_url = options.get('source_url') or settings.DATA_MIGRATION.get('SOURCE_DATABASE_URL')
        context = MigrationContext(source_url=source_url, using=options['database'])
        service = DataMigrationService(
            context,
            dry_run=options['dry_run'],
            verify=not options['no_verify'],
            child_fetch_workers=options.get('child_workers'),
        )

        try:
            report = service.run()
        except Exception as e:
            self.stdout.write(self.style.ERROR(f'❌ Error durante la migración: {e}'))
            raise CommandError(f'Migración falló: {e}')

        self.stdout.write('')
        for line in report.summary_lines():
            self.stdout.write(line)
        self.stdout.write('')

        if options.get('report_file'):
            report.save(options['report_file'])
            self.stdout.write(f"📄 Reporte guardado en: {options['report_file']}")

        if report.fatal_error:
            self.stdout.write(self.style.ERROR(f'❌ Migración abortada: {report.fatal_error}'))
            raise CommandError(f'Migración falló: {report.fatal_error}')

        if report.status == STATUS_CANCELLED:
            self.stdout.write(self.style.WARNING('⚠️  Migración cancelada'))
            return

        if report.total_failed:
            self.stdout.write(self.style.WARNING(
                f'⚠️  Migración completada con {report.total_failed} registros fallidos'
            ))
        else:
            self.stdout.write(self.style.SUCCESS('✅ Migración completada exitosamente!'))
