"""
🧹 COMANDO: Limpiar Archivos Huérfanos del Directorio Público

Identifica archivos bajo PUBLIC_DIR que no están referenciados por ninguna
URL local de Media o HomePageImage.

Uso:
    # Modo dry-run (solo mostrar)
    python manage.py clean_orphan_files

    # Eliminar archivos huérfanos
    python manage.py clean_orphan_files --delete
"""

from django.core.management.base import BaseCommand

from apps.data_migration.services import OrphanFileService


class Command(BaseCommand):
    help = 'Lista (o elimina) archivos del directorio público que ninguna fila referencia'

    def add_arguments(self, parser):
        parser.add_argument(
            '--delete',
            action='store_true',
            help='Eliminar los archivos huérfanos (sin este flag solo muestra)',
        )
        parser.add_argument(
            '--public-dir',
            help='Directorio público a revisar (default: PUBLIC_DIR)',
        )

    def handle(self, *args, **options):
        delete_mode = options['delete']
        service = OrphanFileService(public_dir=options.get('public_dir'))

        self.stdout.write(self.style.SUCCESS('=' * 70))
        self.stdout.write(self.style.SUCCESS('🧹 LIMPIEZA DE ARCHIVOS HUÉRFANOS'))
        self.stdout.write(self.style.SUCCESS('=' * 70))
        self.stdout.write('')

        if delete_mode:
            self.stdout.write(self.style.WARNING('⚠️  MODO: ELIMINACIÓN ACTIVA'))
        else:
            self.stdout.write(self.style.NOTICE('ℹ️  MODO: DRY-RUN (solo mostrar, no eliminar)'))
        self.stdout.write('')

        orphans = service.find_orphans()

        if not orphans:
            self.stdout.write(self.style.SUCCESS('✅ Sin huérfanos'))
            return

        for path in orphans:
            self.stdout.write(self.style.WARNING(f'   ├─ 🗑️  HUÉRFANO: {path}'))

        self.stdout.write('')
        self.stdout.write(self.style.SUCCESS('=' * 70))
        self.stdout.write(self.style.SUCCESS('📊 RESUMEN'))
        self.stdout.write(self.style.SUCCESS('=' * 70))
        self.stdout.write(self.style.WARNING(f'Total de huérfanos encontrados:    {len(orphans)}'))

        if delete_mode:
            result = service.delete(orphans)
            self.stdout.write(self.style.SUCCESS(f"Total de archivos eliminados:      {result['deleted']}"))
            for error in result['errors']:
                self.stdout.write(self.style.ERROR(f'❌ Error eliminando: {error}'))
            self.stdout.write('')
            self.stdout.write(self.style.SUCCESS('✅ Limpieza completada'))
        else:
            self.stdout.write('')
            self.stdout.write(self.style.NOTICE('ℹ️  Para eliminar los archivos huérfanos, ejecuta:'))
            self.stdout.write(self.style.NOTICE('   python manage.py clean_orphan_files --delete'))

        self.stdout.write(self.style.SUCCESS('=' * 70))
