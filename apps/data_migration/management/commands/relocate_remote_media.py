"""
🚀 COMANDO: Relocalizar media remota a almacenamiento local

Descarga las imágenes remotas (S3/CDN) referenciadas por Media y
HomePageImage a PUBLIC_DIR y actualiza las URLs a rutas locales.

Uso:
    python manage.py relocate_remote_media
    python manage.py relocate_remote_media --dry-run
"""

from django.core.management.base import BaseCommand

from apps.data_migration.services import MediaRelocationService


class Command(BaseCommand):
    help = 'Descarga media remota a PUBLIC_DIR y reescribe las URLs a rutas locales'

    def add_arguments(self, parser):
        parser.add_argument(
            '--public-dir',
            help='Directorio público destino (default: PUBLIC_DIR)'
        )
        parser.add_argument(
            '--timeout',
            type=int,
            help='Timeout de descarga en segundos (default: MEDIA_DOWNLOAD_TIMEOUT)'
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Solo mostrar las rutas locales resultantes'
        )

    def handle(self, *args, **options):
        service = MediaRelocationService(
            public_dir=options.get('public_dir'),
            timeout=options.get('timeout'),
            dry_run=options['dry_run'],
        )

        self.stdout.write(self.style.SUCCESS('=' * 70))
        self.stdout.write(self.style.SUCCESS('📦 RELOCALIZACIÓN DE MEDIA REMOTA'))
        self.stdout.write(self.style.SUCCESS('=' * 70))
        self.stdout.write(f'Directorio público: {service.public_dir}')
        if options['dry_run']:
            self.stdout.write(self.style.NOTICE('ℹ️  MODO: DRY-RUN (sin descargas ni cambios)'))
        self.stdout.write('')

        result = service.relocate_all()

        for error in result['errors']:
            self.stdout.write(self.style.ERROR(f'❌ {error}'))

        self.stdout.write('')
        self.stdout.write(self.style.SUCCESS('📊 RESUMEN'))
        self.stdout.write(f"Media actualizados:        {result['media_updated']}")
        self.stdout.write(f"Home images actualizadas:  {result['home_images_updated']}")
        if result['failed']:
            self.stdout.write(self.style.WARNING(f"Fallidos:                  {result['failed']}"))
        self.stdout.write(self.style.SUCCESS('✅ Relocalización completada'))
