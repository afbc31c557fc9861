"""
🚀 COMANDO: Comprimir imágenes de producto locales

Uso:
    python manage.py compress_product_images
    python manage.py compress_product_images --quality 70
"""

from django.core.management.base import BaseCommand

from apps.data_migration.services import ImageCompressionService


class Command(BaseCommand):
    help = 'Re-encode in-place de las imágenes de producto locales (JPEG, PNG, WEBP)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--quality',
            type=int,
            help='Calidad JPEG/WEBP (default: IMAGE_QUALITY)'
        )
        parser.add_argument(
            '--public-dir',
            help='Directorio público (default: PUBLIC_DIR)'
        )

    def handle(self, *args, **options):
        service = ImageCompressionService(public_dir=options.get('public_dir'), quality=options.get('quality'))

        self.stdout.write(self.style.SUCCESS(f'🚀 Comprimiendo imágenes de producto (quality={service.quality})...'))
        result = service.compress_product_images()

        for error in result['errors']:
            self.stdout.write(self.style.ERROR(f'❌ {error}'))

        self.stdout.write('')
        self.stdout.write('=== Resumen de compresión ===')
        self.stdout.write(f"Imágenes procesadas:    {result['processed']}")
        self.stdout.write(f"Omitidas:               {result['skipped']}")
        self.stdout.write(f"No encontradas:         {result['missing']}")
        self.stdout.write(f"Fallidas:               {result['failed']}")
        self.stdout.write(self.style.SUCCESS('✅ Compresión completada'))
