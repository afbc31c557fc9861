"""
🚀 MEDIA FILES SERVICES

Mantenimiento de archivos media de la tienda ya migrada:

- MediaRelocationService: descarga media remota (S3, CDN) a PUBLIC_DIR y
  reescribe las URLs a rutas locales
- OrphanFileService: archivos en PUBLIC_DIR que ninguna fila referencia
- ImageCompressionService: re-encode in-place de imágenes de producto
"""

import io
import logging
import os
import re
import secrets
from pathlib import Path
from urllib.parse import urlparse

import requests
from django.apps import apps
from django.conf import settings
from PIL import Image

logger = logging.getLogger(__name__)

DEFAULT_FOLDER = 'uploads'


def _setting(key, default=None):
    return getattr(settings, 'DATA_MIGRATION', {}).get(key, default)


def resolve_public_dir(public_dir=None) -> Path:
    return Path(public_dir or _setting('PUBLIC_DIR', 'public'))


def sanitize_file_name(name: str) -> str:
    return re.sub(r'[^a-zA-Z0-9._-]', '-', name)


def derive_folder_and_file(url):
    """
    https://bucket.s3.amazonaws.com/products/abc/photo 1.jpg
        -> ('products', 'abc-photo-1.jpg')

    Una URL sin host ni esquema cae en una carpeta "uploads" con nombre aleatorio.
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return DEFAULT_FOLDER, secrets.token_hex(6)

    parts = parsed.path.lstrip('/').split('/')
    if len(parts) >= 2:
        folder = sanitize_file_name(parts[0])
        if folder in ('', '.', '..'):
            folder = DEFAULT_FOLDER
        return folder, sanitize_file_name('-'.join(parts[1:]))

    return DEFAULT_FOLDER, sanitize_file_name(parts[0] or 'media')


def is_local_url(url) -> bool:
    return bool(url) and url.startswith('/')


def normalize_url(url: str) -> str:
    """Separadores -> '/', un solo '/' inicial."""
    url = url.replace(os.sep, '/').replace('\\', '/')
    return '/' + url.lstrip('/')


def url_to_local_path(public_dir, url) -> Path:
    return Path(public_dir) / normalize_url(url).lstrip('/')


class MediaRelocationService:
    """
    Descarga cada URL remota de Media.url, HomePageImage.imageUrl y
    HomePageImage.mobileImageUrl a PUBLIC_DIR/<carpeta>/<archivo> y guarda
    la ruta local /<carpeta>/<archivo>. Las URLs locales no se tocan.
    """

    def __init__(self, public_dir=None, timeout=None, dry_run=False):
        self.public_dir = resolve_public_dir(public_dir)
        self.timeout = timeout or _setting('MEDIA_DOWNLOAD_TIMEOUT', 30)
        self.dry_run = dry_run
        self.errors = []

    def relocate_all(self):
        """
        Returns:
            dict con media_updated, home_images_updated, failed y errors
        """
        self.errors = []
        self.public_dir.mkdir(parents=True, exist_ok=True)

        media_updated = self.relocate_media()
        home_images_updated = self.relocate_home_images()

        logger.info(
            f"Relocalización completa: {media_updated} media, {home_images_updated} home images, "
            f"{len(self.errors)} fallos"
        )
        return {
            'media_updated': media_updated,
            'home_images_updated': home_images_updated,
            'failed': len(self.errors),
            'errors': list(self.errors),
        }

    def download(self, url) -> bytes:
        response = requests.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.content

    def save_file(self, folder, filename, data) -> str:
        target_dir = self.public_dir / folder
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / filename).write_bytes(data)
        return f"/{folder}/{filename}"

    def relocate_url(self, url) -> str:
        """Descarga una URL remota y devuelve su ruta local."""
        folder, filename = derive_folder_and_file(url)
        if self.dry_run:
            return f"/{folder}/{filename}"
        return self.save_file(folder, filename, self.download(url))

    def relocate_media(self):
        Media = apps.get_model('store', 'Media')
        updated = 0

        for item in Media.objects.all().order_by('pk'):
            if not item.url or is_local_url(item.url):
                continue

            try:
                local_url = self.relocate_url(item.url)
            except (requests.RequestException, OSError) as e:
                self.errors.append(f"Media {item.pk}: {e}")
                logger.error(f"❌ Error relocalizando media {item.pk}: {e}")
                continue

            if not self.dry_run:
                item.url = local_url
                item.save(update_fields=['url'])
            updated += 1
            logger.info(f"✅ Media {item.pk} -> {local_url}")

        return updated

    def relocate_home_images(self):
        HomePageImage = apps.get_model('store', 'HomePageImage')
        updated = 0

        for image in HomePageImage.objects.all().order_by('pk'):
            changes = {}
            try:
                for field_name in ('image_url', 'mobile_image_url'):
                    url = getattr(image, field_name)
                    if url and not is_local_url(url):
                        changes[field_name] = self.relocate_url(url)
            except (requests.RequestException, OSError) as e:
                self.errors.append(f"HomePageImage {image.pk}: {e}")
                logger.error(f"❌ Error relocalizando home image {image.pk}: {e}")
                continue

            if not changes:
                continue

            if not self.dry_run:
                for field_name, local_url in changes.items():
                    setattr(image, field_name, local_url)
                image.save(update_fields=list(changes))
            updated += 1
            logger.info(f"✅ Home image {image.pk} relocalizada")

        return updated


class OrphanFileService:
    """Archivos bajo PUBLIC_DIR sin referencia en Media ni HomePageImage."""

    def __init__(self, public_dir=None):
        self.public_dir = resolve_public_dir(public_dir)

    def referenced_urls(self):
        Media = apps.get_model('store', 'Media')
        HomePageImage = apps.get_model('store', 'HomePageImage')

        urls = set(Media.objects.values_list('url', flat=True))
        for image_url, mobile_image_url in HomePageImage.objects.values_list('image_url', 'mobile_image_url'):
            urls.update((image_url, mobile_image_url))

        return {normalize_url(url) for url in urls if is_local_url(url)}

    def list_files(self):
        if not self.public_dir.exists():
            logger.warning(f"Directorio público no existe: {self.public_dir}")
            return []
        return sorted(path for path in self.public_dir.rglob('*') if path.is_file())

    def find_orphans(self):
        referenced = self.referenced_urls()
        logger.info(f"📊 {len(referenced)} URLs locales referenciadas en base de datos")

        orphans = [
            path for path in self.list_files()
            if normalize_url(str(path.relative_to(self.public_dir))) not in referenced
        ]
        logger.info(f"🔍 {len(orphans)} archivos huérfanos en {self.public_dir}")
        return orphans

    def delete(self, orphans):
        """
        Returns:
            dict con deleted, failed y errors
        """
        deleted = 0
        errors = []
        for path in orphans:
            try:
                path.unlink()
                deleted += 1
                logger.info(f"🗑️  Eliminado: {path}")
            except OSError as e:
                errors.append(f"{path}: {e}")
                logger.error(f"❌ Error eliminando {path}: {e}")

        return {'deleted': deleted, 'failed': len(errors), 'errors': errors}


class ImageCompressionService:
    """
    Re-encode in-place de imágenes de producto locales (Media type="product").

    JPEG y WEBP con quality configurable, PNG con compresión máxima. Otros
    formatos se dejan como están.
    """

    def __init__(self, public_dir=None, quality=None):
        self.public_dir = resolve_public_dir(public_dir)
        self.quality = quality or _setting('IMAGE_QUALITY', 80)

    def compress_image(self, path) -> bool:
        """
        Returns:
            True si la imagen se re-escribió, False si el formato no aplica
        """
        with Image.open(path) as image:
            image_format = image.format
            image.load()

            buffer = io.BytesIO()
            if image_format == 'JPEG':
                image.save(buffer, 'JPEG', quality=self.quality, optimize=True)
            elif image_format == 'PNG':
                image.save(buffer, 'PNG', optimize=True, compress_level=9)
            elif image_format == 'WEBP':
                image.save(buffer, 'WEBP', quality=self.quality)
            else:
                return False

        Path(path).write_bytes(buffer.getvalue())
        return True

    def compress_product_images(self):
        """
        Returns:
            dict con processed, skipped, missing, failed y errors
        """
        Media = apps.get_model('store', 'Media')
        images = Media.objects.filter(product__isnull=False, type=Media.TYPE_PRODUCT).order_by('pk')

        result = {'processed': 0, 'skipped': 0, 'missing': 0, 'failed': 0, 'errors': []}
        logger.info(f"{images.count()} imágenes de producto a procesar")

        for image in images:
            if not is_local_url(image.url):
                logger.info(f"⏭️  Imagen no local: {image.url}")
                result['skipped'] += 1
                continue

            path = url_to_local_path(self.public_dir, image.url)
            if not path.exists():
                logger.warning(f"Archivo no encontrado: {path}")
                result['missing'] += 1
                continue

            try:
                compressed = self.compress_image(path)
            except (OSError, ValueError) as e:
                result['failed'] += 1
                result['errors'].append(f"{image.url}: {e}")
                logger.error(f"❌ Error procesando {image.url}: {e}")
                continue

            if compressed:
                result['processed'] += 1
                logger.info(f"✅ Comprimida {image.url}")
            else:
                result['skipped'] += 1
                logger.info(f"⏭️  Formato no soportado: {image.url}")

        return result
