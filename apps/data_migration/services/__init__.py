"""
Services for the store data migration.

Source reading, transformation, destination writing, orchestration,
integrity verification and media maintenance.
"""

from .destination_writer import DestinationWriter
from .integrity import IntegrityVerificationService
from .media_files import ImageCompressionService, MediaRelocationService, OrphanFileService
from .migration_service import DataMigrationService, MigrationContext, MigrationState
from .report import MigrationReport
from .source_reader import SourceReader
from .transformer import FieldTransformer

__all__ = [
    'DataMigrationService',
    'DestinationWriter',
    'FieldTransformer',
    'ImageCompressionService',
    'IntegrityVerificationService',
    'MediaRelocationService',
    'MigrationContext',
    'MigrationReport',
    'MigrationState',
    'OrphanFileService',
    'SourceReader',
]
