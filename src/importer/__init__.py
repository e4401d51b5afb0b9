"""
Binary File Importer - Importer Module
Imports archives of binary files (e.g. person photos) into the record store.
"""

from importer.archive_reader import (
    ArchiveReader,
    ArchiveEntry,
    ArchivePreview,
    ArchiveUnreadableError,
    EntryUnreadableError,
    preview_archive
)
from importer.file_types import FileTypeRegistry
from importer.entity_keys import EntityKeys, EntityKeyTable, parse_foreign_id
from importer.mappers import CategoryMapper, FallbackMapper
from importer.person_image import PersonImageMapper
from importer.mapper_registry import MapperRegistry, default_registry
from importer.progress import ProgressEvent, ProgressReporter
from importer.batch_persister import BatchPersister, PersistenceError, asset_path
from importer.context import ImportRunContext
from importer.archive_importer import ArchiveImporter, ImportFailedError, ImportResult

__all__ = [
    # Archive Reader
    "ArchiveReader",
    "ArchiveEntry",
    "ArchivePreview",
    "ArchiveUnreadableError",
    "EntryUnreadableError",
    "preview_archive",
    # File Types
    "FileTypeRegistry",
    # Entity Keys
    "EntityKeys",
    "EntityKeyTable",
    "parse_foreign_id",
    # Mappers
    "CategoryMapper",
    "FallbackMapper",
    "PersonImageMapper",
    "MapperRegistry",
    "default_registry",
    # Progress
    "ProgressEvent",
    "ProgressReporter",
    # Persistence
    "BatchPersister",
    "PersistenceError",
    "asset_path",
    "ImportRunContext",
    # Archive Importer
    "ArchiveImporter",
    "ImportFailedError",
    "ImportResult",
]
