"""
File Type Registry for archive imports
Resolves the binary file types (storage backend + attributes) imported files are stored as,
creating any type declared in configuration that the record store does not have yet.
"""

import logging
import re
from typing import Dict, List, Mapping, Optional

from sqlalchemy.orm import Session

from database.repositories.binary_file_type_repository import BinaryFileTypeRepository
from models.orm_binary_file import BinaryFileType, StorageType
from utils.config import DATABASE_STORAGE_VALUE, ROOT_PATH_ATTRIBUTE_KEY

logger = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    """Remove all whitespace: "Person Image" -> "PersonImage"."""
    return re.sub(r'\s+', '', name or '')


def storage_type_for(declared_value: Optional[str]) -> str:
    """Storage backend for a declared value: "Database" (any case) or a filesystem root path."""
    if (declared_value or '').strip().lower() == DATABASE_STORAGE_VALUE.lower():
        return StorageType.DATABASE.value
    return StorageType.FILESYSTEM.value


class FileTypeRegistry:
    """
    Binary file types available to an import run.

    initialize() must run before lookups; afterwards the registry is read-only
    and every type has its attributes loaded.
    """

    def __init__(self, session: Session):
        self.session = session
        self.repository = BinaryFileTypeRepository(session)
        self._file_types: List[BinaryFileType] = []
        self._created: List[str] = []
        self._initialized = False

    @property
    def file_types(self) -> List[BinaryFileType]:
        return list(self._file_types)

    @property
    def created(self) -> List[str]:
        """Names of file types created by initialize()."""
        return list(self._created)

    def initialize(self, declared: Mapping[str, str]) -> None:
        """
        Load all file types and create declared ones that are missing.

        New types get caching enabled, the storage backend implied by the
        declared value, and the declared value as their root path attribute.
        All new types are committed together.

        Args:
            declared: File type name -> declared storage value
        """
        self._file_types = self.repository.list_all()
        existing = {file_type.name for file_type in self._file_types}

        for name, declared_value in declared.items():
            if name in existing:
                continue

            attributes: Dict[str, str] = {}
            if declared_value:
                attributes[ROOT_PATH_ATTRIBUTE_KEY] = declared_value

            file_type = self.repository.create(
                name=name,
                storage_type=storage_type_for(declared_value),
                description=name,
                allow_caching=True,
                attributes=attributes
            )
            self._file_types.append(file_type)
            self._created.append(name)
            existing.add(name)
            logger.info(
                f"Created binary file type '{name}' ({file_type.storage_type})"
            )

        if self._created:
            self.session.commit()

        # Attribute values are read synchronously by the mappers
        self.repository.load_attributes(self._file_types)
        self._initialized = True

    def lookup(self, name: str) -> Optional[BinaryFileType]:
        """File type with exactly this name."""
        self._require_initialized()
        for file_type in self._file_types:
            if file_type.name == name:
                return file_type
        return None

    def match(self, item_name: str) -> Optional[BinaryFileType]:
        """
        File type for an archive item name.

        The item name (whitespace removed) must start with the file type name
        (whitespace removed); the first match in registry order wins.
        """
        self._require_initialized()
        normalized_item = normalize_name(item_name)
        for file_type in self._file_types:
            normalized_type = normalize_name(file_type.name)
            if normalized_type and normalized_item.startswith(normalized_type):
                return file_type
        return None

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("FileTypeRegistry.initialize() has not been called")
