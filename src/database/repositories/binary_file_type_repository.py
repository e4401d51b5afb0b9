"""
Repository: Binary File Types
Load and create binary file types together with their configuration attributes.
"""

from typing import Dict, List, Optional
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select

from models.orm_binary_file import BinaryFileType, BinaryFileTypeAttribute


class BinaryFileTypeRepository:
    """Repository for BinaryFileType CRUD operations."""

    def __init__(self, session: Session):
        self.session = session

    def list_all(self) -> List[BinaryFileType]:
        """All file types with their attributes loaded, in id order."""
        stmt = (
            select(BinaryFileType)
            .options(selectinload(BinaryFileType.attributes))
            .order_by(BinaryFileType.binary_file_type_id)
        )
        return list(self.session.execute(stmt).scalars().all())

    def get_by_name(self, name: str) -> Optional[BinaryFileType]:
        """Get file type by exact name."""
        stmt = (
            select(BinaryFileType)
            .options(selectinload(BinaryFileType.attributes))
            .where(BinaryFileType.name == name)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def create(
        self,
        name: str,
        storage_type: str,
        description: Optional[str] = None,
        allow_caching: bool = True,
        attributes: Optional[Dict[str, str]] = None
    ) -> BinaryFileType:
        """
        Create a new file type with optional attributes.

        Args:
            name: File type name
            storage_type: 'DATABASE' or 'FILESYSTEM'
            description: Description (defaults to the name)
            allow_caching: Whether files of this type may be cached
            attributes: Attribute key -> value pairs

        Returns:
            Created BinaryFileType instance (flushed, not committed)
        """
        file_type = BinaryFileType(
            name=name,
            description=description if description is not None else name,
            storage_type=storage_type,
            allow_caching=allow_caching,
            is_system=False
        )
        for key, value in (attributes or {}).items():
            file_type.attributes.append(BinaryFileTypeAttribute(key=key, value=value))

        self.session.add(file_type)
        self.session.flush()
        return file_type

    def load_attributes(self, file_types: List[BinaryFileType]) -> None:
        """Load attribute values for each file type so they can be read without a query."""
        for file_type in file_types:
            file_type.attribute_values
