"""
SQLAlchemy ORM Models: Binary File Types and Binary Files
File types describe how a group of files is stored (backend + attributes);
binary files are the imported assets themselves.
"""

from sqlalchemy import (
    String, Integer, Boolean, ForeignKey, DateTime, Enum, Index, LargeBinary, Text, func
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from models.base import Base
from datetime import datetime
from typing import Dict, List, Optional
import enum
import json
import uuid


class StorageType(enum.Enum):
    """Storage backend a file type keeps its content in."""
    DATABASE = "DATABASE"
    FILESYSTEM = "FILESYSTEM"


def _new_guid() -> str:
    return str(uuid.uuid4())


class BinaryFileType(Base):
    """
    Classification of binary files.

    The storage backend and its configuration attributes (for example the
    root path of a filesystem backend) apply to every file of this type.
    """
    __tablename__ = "binary_file_types"
    __table_args__ = {'extend_existing': True}

    binary_file_type_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guid: Mapped[str] = mapped_column(String(36), nullable=False, unique=True, default=_new_guid)

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text)

    storage_type: Mapped[str] = mapped_column(
        Enum('DATABASE', 'FILESYSTEM', name='storage_type_enum'),
        nullable=False,
        default='DATABASE'
    )
    allow_caching: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_system: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now()
    )

    attributes: Mapped[List["BinaryFileTypeAttribute"]] = relationship(
        "BinaryFileTypeAttribute",
        back_populates="binary_file_type",
        cascade="all, delete-orphan",
        order_by="BinaryFileTypeAttribute.attribute_id"
    )

    @property
    def attribute_values(self) -> Dict[str, str]:
        """Configuration attributes as a key -> value dict."""
        return {attr.key: attr.value for attr in self.attributes}

    def storage_settings_json(self) -> str:
        """Serialized snapshot of the storage configuration."""
        return json.dumps(self.attribute_values, sort_keys=True)

    def get_attribute(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.attribute_values.get(key, default)

    def __repr__(self) -> str:
        return (
            f"<BinaryFileType(binary_file_type_id={self.binary_file_type_id}, "
            f"name='{self.name}', storage_type='{self.storage_type}')>"
        )


class BinaryFileTypeAttribute(Base):
    """Named configuration value attached to a binary file type."""
    __tablename__ = "binary_file_type_attributes"

    attribute_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    binary_file_type_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("binary_file_types.binary_file_type_id", ondelete="CASCADE"),
        nullable=False
    )
    key: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        Index('idx_file_type_attribute_key', 'binary_file_type_id', 'key', unique=True),
        {'extend_existing': True}
    )

    binary_file_type: Mapped["BinaryFileType"] = relationship(
        "BinaryFileType",
        back_populates="attributes"
    )


class BinaryFile(Base):
    """
    A stored file.

    path is only known once the row has its guid, so it is filled in after
    the insert is flushed.
    """
    __tablename__ = "binary_files"

    binary_file_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guid: Mapped[str] = mapped_column(String(36), nullable=False, unique=True, default=_new_guid)

    binary_file_type_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("binary_file_types.binary_file_type_id"),
        nullable=False
    )

    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    path: Mapped[Optional[str]] = mapped_column(String(2083))

    storage_type: Mapped[str] = mapped_column(
        Enum('DATABASE', 'FILESYSTEM', name='storage_type_enum'),
        nullable=False,
        default='DATABASE'
    )
    storage_settings: Mapped[Optional[str]] = mapped_column(
        Text,
        comment="JSON snapshot of the file type's storage attributes"
    )

    is_system: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_temporary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_by_person_alias_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("person_aliases.person_alias_id"),
        nullable=True
    )

    __table_args__ = (
        Index('idx_binary_file_type', 'binary_file_type_id'),
        {'extend_existing': True}
    )

    binary_file_type: Mapped["BinaryFileType"] = relationship("BinaryFileType")
    data: Mapped[Optional["BinaryFileData"]] = relationship(
        "BinaryFileData",
        back_populates="binary_file",
        uselist=False,
        cascade="all, delete-orphan"
    )

    @property
    def is_image(self) -> bool:
        return (self.mime_type or '').startswith('image')

    def __repr__(self) -> str:
        return (
            f"<BinaryFile(binary_file_id={self.binary_file_id}, "
            f"file_name='{self.file_name}', mime_type='{self.mime_type}')>"
        )


class BinaryFileData(Base):
    """Raw content of a database-stored binary file."""
    __tablename__ = "binary_file_data"
    __table_args__ = {'extend_existing': True}

    binary_file_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("binary_files.binary_file_id", ondelete="CASCADE"),
        primary_key=True
    )
    content: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    binary_file: Mapped["BinaryFile"] = relationship("BinaryFile", back_populates="data")
