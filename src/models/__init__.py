# Binary File Importer - Models Package

# Import all ORM models to register them with SQLAlchemy's declarative base
# This ensures string-based relationship() forward references can be resolved
# IMPORTANT: Use relative imports to avoid duplicate module loading issues
from .base import Base, SessionLocal, db_session, create_session
from .orm_person import Person, PersonAlias
from .orm_binary_file import (
    BinaryFileType, BinaryFileTypeAttribute, BinaryFile, BinaryFileData, StorageType
)
from .orm_global_attribute import GlobalAttribute
from .orm_import import ImportRun, ImportStatus
from .orm_issue_log import ImportIssueLog, IssueType

__all__ = [
    'Base',
    'SessionLocal',
    'db_session',
    'create_session',
    'Person',
    'PersonAlias',
    'BinaryFileType',
    'BinaryFileTypeAttribute',
    'BinaryFile',
    'BinaryFileData',
    'StorageType',
    'GlobalAttribute',
    'ImportRun',
    'ImportStatus',
    'ImportIssueLog',
    'IssueType',
]
