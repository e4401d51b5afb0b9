"""
SQLAlchemy ORM Models: Import Issue Log
Diagnostics for archive entries that were skipped or failed during import.
"""

from sqlalchemy import Integer, String, DateTime, Enum, Index, Text, func
from sqlalchemy.orm import Mapped, mapped_column
from models.base import Base
from datetime import datetime
from typing import Optional
import enum


class IssueType(enum.Enum):
    """Issue type enum for the import issue log."""
    BLACKLISTED = "BLACKLISTED"
    UNPARSEABLE = "UNPARSEABLE"
    UNMATCHED = "UNMATCHED"
    UNREADABLE = "UNREADABLE"
    UNMAPPED = "UNMAPPED"
    UNKNOWN_CATEGORY = "UNKNOWN_CATEGORY"
    PERSIST_FAILED = "PERSIST_FAILED"


class ImportIssueLog(Base):
    """
    One diagnostic raised while importing an archive.

    entry_name is the archive entry (or archive item) the issue applies to.
    """
    __tablename__ = "import_issue_log"

    log_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    import_id: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        index=True,
        comment="Associated import run"
    )

    issue_type: Mapped[str] = mapped_column(
        Enum(*[t.value for t in IssueType], name='import_issue_type_enum'),
        nullable=False
    )

    entry_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now()
    )

    __table_args__ = (
        Index('idx_issue_import_type', 'import_id', 'issue_type'),
        {'extend_existing': True}
    )

    def __repr__(self) -> str:
        return f"<ImportIssueLog(issue_type='{self.issue_type}', entry='{self.entry_name}')>"
