"""
SQLAlchemy ORM Models: Import Run
Tracks progress and outcome of binary file archive imports.
"""

from sqlalchemy import Integer, String, DateTime, Enum, Index, func
from sqlalchemy.orm import Mapped, mapped_column
from models.base import Base
from datetime import datetime, timezone
from typing import Optional
import enum
import secrets


class ImportStatus(enum.Enum):
    """Import status enum matching database ENUM."""
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class ImportRun(Base):
    """
    One archive import run.

    records_imported is only incremented inside batch transactions, so after
    a failure it still equals the number of assets durably committed.
    """
    __tablename__ = "import_runs"

    # Primary Key
    run_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Public-facing identifier (e.g., "imp_abc123")
    import_id: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
        comment="Public-facing import identifier"
    )

    archive_path: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        comment="Archive file(s) being imported, ';'-separated"
    )

    import_person_alias_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Alias of the person running the import"
    )

    # Progress tracking
    last_processed_entry: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Last archive entry included in a committed batch"
    )
    records_imported: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default='0',
        comment="Total records successfully imported"
    )
    errors_encountered: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default='0',
        comment="Total errors encountered during import"
    )

    status: Mapped[str] = mapped_column(
        Enum('PENDING', 'IN_PROGRESS', 'COMPLETED', 'FAILED', 'CANCELLED', name='import_status_enum'),
        nullable=False,
        default='PENDING',
        server_default='PENDING'
    )

    # Timestamps
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now()
    )

    __table_args__ = (
        Index('idx_import_run_status', 'status'),
        {'extend_existing': True}
    )

    @classmethod
    def generate_import_id(cls) -> str:
        """Generate a unique import ID in the format 'imp_abc123def456'."""
        return f"imp_{secrets.token_hex(8)}"

    def start(self) -> None:
        """Mark import as started."""
        self.status = 'IN_PROGRESS'
        self.started_at = datetime.now(timezone.utc)

    def complete(self) -> None:
        """Mark import as completed successfully."""
        self.status = 'COMPLETED'
        self.completed_at = datetime.now(timezone.utc)

    def fail(self) -> None:
        """Mark import as failed."""
        self.status = 'FAILED'
        self.completed_at = datetime.now(timezone.utc)

    def cancel(self) -> None:
        """Cancel the import."""
        self.status = 'CANCELLED'
        self.completed_at = datetime.now(timezone.utc)

    def update_progress(self, entry_name: Optional[str], records: int) -> None:
        """Record a committed batch."""
        if entry_name:
            self.last_processed_entry = entry_name[:255]
        self.records_imported += records

    def record_error(self) -> None:
        """Increment error counter."""
        self.errors_encountered += 1

    @property
    def is_active(self) -> bool:
        """Check if import is currently active."""
        return self.status in ('PENDING', 'IN_PROGRESS')

    def __repr__(self) -> str:
        return f"<ImportRun(import_id='{self.import_id}', status='{self.status}')>"
