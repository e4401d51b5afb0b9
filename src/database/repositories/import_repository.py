"""
Repository: Import Runs
CRUD operations for ImportRun model.
"""

from typing import Optional, List
from sqlalchemy.orm import Session
from sqlalchemy import select, func

from models.orm_import import ImportRun


class ImportRunRepository:
    """Repository for ImportRun CRUD operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(
        self,
        archive_path: str,
        import_person_alias_id: Optional[int] = None
    ) -> ImportRun:
        """
        Create a new import run.

        Args:
            archive_path: Archive file(s) being imported
            import_person_alias_id: Alias of the importing user

        Returns:
            Created ImportRun instance
        """
        run = ImportRun(
            import_id=ImportRun.generate_import_id(),
            archive_path=archive_path[:1024],
            import_person_alias_id=import_person_alias_id,
            status='PENDING',
            records_imported=0,
            errors_encountered=0
        )
        self.session.add(run)
        self.session.flush()
        return run

    def get_by_id(self, run_id: int) -> Optional[ImportRun]:
        """Get run by internal ID."""
        return self.session.get(ImportRun, run_id)

    def get_by_import_id(self, import_id: str) -> Optional[ImportRun]:
        """Get run by public import ID."""
        stmt = select(ImportRun).where(ImportRun.import_id == import_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_active_imports(self) -> List[ImportRun]:
        """Get all active (not finished) imports."""
        stmt = select(ImportRun).where(
            ImportRun.status.in_(['PENDING', 'IN_PROGRESS'])
        ).order_by(ImportRun.created_at, ImportRun.run_id)
        return list(self.session.execute(stmt).scalars().all())

    def list_all(
        self,
        status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[ImportRun]:
        """
        List imports with optional filtering.

        Args:
            status: Filter by status (optional)
            limit: Maximum results
            offset: Pagination offset

        Returns:
            List of ImportRun instances, newest first
        """
        stmt = select(ImportRun)
        if status:
            stmt = stmt.where(ImportRun.status == status)
        stmt = stmt.order_by(ImportRun.run_id.desc()).limit(limit).offset(offset)
        return list(self.session.execute(stmt).scalars().all())

    def count(self, status: Optional[str] = None) -> int:
        """Count imports with optional status filter."""
        stmt = select(func.count(ImportRun.run_id))
        if status:
            stmt = stmt.where(ImportRun.status == status)
        return self.session.execute(stmt).scalar() or 0

    def start_import(self, run: ImportRun) -> None:
        """Mark import as started."""
        run.start()
        self.session.flush()

    def complete_import(self, run: ImportRun) -> None:
        """Mark import as completed successfully."""
        run.complete()
        self.session.flush()

    def fail_import(self, run: ImportRun) -> None:
        """Mark import as failed."""
        run.fail()
        self.session.flush()

    def update_progress(self, run: ImportRun, entry_name: Optional[str], records: int) -> None:
        """
        Record a committed batch.

        Args:
            run: The run to update
            entry_name: Last archive entry in the batch
            records: Number of records in the batch
        """
        run.update_progress(entry_name, records)
        self.session.flush()

    def record_error(self, run: ImportRun) -> None:
        """Increment error counter."""
        run.record_error()
        self.session.flush()

    def cancel_import(self, import_id: str) -> bool:
        """
        Cancel an import by setting status to CANCELLED.

        Args:
            import_id: Public import ID

        Returns:
            True if import was cancelled, False if not found or already finished
        """
        run = self.get_by_import_id(import_id)
        if not run or not run.is_active:
            return False
        run.cancel()
        self.session.flush()
        return True
