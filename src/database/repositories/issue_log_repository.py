"""
Repository: Import Issue Log
CRUD operations for ImportIssueLog model.
"""

from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select, func

from models.orm_issue_log import ImportIssueLog


class ImportIssueRepository:
    """Repository for ImportIssueLog CRUD operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(
        self,
        issue_type: str,
        entry_name: str,
        description: str,
        import_id: Optional[str] = None
    ) -> ImportIssueLog:
        """
        Create a new issue log entry.

        Args:
            issue_type: Type of issue (BLACKLISTED, UNMATCHED, etc.)
            entry_name: Archive entry or item the issue applies to
            description: Human-readable description
            import_id: Associated import ID (optional)

        Returns:
            Created ImportIssueLog instance
        """
        log = ImportIssueLog(
            issue_type=issue_type,
            entry_name=entry_name[:255],
            description=description,
            import_id=import_id
        )
        self.session.add(log)
        self.session.flush()
        return log

    def get_by_import(
        self,
        import_id: str,
        issue_type: Optional[str] = None
    ) -> List[ImportIssueLog]:
        """
        Get issue entries for an import.

        Args:
            import_id: Import ID
            issue_type: Filter by issue type (optional)

        Returns:
            List of ImportIssueLog entries in creation order
        """
        stmt = select(ImportIssueLog).where(ImportIssueLog.import_id == import_id)
        if issue_type:
            stmt = stmt.where(ImportIssueLog.issue_type == issue_type)
        stmt = stmt.order_by(ImportIssueLog.log_id)
        return list(self.session.execute(stmt).scalars().all())

    def count_by_type(self, import_id: str) -> Dict[str, int]:
        """
        Count issues grouped by type for an import.

        Returns:
            Dict mapping issue_type to count
        """
        stmt = (
            select(ImportIssueLog.issue_type, func.count(ImportIssueLog.log_id))
            .where(ImportIssueLog.import_id == import_id)
            .group_by(ImportIssueLog.issue_type)
        )
        return {issue_type: count for issue_type, count in self.session.execute(stmt).all()}
