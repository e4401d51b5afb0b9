"""
Import run context: everything one import run shares between its components.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from database.repositories.import_repository import ImportRunRepository
from database.repositories.issue_log_repository import ImportIssueRepository
from importer.batch_persister import BatchPersister
from importer.entity_keys import EntityKeyTable
from importer.file_types import FileTypeRegistry
from models.orm_binary_file import BinaryFile
from models.orm_import import ImportRun
from utils.logger import log_entry_skipped

logger = logging.getLogger(__name__)


@dataclass
class ImportRunContext:
    """
    Per-run state, built once at the start of a run and discarded at the end.

    file_types, entity_keys and blacklist are read-only once the context
    exists; committed_owners grows as batches are committed.

    Issues recorded since the last successful batch commit are kept in
    pending_issues so they can be written again if that batch rolls back.
    """
    session: Session
    import_run: ImportRun
    file_types: FileTypeRegistry
    entity_keys: EntityKeyTable
    persister: BatchPersister
    blacklist: FrozenSet[str] = frozenset()
    import_person_alias_id: Optional[int] = None
    reporting_number: int = 100
    committed_owners: Dict[int, datetime] = field(default_factory=dict)
    pending_issues: List[Tuple[str, str, str]] = field(default_factory=list)

    def __post_init__(self):
        self._run_repo = ImportRunRepository(self.session)
        self._issue_repo = ImportIssueRepository(self.session)

    @property
    def import_id(self) -> str:
        return self.import_run.import_id

    def record_issue(
        self,
        issue_type: str,
        entry_name: str,
        description: str,
        level: int = logging.WARNING
    ) -> None:
        """
        Log a skipped entry/item and record it against the run.

        The issue row and error counter are flushed, and become durable with
        the next batch commit or the end of the run.
        """
        if level >= logging.ERROR:
            logger.error(f"{issue_type}: {description}", extra={
                "import_id": self.import_id,
                "entry_name": entry_name
            })
        else:
            log_entry_skipped(issue_type, entry_name, description, self.import_id)

        self._store_issue(issue_type, entry_name, description)
        self.pending_issues.append((issue_type, entry_name, description))

    def restore_pending_issues(self) -> int:
        """
        Write again the issues lost by a rolled-back batch.

        Call after session.rollback(). Returns the number of issues restored.
        """
        for issue_type, entry_name, description in self.pending_issues:
            self._store_issue(issue_type, entry_name, description)
        restored = len(self.pending_issues)
        self.pending_issues.clear()
        return restored

    def _store_issue(self, issue_type: str, entry_name: str, description: str) -> None:
        self._issue_repo.create(
            issue_type=issue_type,
            entry_name=entry_name,
            description=description,
            import_id=self.import_id
        )
        self._run_repo.record_error(self.import_run)

    def is_newer_than_committed(self, owner_id: int, created_at: datetime) -> bool:
        """True unless an equal or newer file for this owner was committed earlier in the run."""
        committed = self.committed_owners.get(owner_id)
        return committed is None or created_at > committed

    def mark_committed(self, batch: Mapping[int, BinaryFile]) -> None:
        """Record a successful batch commit; pending issues went out with it."""
        self.pending_issues.clear()
        for owner_id, binary_file in batch.items():
            committed = self.committed_owners.get(owner_id)
            if committed is None or binary_file.created_at > committed:
                self.committed_owners[owner_id] = binary_file.created_at
