"""
Batch Persister for archive imports
Commits prepared binary files in one transaction per batch and links each to its owner.
"""

import logging
from typing import Mapping, Optional

from sqlalchemy.orm import Session

from database.repositories.import_repository import ImportRunRepository
from models.orm_binary_file import BinaryFile
from models.orm_import import ImportRun
from models.orm_person import Person
from utils.logger import log_batch_committed, log_database_error

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when a batch cannot be committed. The batch has been rolled back."""
    pass


def asset_path(binary_file: BinaryFile, route_root: str = '~') -> str:
    """
    Externally addressable path of a stored file.

    Image content types are served by the image route, everything else by
    the generic file route.
    """
    access_type = 'Image' if binary_file.is_image else 'File'
    return f"{route_root}/Get{access_type}.ashx?guid={binary_file.guid}"


class BatchPersister:
    """
    Writes batches of binary files keyed by owner (person) id.

    Each commit() is all-or-nothing: the files, their paths, the owners'
    photo references and the run's progress counters are committed together
    or not at all. Earlier batches are never touched.
    """

    def __init__(
        self,
        session: Session,
        import_run: Optional[ImportRun] = None,
        route_root: str = '~'
    ):
        self.session = session
        self.import_run = import_run
        self.route_root = route_root
        self.run_repo = ImportRunRepository(session)

    def commit(self, batch: Mapping[int, BinaryFile], last_entry: Optional[str] = None) -> int:
        """
        Commit a batch.

        Args:
            batch: Owner person id -> prepared BinaryFile
            last_entry: Last archive entry in the batch, for the run's progress record

        Returns:
            Number of files committed

        Raises:
            PersistenceError: If any part of the batch fails; nothing from it is kept
        """
        if not batch:
            return 0

        try:
            self.session.add_all(batch.values())
            self.session.flush()

            # Path needs the generated guid, so it is set after the insert
            for owner_id, binary_file in batch.items():
                binary_file.path = asset_path(binary_file, self.route_root)
                self._link_owner(owner_id, binary_file)

            if self.import_run is not None:
                self.run_repo.update_progress(self.import_run, last_entry, len(batch))

            self.session.commit()

        except Exception as e:
            self.session.rollback()
            log_database_error(e, f"Batch of {len(batch)} files rolled back")
            if isinstance(e, PersistenceError):
                raise
            raise PersistenceError(f"Failed to commit batch of {len(batch)} files: {e}") from e

        log_batch_committed(
            self.import_run.import_id if self.import_run is not None else None,
            len(batch),
            self.import_run.records_imported if self.import_run is not None else len(batch)
        )
        return len(batch)

    def _link_owner(self, owner_id: int, binary_file: BinaryFile) -> None:
        person = self.session.get(Person, owner_id)
        if person is None:
            raise PersistenceError(
                f"Owner person {owner_id} for {binary_file.file_name} does not exist"
            )
        person.photo_id = binary_file.binary_file_id
