"""
Archive Importer for binary file archives
Orchestrates archive opening, file type setup, mapper dispatch and batch persistence for a run.
"""

import logging
from contextlib import ExitStack
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Sequence

from sqlalchemy.orm import Session

from database.repositories.global_attribute_repository import GlobalAttributeRepository
from database.repositories.import_repository import ImportRunRepository
from database.repositories.issue_log_repository import ImportIssueRepository
from database.repositories.person_repository import PersonRepository
from importer.archive_reader import ArchivePreview, ArchiveReader, preview_archive
from importer.batch_persister import BatchPersister, PersistenceError
from importer.context import ImportRunContext
from importer.entity_keys import EntityKeyTable
from importer.file_types import FileTypeRegistry
from importer.mapper_registry import MapperRegistry, default_registry
from importer.progress import ProgressCallback, ProgressReporter
from models.orm_import import ImportRun
from models.orm_issue_log import IssueType
from utils.config import (
    ASSET_ROUTE_ROOT,
    BINARY_FILE_TYPES,
    IMPORT_REPORTING_NUMBER,
    PREVIEW_ENTRY_LIMIT,
    ConfigurationError,
)
from utils.logger import log_import_complete, log_import_error, log_import_start

logger = logging.getLogger(__name__)

IMPORT_USER_SETTING = 'ImportUser'


@dataclass
class ImportResult:
    """Result of an import run, complete or failed."""
    import_id: str
    records_imported: int
    errors_encountered: int
    archives_processed: int
    duration_seconds: float
    status: str
    issue_summary: Dict[str, int] = field(default_factory=dict)
    error: Optional[str] = None


class ImportFailedError(Exception):
    """
    A fatal error stopped the run.

    `result` reports what was committed before the failure.
    """

    def __init__(self, message: str, result: ImportResult):
        super().__init__(message)
        self.result = result


class ArchiveImporter:
    """
    Imports one or more archives of binary files in a single run.

    Features:
    - Declared file types are created before any mapping starts
    - Each archive is dispatched to the mapper registered for its name
    - One transaction per batch; a failed batch stops the run, earlier batches stay committed
    - Skipped entries are logged and recorded in the import issue log
    - Progress callbacks for monitoring
    """

    def __init__(
        self,
        session: Session,
        file_types: Optional[Mapping[str, str]] = None,
        reporting_number: Optional[int] = None,
        route_root: Optional[str] = None,
        mappers: Optional[MapperRegistry] = None,
        progress_callback: Optional[ProgressCallback] = None
    ):
        """
        Initialize archive importer.

        Args:
            session: SQLAlchemy session
            file_types: Declared file type name -> storage value (default: BINARY_FILE_TYPES)
            reporting_number: Batch size for commits (default: IMPORT_REPORTING_NUMBER)
            route_root: Root of generated asset paths (default: ASSET_ROUTE_ROOT)
            mappers: Mapper registry (default: all built-in mappers)
            progress_callback: Optional callback for progress events
        """
        self.session = session
        self.declared_file_types = dict(BINARY_FILE_TYPES if file_types is None else file_types)
        self.reporting_number = IMPORT_REPORTING_NUMBER if reporting_number is None else reporting_number
        self.route_root = ASSET_ROUTE_ROOT if route_root is None else route_root
        self.mappers = mappers or default_registry()
        self.progress_callback = progress_callback

        if self.reporting_number < 1:
            raise ConfigurationError(f"Reporting number must be positive, got {self.reporting_number}")

        self.run_repo = ImportRunRepository(session)
        self.issue_repo = ImportIssueRepository(session)
        self.person_repo = PersonRepository(session)
        self.attribute_repo = GlobalAttributeRepository(session)

    def preview(self, path: str, limit: Optional[int] = None) -> ArchivePreview:
        """First entries of an archive, without importing anything."""
        return preview_archive(path, limit or PREVIEW_ENTRY_LIMIT)

    def import_archives(
        self,
        archive_paths: Sequence[str],
        settings: Mapping[str, str]
    ) -> ImportResult:
        """
        Import every entry of the given archives.

        Args:
            archive_paths: Archive files; each archive's file name selects its mapper and file type
            settings: Run settings; must include 'ImportUser'

        Returns:
            ImportResult with summary statistics

        Raises:
            ConfigurationError: Missing import user, no archives, or no people to attribute imports to
            ArchiveUnreadableError: An archive cannot be opened
            ImportFailedError: A batch could not be committed
        """
        start_time = datetime.now(timezone.utc)
        progress = ProgressReporter(self.progress_callback)

        import_user = (settings.get(IMPORT_USER_SETTING) or '').strip()
        if not import_user:
            raise ConfigurationError(f"'{IMPORT_USER_SETTING}' setting is required")
        if not archive_paths:
            raise ConfigurationError("No archives to import")

        progress.report(0, "Starting health checks...")

        with ExitStack() as stack:
            # All archives are opened before anything is written
            archives = [
                stack.enter_context(ArchiveReader.open(path))
                for path in archive_paths
            ]
            import_alias_id = self._resolve_import_alias(import_user)

            progress.report(0, "Checking for existing attributes...")
            run = self.run_repo.create(
                ';'.join(archive_paths),
                import_person_alias_id=import_alias_id
            )
            self.run_repo.start_import(run)
            self.session.commit()
            log_import_start(run.import_id, len(archives))

            context = None
            try:
                context = self._build_context(run, import_alias_id)
                processed = self._import_all(archives, context, progress)

                self.run_repo.complete_import(run)
                self.session.commit()

            except PersistenceError as e:
                self.session.rollback()
                result = self._fail(run, e, start_time, context=context)
                raise ImportFailedError(
                    f"Import {run.import_id} stopped after {result.records_imported} records: {e}",
                    result
                ) from e

            except Exception as e:
                logger.exception(f"Import failed: {e}")
                self.session.rollback()
                self._fail(run, e, start_time, context=context)
                raise

        duration = (datetime.now(timezone.utc) - start_time).total_seconds()
        progress.report(100, f"Completed import: {run.records_imported:,} records imported.")
        log_import_complete(run.import_id, duration, run.records_imported, run.errors_encountered)

        return ImportResult(
            import_id=run.import_id,
            records_imported=run.records_imported,
            errors_encountered=run.errors_encountered,
            archives_processed=processed,
            duration_seconds=duration,
            status=run.status,
            issue_summary=self.issue_repo.count_by_type(run.import_id)
        )

    def _resolve_import_alias(self, import_user: str) -> Optional[int]:
        """
        Alias of the person imports are attributed to.

        Falls back to the first person in the store when the name matches nobody.
        """
        matches = self.person_repo.find_by_full_name(import_user, allow_first_name_only=True)
        if matches:
            return matches[0].primary_alias_id

        person = self.person_repo.first()
        if person is None:
            raise ConfigurationError("No people exist to attribute imported files to")

        logger.warning(f"Import user '{import_user}' not found; attributing imports to {person.full_name}")
        return person.primary_alias_id

    def _build_context(self, run: ImportRun, import_alias_id: Optional[int]) -> ImportRunContext:
        file_types = FileTypeRegistry(self.session)
        file_types.initialize(self.declared_file_types)

        entity_keys = EntityKeyTable.build(self.person_repo.list_foreign_keyed())
        logger.info(f"Loaded {len(entity_keys)} foreign-keyed people")

        return ImportRunContext(
            session=self.session,
            import_run=run,
            file_types=file_types,
            entity_keys=entity_keys,
            persister=BatchPersister(self.session, run, self.route_root),
            blacklist=self.attribute_repo.get_file_type_blacklist(),
            import_person_alias_id=import_alias_id,
            reporting_number=self.reporting_number
        )

    def _import_all(
        self,
        archives: List[ArchiveReader],
        context: ImportRunContext,
        progress: ProgressReporter
    ) -> int:
        """Map each archive in turn. Returns the number of archives handled by a mapper."""
        processed = 0
        for index, archive in enumerate(archives):
            scoped = progress.scoped(index, len(archives))
            mapper = self.mappers.resolve(archive.display_name)

            if self.mappers.is_fallback(mapper):
                mapper.map(archive, None, context, scoped)
                continue

            file_type = context.file_types.match(archive.display_name)
            if file_type is None:
                context.record_issue(
                    IssueType.UNKNOWN_CATEGORY.value,
                    archive.display_name,
                    f"No binary file type matches '{archive.display_name}'",
                    level=logging.ERROR
                )
                scoped.report(100, f"Skipped {archive.display_name}: unknown file type.")
                continue

            logger.info(f"Importing {archive.display_name} with {mapper!r} as '{file_type.name}'")
            mapper.map(archive, file_type, context, scoped)
            processed += 1

        return processed

    def _fail(
        self,
        run: ImportRun,
        error: Exception,
        start_time: datetime,
        context: Optional[ImportRunContext] = None
    ) -> ImportResult:
        """
        Mark the run failed in its own transaction and report what was committed.

        Issues recorded since the last committed batch were rolled back with it,
        so they are written again here.
        """
        if context is not None:
            restored = context.restore_pending_issues()
            if restored:
                logger.info(f"Restored {restored} issues from the rolled-back batch")
        if context is not None and isinstance(error, PersistenceError):
            context.record_issue(
                IssueType.PERSIST_FAILED.value,
                run.last_processed_entry or run.archive_path,
                str(error),
                level=logging.ERROR
            )
        self.run_repo.fail_import(run)
        self.session.commit()
        log_import_error(error, run.import_id, run.records_imported)

        return ImportResult(
            import_id=run.import_id,
            records_imported=run.records_imported,
            errors_encountered=run.errors_encountered,
            archives_processed=0,
            duration_seconds=(datetime.now(timezone.utc) - start_time).total_seconds(),
            status=run.status,
            issue_summary=self.issue_repo.count_by_type(run.import_id),
            error=str(error)
        )
