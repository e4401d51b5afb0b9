"""
Person Image mapper
Imports profile photos named by the person's external id (e.g. "1001.jpg"),
keeping only the most recent photo per person.
"""

import logging
from typing import Dict, Optional

from importer.archive_reader import ArchiveEntry, ArchiveReader, EntryUnreadableError
from importer.context import ImportRunContext
from importer.entity_keys import parse_foreign_id
from importer.mappers import CategoryMapper, guess_mime_type
from importer.progress import ProgressReporter
from models.orm_binary_file import BinaryFile, BinaryFileData, BinaryFileType
from models.orm_issue_log import IssueType

logger = logging.getLogger(__name__)


class PersonImageMapper(CategoryMapper):
    """
    Maps archive entries to person photos.

    Entries are batched by person id. Within a batch a person keeps only the
    newest photo; across batches a later photo is only imported when it is
    newer than the one already committed.
    """
    name = 'Person Image'

    def map(
        self,
        archive: ArchiveReader,
        file_type: BinaryFileType,
        context: ImportRunContext,
        progress: ProgressReporter
    ) -> int:
        entries = archive.list_entries()
        total = len(entries)
        progress.report(0, f"Verifying files import ({total:,} found).")

        batch: Dict[int, BinaryFile] = {}
        imported = 0
        processed = 0
        last_percent = 0

        for entry in entries:
            self._map_entry(entry, file_type, context, batch)
            processed += 1

            if len(batch) >= context.reporting_number:
                imported += self._commit(batch, entry, context)
                progress.checkpoint(f"{imported:,} files imported.")

            percent = min(processed * 100 // total, 99)
            if percent > last_percent:
                last_percent = percent
                progress.report(
                    percent,
                    f"{imported + len(batch):,} files imported ({percent}% complete)."
                )

        if batch:
            imported += self._commit(batch, entries[-1], context)

        progress.report(100, f"Finished files import: {imported:,} files imported.")
        return imported

    def _commit(self, batch: Dict[int, BinaryFile], entry: ArchiveEntry, context: ImportRunContext) -> int:
        committed = context.persister.commit(batch, entry.full_name)
        context.mark_committed(batch)
        batch.clear()
        return committed

    def _map_entry(
        self,
        entry: ArchiveEntry,
        file_type: BinaryFileType,
        context: ImportRunContext,
        batch: Dict[int, BinaryFile]
    ) -> None:
        if entry.extension in context.blacklist:
            context.record_issue(
                IssueType.BLACKLISTED.value,
                entry.full_name,
                f".{entry.extension} filetype not allowed ({entry.name})"
            )
            return

        foreign_id = parse_foreign_id(entry.stem)
        if foreign_id is None:
            context.record_issue(
                IssueType.UNPARSEABLE.value,
                entry.full_name,
                f"File name '{entry.stem}' is not a person id"
            )
            return

        keys = context.entity_keys.lookup(foreign_id)
        if keys is None:
            context.record_issue(
                IssueType.UNMATCHED.value,
                entry.full_name,
                f"No person with foreign id {foreign_id}"
            )
            return

        owner_id = keys.owner_id
        existing = batch.get(owner_id)
        if existing is not None and existing.created_at >= entry.last_modified:
            logger.debug(f"Skipping {entry.full_name}: newer photo already queued for person {owner_id}")
            return
        if not context.is_newer_than_committed(owner_id, entry.last_modified):
            logger.debug(f"Skipping {entry.full_name}: newer photo already imported for person {owner_id}")
            return

        try:
            content = entry.read()
        except EntryUnreadableError as e:
            context.record_issue(IssueType.UNREADABLE.value, entry.full_name, str(e))
            return

        batch[owner_id] = self.build_file(entry, content, file_type, context.import_person_alias_id)

    @staticmethod
    def build_file(
        entry: ArchiveEntry,
        content: bytes,
        file_type: BinaryFileType,
        created_by_alias_id: Optional[int] = None
    ) -> BinaryFile:
        """Prepare a BinaryFile for an archive entry. Nothing is added to the session."""
        return BinaryFile(
            is_system=False,
            is_temporary=False,
            file_name=entry.name,
            description=f"Imported as {entry.name}",
            binary_file_type_id=file_type.binary_file_type_id,
            storage_type=file_type.storage_type,
            storage_settings=file_type.storage_settings_json(),
            mime_type=guess_mime_type(entry.name),
            created_at=entry.last_modified,
            created_by_person_alias_id=created_by_alias_id,
            data=BinaryFileData(content=content)
        )
