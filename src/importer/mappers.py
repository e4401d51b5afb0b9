"""
Category mappers: the handlers that turn an archive into stored binary files.
"""

import logging
import mimetypes
from typing import Optional, TYPE_CHECKING

from importer.archive_reader import ArchiveReader
from importer.progress import ProgressReporter
from models.orm_binary_file import BinaryFileType
from models.orm_issue_log import IssueType

if TYPE_CHECKING:
    from importer.context import ImportRunContext

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = 'application/octet-stream'


def guess_mime_type(file_name: str) -> str:
    """Content type from a file name's extension."""
    mime_type, _ = mimetypes.guess_type(file_name, strict=False)
    return mime_type or DEFAULT_MIME_TYPE


class CategoryMapper:
    """
    Base class for archive handlers.

    Subclasses set `name` (matched against archive names with whitespace
    removed) and implement map().
    """
    name: str = ''

    def map(
        self,
        archive: ArchiveReader,
        file_type: Optional[BinaryFileType],
        context: "ImportRunContext",
        progress: ProgressReporter
    ) -> int:
        """
        Import every entry of an archive.

        Returns:
            Number of records committed
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(name='{self.name}')>"


class FallbackMapper(CategoryMapper):
    """Handler for archives no other mapper claims. Imports nothing."""
    name = 'Unmapped'

    def map(self, archive, file_type, context, progress) -> int:
        context.record_issue(
            IssueType.UNMAPPED.value,
            archive.display_name,
            f"No mapper for {archive.display_name}; {archive.count_entries():,} entries not imported"
        )
        progress.report(100, f"Skipped {archive.display_name}: no mapper.")
        return 0
