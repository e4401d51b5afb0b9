"""
Archive Reader for exported binary file archives
Opens a zip container, lists its entries and reads entry content on demand.
"""

import logging
import zipfile
from dataclasses import dataclass, field
from functools import partial
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Callable, List, Optional, Union

logger = logging.getLogger(__name__)


class ArchiveUnreadableError(Exception):
    """Raised when an archive cannot be opened."""
    pass


class EntryUnreadableError(Exception):
    """Raised when an archive entry's content cannot be read."""
    pass


@dataclass(frozen=True)
class ArchiveEntry:
    """
    One file inside an archive.

    Content is not held by the entry; read() pulls it from the open
    archive, so entries are only usable while their reader is open.
    """
    full_name: str  # path inside the archive, e.g. "photos/1001.jpg"
    last_modified: datetime
    size: int
    _read: Callable[[], bytes] = field(repr=False, compare=False)

    @property
    def name(self) -> str:
        """Base file name, e.g. "1001.jpg"."""
        return PurePosixPath(self.full_name).name

    @property
    def stem(self) -> str:
        """Base file name without extension, e.g. "1001"."""
        return PurePosixPath(self.full_name).stem

    @property
    def extension(self) -> str:
        """Lowercased extension without the leading dot, e.g. "jpg"."""
        return PurePosixPath(self.full_name).suffix.lstrip('.').lower()

    def read(self) -> bytes:
        """
        Read the raw entry content.

        Raises:
            EntryUnreadableError: If the content cannot be read
        """
        return self._read()


class ArchiveReader:
    """
    Reader for a single zip archive.

    Use as a context manager so the underlying file handle is always released:

        with ArchiveReader.open(path) as archive:
            for entry in archive.list_entries():
                ...
    """

    def __init__(self, path: str, zip_file: zipfile.ZipFile):
        self.path = path
        self._zip = zip_file

    @classmethod
    def open(cls, path: str) -> "ArchiveReader":
        """
        Open an archive file.

        Args:
            path: Path to the zip archive

        Returns:
            Open ArchiveReader

        Raises:
            ArchiveUnreadableError: If the file is missing or not a readable zip
        """
        archive_path = Path(path)
        if not archive_path.is_file():
            raise ArchiveUnreadableError(f"Archive file not found: {path}")

        try:
            zip_file = zipfile.ZipFile(archive_path, 'r')
        except (zipfile.BadZipFile, OSError) as e:
            raise ArchiveUnreadableError(f"Failed to open archive {path}: {e}")

        return cls(str(archive_path), zip_file)

    @property
    def display_name(self) -> str:
        """Archive file name without extension, used to pick its handler."""
        return Path(self.path).stem

    def __enter__(self) -> "ArchiveReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._zip.close()

    def list_entries(self, limit: Optional[int] = None) -> List[ArchiveEntry]:
        """
        List file entries in container order.

        Directory entries are not included.

        Args:
            limit: Maximum number of entries (preview only; None lists all)

        Returns:
            List of ArchiveEntry
        """
        entries = []
        for info in self._zip.infolist():
            if info.is_dir():
                continue
            if limit is not None and len(entries) >= limit:
                break
            entries.append(self._to_entry(info))
        return entries

    def count_entries(self) -> int:
        return sum(1 for info in self._zip.infolist() if not info.is_dir())

    def read_content(self, entry: ArchiveEntry) -> bytes:
        """
        Read the raw bytes of an entry.

        Raises:
            EntryUnreadableError: If the entry is missing, corrupt or encrypted
        """
        return entry.read()

    def _read_member(self, member: Union[str, zipfile.ZipInfo]) -> bytes:
        try:
            return self._zip.read(member)
        except (KeyError, ValueError, zipfile.BadZipFile, RuntimeError, OSError, EOFError) as e:
            name = member.filename if isinstance(member, zipfile.ZipInfo) else member
            raise EntryUnreadableError(f"Failed to read {name}: {e}")

    def _to_entry(self, info: zipfile.ZipInfo) -> ArchiveEntry:
        try:
            last_modified = datetime(*info.date_time)
        except ValueError:
            logger.warning(f"Invalid timestamp for {info.filename}: {info.date_time}")
            last_modified = datetime(1980, 1, 1)

        return ArchiveEntry(
            full_name=info.filename,
            last_modified=last_modified,
            size=info.file_size,
            _read=partial(self._read_member, info)
        )


@dataclass
class ArchivePreview:
    """First entries of an archive, for choosing what to import."""
    name: str
    path: str
    entry_count: int
    entries: List[ArchiveEntry]


def preview_archive(path: str, limit: int = 50) -> ArchivePreview:
    """
    Summarize an archive without importing it.

    Entry content is not read. The returned entries cannot be read once
    this function returns because the archive is closed.

    Raises:
        ArchiveUnreadableError: If the archive cannot be opened
    """
    with ArchiveReader.open(path) as archive:
        return ArchivePreview(
            name=archive.display_name,
            path=archive.path,
            entry_count=archive.count_entries(),
            entries=archive.list_entries(limit=limit)
        )
