#!/usr/bin/env python3
"""
Binary File Importer - Import CLI
Imports archives of binary files (e.g. "Person Image.zip") into the record store.

Usage:
    # Import an archive as a given user
    python -m scripts.import_binary_files "Person Image.zip" --import-user "Ted Decker"

    # Declare a file type stored in the database
    python -m scripts.import_binary_files "Person Image.zip" --import-user Ted --file-type "Person Image=Database"

    # Show the first entries of an archive
    python -m scripts.import_binary_files "Person Image.zip" --preview

    # Check import status
    python -m scripts.import_binary_files --status <import_id>

    # Create tables in an empty database
    python -m scripts.import_binary_files --create-schema
"""

import argparse
import sys
from pathlib import Path
from datetime import datetime

# Add src to path
backend_src = Path(__file__).parent.parent
sys.path.insert(0, str(backend_src.absolute()))

from utils.logger import logger, setup_logger
from utils.config import BINARY_FILE_TYPES, IMPORT_USER, ConfigurationError, parse_file_type_declarations
from database.connection import get_db_session, init_schema
from database.repositories.import_repository import ImportRunRepository
from importer import (
    ArchiveImporter,
    ArchiveUnreadableError,
    ImportFailedError,
    ImportResult,
    ProgressEvent,
    preview_archive
)
from importer.archive_importer import IMPORT_USER_SETTING

# Pipeline modules log under the importer package
setup_logger('importer')


def parse_file_type(value: str) -> tuple:
    """Parse a NAME=VALUE file type declaration."""
    try:
        declared = parse_file_type_declarations(value)
    except ConfigurationError as e:
        raise argparse.ArgumentTypeError(str(e))
    if len(declared) != 1:
        raise argparse.ArgumentTypeError(f"Expected one NAME=VALUE declaration, got: {value}")
    return next(iter(declared.items()))


def print_progress(event: ProgressEvent) -> None:
    """Print progress update to console."""
    bar_width = 40
    filled = int(bar_width * event.percent / 100)
    bar = '=' * filled + '-' * (bar_width - filled)

    print(f"\r[{bar}] {event.percent:3d}% | {event.message:<60}", end='', flush=True)


def show_preview(path: str) -> None:
    """Print the first entries of an archive."""
    preview = preview_archive(path)

    print(f"\n{preview.name} ({preview.entry_count:,} entries)\n")
    print(f"{'Entry':<50} {'Modified':<20} {'Size':>12}")
    print("-" * 84)
    for entry in preview.entries:
        print(f"{entry.full_name[:50]:<50} {entry.last_modified:%Y-%m-%d %H:%M:%S}  {entry.size:>12,}")

    if preview.entry_count > len(preview.entries):
        print(f"  ... and {preview.entry_count - len(preview.entries):,} more")


def check_status(import_id: str, session) -> None:
    """Check status of an import."""
    repo = ImportRunRepository(session)
    run = repo.get_by_import_id(import_id)

    if not run:
        print(f"Import not found: {import_id}")
        return

    print(f"\n{'='*60}")
    print(f"Import ID:     {run.import_id}")
    print(f"Archives:      {run.archive_path}")
    print(f"Status:        {run.status}")
    print(f"Records:       {run.records_imported:,}")
    print(f"Errors:        {run.errors_encountered}")
    print(f"Last Entry:    {run.last_processed_entry}")
    print(f"Started:       {run.started_at}")
    print(f"Completed:     {run.completed_at}")
    print(f"{'='*60}")


def list_active_imports(session) -> None:
    """List all active imports."""
    repo = ImportRunRepository(session)
    active = repo.get_active_imports()

    if not active:
        print("No active imports found.")
        return

    print(f"\nActive imports ({len(active)}):\n")
    print(f"{'Import ID':<20} {'Archives':<40} {'Status':<12} {'Records':>12}")
    print("-" * 90)

    for run in active:
        archives = run.archive_path[:36] + '...' if len(run.archive_path) > 36 else run.archive_path
        print(f"{run.import_id:<20} {archives:<40} {run.status:<12} {run.records_imported:>12,}")


def print_result(result: ImportResult) -> None:
    print(f"\n{'='*60}")
    print(f"Import {'Complete' if result.error is None else 'Failed'}: {result.import_id}")
    print(f"{'='*60}")
    print(f"Status:        {result.status}")
    print(f"Records:       {result.records_imported:,}")
    print(f"Errors:        {result.errors_encountered}")
    print(f"Archives:      {result.archives_processed}")
    print(f"Duration:      {result.duration_seconds:.1f}s")
    if result.error:
        print(f"Cause:         {result.error}")

    if result.issue_summary:
        print("\nSkipped Entries:")
        for issue_type, count in result.issue_summary.items():
            print(f"  {issue_type}: {count}")


def main():
    parser = argparse.ArgumentParser(
        description="Import archives of binary files into the record store"
    )

    parser.add_argument(
        'archives',
        nargs='*',
        help='Archive files to import; the file name selects the mapper and file type'
    )

    # Mode selection
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        '--preview',
        action='store_true',
        help='List the first entries of each archive without importing'
    )
    group.add_argument(
        '--status',
        type=str,
        help='Check status of import by import_id'
    )
    group.add_argument(
        '--list-active',
        action='store_true',
        help='List active imports'
    )
    group.add_argument(
        '--create-schema',
        action='store_true',
        help='Create missing tables and exit'
    )

    # Options
    parser.add_argument(
        '--import-user',
        type=str,
        default=IMPORT_USER,
        help='Full name of the person imports are attributed to (default: IMPORT_USER)'
    )
    parser.add_argument(
        '--file-type',
        type=parse_file_type,
        action='append',
        default=[],
        metavar='NAME=VALUE',
        help='Declare a file type: VALUE is "Database" or a filesystem root path (repeatable)'
    )
    parser.add_argument(
        '--batch-size',
        type=int,
        default=None,
        help='Files per committed batch (default: IMPORT_REPORTING_NUMBER)'
    )

    args = parser.parse_args()

    if args.create_schema:
        init_schema()
        print("Schema created.")
        return

    if args.preview:
        if not args.archives:
            parser.error("--preview needs at least one archive")
        try:
            for path in args.archives:
                show_preview(path)
        except ArchiveUnreadableError as e:
            print(f"ERROR: {e}")
            sys.exit(1)
        return

    if not (args.status or args.list_active or args.archives):
        parser.error("No archives given")

    file_types = dict(BINARY_FILE_TYPES)
    file_types.update(dict(args.file_type))

    exit_code = 0
    start_time = datetime.now()

    with get_db_session() as session:
        if args.list_active:
            list_active_imports(session)
            return

        if args.status:
            check_status(args.status, session)
            return

        print(f"\nImporting {len(args.archives)} archive(s)\n")
        try:
            importer = ArchiveImporter(
                session=session,
                file_types=file_types,
                reporting_number=args.batch_size,
                progress_callback=print_progress
            )
            result = importer.import_archives(
                args.archives,
                {IMPORT_USER_SETTING: args.import_user}
            )
            print()  # New line after progress bar
            print_result(result)

        except ImportFailedError as e:
            print()
            logger.error(f"Import failed: {e}")
            print_result(e.result)
            exit_code = 1

        except (ConfigurationError, ArchiveUnreadableError) as e:
            print(f"ERROR: {e}")
            exit_code = 1

    elapsed = (datetime.now() - start_time).total_seconds()
    print(f"\nTotal time: {elapsed:.1f}s")
    sys.exit(exit_code)


if __name__ == '__main__':
    main()
