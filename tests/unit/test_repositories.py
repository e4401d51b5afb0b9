"""
Unit Tests: Repositories
Tests for person, global attribute, import run and issue log repositories.
"""

from datetime import datetime

import pytest
from freezegun import freeze_time

from database.repositories.binary_file_type_repository import BinaryFileTypeRepository
from database.repositories.global_attribute_repository import (
    GlobalAttributeRepository,
    normalize_extension_list
)
from database.repositories.import_repository import ImportRunRepository
from database.repositories.issue_log_repository import ImportIssueRepository
from database.repositories.person_repository import PersonRepository


class TestPersonRepository:
    """Tests for PersonRepository."""

    def test_list_foreign_keyed_in_alias_order(self, session, people):
        rows = PersonRepository(session).list_foreign_keyed()

        assert rows == [('1001', 10, 55), ('1002', 11, 56), ('1003', 12, 57)]

    def test_find_by_full_name(self, session, people):
        matches = PersonRepository(session).find_by_full_name("cindy DECKER")

        assert [person.person_id for person in matches] == [56]

    def test_find_by_nick_name(self, session, people):
        matches = PersonRepository(session).find_by_full_name("Teddy Decker")

        assert [person.person_id for person in matches] == [55]

    def test_single_name_needs_opt_in(self, session, people):
        repo = PersonRepository(session)

        assert repo.find_by_full_name("Noah") == []
        assert [p.person_id for p in repo.find_by_full_name("Noah", allow_first_name_only=True)] == [57]

    def test_blank_name_matches_nobody(self, session, people):
        assert PersonRepository(session).find_by_full_name("   ") == []

    def test_first_person(self, session, people):
        person = PersonRepository(session).first()

        assert person.person_id == 1
        assert person.primary_alias_id == 1

    def test_first_person_empty_store(self, session):
        assert PersonRepository(session).first() is None


class TestGlobalAttributeRepository:
    """Tests for GlobalAttributeRepository and the blacklist."""

    @pytest.mark.parametrize("value,expected", [
        (None, frozenset()),
        ("", frozenset()),
        ("exe", frozenset({"exe"})),
        (".EXE, .bat", frozenset({"exe", "bat"})),
        ("exe;  .Com ;; ", frozenset({"exe", "com"})),
    ])
    def test_normalize_extension_list(self, value, expected):
        assert normalize_extension_list(value) == expected

    def test_set_and_get_value(self, session):
        repo = GlobalAttributeRepository(session)

        repo.set_value("ContentFiletypeBlacklist", "exe")
        repo.set_value("ContentFiletypeBlacklist", "exe,bat")

        assert repo.get_value("ContentFiletypeBlacklist") == "exe,bat"
        assert repo.get_file_type_blacklist() == frozenset({"exe", "bat"})

    def test_missing_value_returns_default(self, session):
        repo = GlobalAttributeRepository(session)

        assert repo.get_value("Missing") is None
        assert repo.get_value("Missing", "fallback") == "fallback"
        assert repo.get_file_type_blacklist() == frozenset()


class TestBinaryFileTypeRepository:
    """Tests for BinaryFileTypeRepository."""

    def test_create_with_attributes(self, session):
        repo = BinaryFileTypeRepository(session)

        file_type = repo.create(
            name="Person Image",
            storage_type="FILESYSTEM",
            attributes={"RootPath": "/srv/photos"}
        )

        assert file_type.binary_file_type_id is not None
        assert file_type.description == "Person Image"
        assert file_type.allow_caching is True
        assert repo.get_by_name("Person Image") is file_type
        assert file_type.get_attribute("RootPath") == "/srv/photos"

    def test_list_all_in_id_order(self, session):
        repo = BinaryFileTypeRepository(session)
        repo.create(name="B", storage_type="DATABASE")
        repo.create(name="A", storage_type="DATABASE")

        assert [file_type.name for file_type in repo.list_all()] == ["B", "A"]


class TestImportRunRepository:
    """Tests for ImportRunRepository lifecycle bookkeeping."""

    @pytest.fixture
    def repo(self, session):
        return ImportRunRepository(session)

    def test_create_pending_run(self, repo):
        run = repo.create("Person Image.zip", import_person_alias_id=1)

        assert run.import_id.startswith("imp_")
        assert len(run.import_id) == 20
        assert run.status == "PENDING"
        assert run.records_imported == 0
        assert run.is_active is True

    @freeze_time("2024-05-01 12:00:00")
    def test_start_and_complete(self, repo):
        run = repo.create("Person Image.zip")

        repo.start_import(run)
        assert run.status == "IN_PROGRESS"
        assert run.started_at.replace(tzinfo=None) == datetime(2024, 5, 1, 12, 0)

        repo.complete_import(run)
        assert run.status == "COMPLETED"
        assert run.completed_at.replace(tzinfo=None) == datetime(2024, 5, 1, 12, 0)
        assert run.is_active is False

    @freeze_time("2024-05-01 12:30:00")
    def test_fail_import(self, repo):
        run = repo.create("Person Image.zip")
        repo.start_import(run)

        repo.fail_import(run)

        assert run.status == "FAILED"
        assert run.completed_at.replace(tzinfo=None) == datetime(2024, 5, 1, 12, 30)
        assert run.is_active is False

    def test_update_progress_accumulates(self, repo):
        run = repo.create("Person Image.zip")

        repo.update_progress(run, "photos/1001.jpg", 100)
        repo.update_progress(run, "photos/1101.jpg", 50)
        repo.record_error(run)

        assert run.records_imported == 150
        assert run.last_processed_entry == "photos/1101.jpg"
        assert run.errors_encountered == 1

    def test_lookups(self, repo):
        first = repo.create("a.zip")
        second = repo.create("b.zip")
        repo.complete_import(second)

        assert repo.get_by_import_id(first.import_id) is first
        assert repo.get_by_id(second.run_id) is second
        assert repo.get_active_imports() == [first]
        assert repo.list_all() == [second, first]
        assert repo.count() == 2
        assert repo.count(status="COMPLETED") == 1

    @freeze_time("2024-05-01 13:00:00")
    def test_cancel_import(self, repo):
        run = repo.create("a.zip")

        assert repo.cancel_import(run.import_id) is True
        assert run.status == "CANCELLED"
        assert run.completed_at.replace(tzinfo=None) == datetime(2024, 5, 1, 13, 0)
        assert repo.cancel_import(run.import_id) is False
        assert repo.cancel_import("imp_missing") is False


class TestImportIssueRepository:
    """Tests for ImportIssueRepository."""

    def test_create_and_count(self, session):
        repo = ImportIssueRepository(session)
        repo.create("UNMATCHED", "9999.jpg", "No person", import_id="imp_a")
        repo.create("UNMATCHED", "9998.jpg", "No person", import_id="imp_a")
        repo.create("BLACKLISTED", "42.exe", "exe not allowed", import_id="imp_a")
        repo.create("UNMATCHED", "1.jpg", "No person", import_id="imp_b")

        assert repo.count_by_type("imp_a") == {"UNMATCHED": 2, "BLACKLISTED": 1}
        assert [issue.entry_name for issue in repo.get_by_import("imp_a", "UNMATCHED")] == \
            ["9999.jpg", "9998.jpg"]

    def test_long_entry_names_are_truncated(self, session):
        issue = ImportIssueRepository(session).create("UNMATCHED", "x" * 400, "No person")

        assert len(issue.entry_name) == 255
