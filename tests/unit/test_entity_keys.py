"""
Unit Tests: Entity Keys
Tests for foreign id parsing and the EntityKeyTable lookup.
"""

import pytest

from importer.entity_keys import EntityKeys, EntityKeyTable, parse_foreign_id
from database.repositories.person_repository import PersonRepository


class TestParseForeignId:
    """Tests for parse_foreign_id()."""

    @pytest.mark.parametrize("value,expected", [
        ("1001", 1001),
        (" 42 ", 42),
        ("-7", -7),
        ("+8", 8),
        ("0042", 42),
    ])
    def test_integers_parse(self, value, expected):
        assert parse_foreign_id(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", "1001a", "10.5", "1 001", "photo_1001"])
    def test_non_integers_return_none(self, value):
        assert parse_foreign_id(value) is None


class TestEntityKeyTable:
    """Tests for EntityKeyTable."""

    def test_build_and_lookup(self):
        table = EntityKeyTable.build([
            ("1001", 10, 55),
            ("1002", 11, 56),
        ])

        assert len(table) == 2
        assert 1001 in table
        assert table.lookup(1001) == EntityKeys(foreign_id=1001, entity_id=10, owner_id=55)

    def test_lookup_missing_returns_none(self):
        table = EntityKeyTable.build([("1001", 10, 55)])

        assert table.lookup(9999) is None
        assert table.lookup(None) is None

    def test_non_integer_foreign_ids_are_ignored(self):
        """Aliases whose foreign id is not an integer never match."""
        table = EntityKeyTable.build([
            ("abc", 10, 55),
            (None, 11, 56),
            ("1003", 12, 57),
        ])

        assert len(table) == 1
        assert 1003 in table

    def test_first_duplicate_wins(self):
        """When several aliases carry the same foreign id the first row is kept."""
        table = EntityKeyTable.build([
            ("1001", 10, 55),
            ("1001", 20, 99),
        ])

        assert table.lookup(1001).owner_id == 55

    def test_integer_rows_accepted(self):
        table = EntityKeyTable.build([(1001, 10, 55)])

        assert table.lookup(1001).entity_id == 10

    def test_stats_count_lookups(self):
        table = EntityKeyTable.build([("1001", 10, 55)])

        table.lookup(1001)
        table.lookup(1001)
        table.lookup(2002)

        assert table.stats == {'matched': 2, 'not_found': 1}

    def test_build_from_person_repository(self, session, people):
        """Rows from PersonRepository.list_foreign_keyed() build the table."""
        table = EntityKeyTable.build(PersonRepository(session).list_foreign_keyed())

        assert len(table) == 3
        assert table.lookup(1001) == EntityKeys(foreign_id=1001, entity_id=10, owner_id=55)
        assert table.lookup(1003).owner_id == 57
