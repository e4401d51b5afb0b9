"""
Unit Tests: Mapper Registry
Tests for mapper resolution by archive name and the fallback mapper.
"""

import logging
from unittest.mock import MagicMock

import pytest

from importer.mapper_registry import MapperRegistry, default_registry
from importer.mappers import CategoryMapper, FallbackMapper, guess_mime_type
from importer.person_image import PersonImageMapper


class NamedMapper(CategoryMapper):
    def __init__(self, name):
        self.name = name


class TestMapperRegistry:
    """Tests for MapperRegistry."""

    def test_resolve_by_normalized_prefix(self):
        mapper = NamedMapper("Person Image")
        registry = MapperRegistry([mapper])

        assert registry.resolve("Person Image") is mapper
        assert registry.resolve("PersonImage Export 2020") is mapper

    def test_first_registered_wins_between_prefixes(self):
        """Overlapping prefixes resolve in registration order."""
        person = NamedMapper("Person")
        person_image = NamedMapper("Person Image")
        registry = MapperRegistry([person, person_image])

        assert registry.resolve("Person Image") is person

    def test_unmatched_name_returns_fallback_and_warns(self, caplog):
        registry = MapperRegistry([NamedMapper("Person Image")])

        with caplog.at_level(logging.WARNING, logger="importer.mapper_registry"):
            mapper = registry.resolve("Documents")

        assert registry.is_fallback(mapper)
        assert isinstance(mapper, FallbackMapper)
        assert "Documents" in caplog.text

    def test_custom_fallback(self):
        fallback = NamedMapper("Anything")
        registry = MapperRegistry(fallback=fallback)

        assert registry.resolve("Documents") is fallback

    def test_duplicate_registration_raises(self):
        registry = MapperRegistry([NamedMapper("Person Image")])

        with pytest.raises(ValueError):
            registry.register(NamedMapper("PersonImage"))

    def test_unnamed_mapper_raises(self):
        with pytest.raises(ValueError):
            MapperRegistry([NamedMapper("  ")])

    def test_handlers_are_inspectable(self):
        mapper = NamedMapper("Person Image")
        registry = MapperRegistry([mapper])

        assert registry.handlers == [("PersonImage", mapper)]

    def test_default_registry_has_person_image(self):
        registry = default_registry()

        assert isinstance(registry.resolve("Person Image"), PersonImageMapper)


class TestFallbackMapper:
    """Tests for FallbackMapper."""

    def test_records_unmapped_issue_and_imports_nothing(self):
        archive = MagicMock()
        archive.display_name = "Documents"
        archive.count_entries.return_value = 12
        context = MagicMock()
        progress = MagicMock()

        count = FallbackMapper().map(archive, None, context, progress)

        assert count == 0
        context.record_issue.assert_called_once()
        issue_type, entry_name, description = context.record_issue.call_args[0]
        assert issue_type == "UNMAPPED"
        assert entry_name == "Documents"
        assert "12" in description
        progress.report.assert_called_once_with(100, "Skipped Documents: no mapper.")

    def test_base_mapper_map_not_implemented(self):
        with pytest.raises(NotImplementedError):
            CategoryMapper().map(None, None, None, None)


class TestGuessMimeType:
    """Tests for guess_mime_type()."""

    @pytest.mark.parametrize("file_name,expected", [
        ("1001.jpg", "image/jpeg"),
        ("1001.PNG", "image/png"),
        ("1001.gif", "image/gif"),
        ("1001.pdf", "application/pdf"),
        ("1001", "application/octet-stream"),
    ])
    def test_guess(self, file_name, expected):
        assert guess_mime_type(file_name) == expected
