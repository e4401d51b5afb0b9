"""
Mapper Registry: picks the mapper for an archive by name.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from importer.file_types import normalize_name
from importer.mappers import CategoryMapper, FallbackMapper
from importer.person_image import PersonImageMapper

logger = logging.getLogger(__name__)


class MapperRegistry:
    """
    Ordered prefix -> mapper table.

    resolve() returns the first registered mapper whose name (whitespace
    removed) starts the archive name (whitespace removed), or the fallback.
    Registration order decides between overlapping prefixes.
    """

    def __init__(
        self,
        mappers: Iterable[CategoryMapper] = (),
        fallback: Optional[CategoryMapper] = None
    ):
        self._handlers: List[Tuple[str, CategoryMapper]] = []
        self.fallback = fallback or FallbackMapper()
        for mapper in mappers:
            self.register(mapper)

    @property
    def handlers(self) -> List[Tuple[str, CategoryMapper]]:
        """Registered (normalized prefix, mapper) pairs in resolution order."""
        return list(self._handlers)

    def register(self, mapper: CategoryMapper) -> None:
        """
        Add a mapper after those already registered.

        Raises:
            ValueError: If the mapper has no name or its name is already registered
        """
        prefix = normalize_name(mapper.name)
        if not prefix:
            raise ValueError(f"Mapper {mapper!r} has no name")
        if any(existing == prefix for existing, _ in self._handlers):
            raise ValueError(f"A mapper for '{mapper.name}' is already registered")
        self._handlers.append((prefix, mapper))

    def resolve(self, item_name: str) -> CategoryMapper:
        normalized = normalize_name(item_name)
        for prefix, mapper in self._handlers:
            if normalized.startswith(prefix):
                return mapper

        logger.warning(f"No mapper for '{item_name}'; using {type(self.fallback).__name__}")
        return self.fallback

    def is_fallback(self, mapper: CategoryMapper) -> bool:
        return mapper is self.fallback


def default_registry() -> MapperRegistry:
    """Registry with every built-in mapper."""
    return MapperRegistry([PersonImageMapper()])
