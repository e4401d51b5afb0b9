"""
Entity Cross-Reference for archive imports
Maps external foreign ids (embedded in archive file names) to internal person keys.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple, Union

logger = logging.getLogger(__name__)

_INTEGER_PATTERN = re.compile(r'^[+-]?\d+$')


@dataclass(frozen=True)
class EntityKeys:
    """Internal identities for one external foreign id."""
    foreign_id: int
    entity_id: int  # person alias id
    owner_id: int  # person id


def parse_foreign_id(value: Optional[str]) -> Optional[int]:
    """
    Parse an integer foreign id.

    Args:
        value: Text such as an archive file name stem ("1001")

    Returns:
        The integer, or None when the text is not an integer
    """
    if value is None:
        return None
    value = value.strip()
    if not _INTEGER_PATTERN.match(value):
        return None
    return int(value)


class EntityKeyTable:
    """
    Read-only lookup of foreign id -> EntityKeys, built once per import run.

    When several aliases carry the same foreign id the first one
    (lowest alias id) wins.
    """

    def __init__(self, keys: Dict[int, EntityKeys]):
        self._keys = dict(keys)
        self._stats = {
            'matched': 0,
            'not_found': 0
        }

    @classmethod
    def build(
        cls,
        rows: Iterable[Tuple[Union[str, int, None], int, int]]
    ) -> "EntityKeyTable":
        """
        Build the table from (foreign_id, entity_id, owner_id) rows.

        Rows whose foreign id is not an integer are ignored.
        """
        keys: Dict[int, EntityKeys] = {}
        ignored = 0
        for foreign_id, entity_id, owner_id in rows:
            parsed = foreign_id if isinstance(foreign_id, int) else parse_foreign_id(foreign_id)
            if parsed is None:
                ignored += 1
                continue
            if parsed in keys:
                logger.debug(
                    f"Duplicate foreign id {parsed}: keeping alias {keys[parsed].entity_id}, "
                    f"ignoring alias {entity_id}"
                )
                continue
            keys[parsed] = EntityKeys(foreign_id=parsed, entity_id=entity_id, owner_id=owner_id)

        if ignored:
            logger.debug(f"Ignored {ignored} aliases with non-integer foreign ids")
        return cls(keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, foreign_id: int) -> bool:
        return foreign_id in self._keys

    @property
    def stats(self) -> Dict[str, int]:
        """Get lookup statistics."""
        return self._stats.copy()

    def lookup(self, foreign_id: Optional[int]) -> Optional[EntityKeys]:
        """Keys for a foreign id, or None."""
        if foreign_id is None:
            return None
        keys = self._keys.get(foreign_id)
        if keys is None:
            self._stats['not_found'] += 1
        else:
            self._stats['matched'] += 1
        return keys

