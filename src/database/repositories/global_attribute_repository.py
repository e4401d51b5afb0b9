"""
Repository: Global Attributes
Site-wide settings, including the content file type blacklist.
"""

import re
from typing import FrozenSet, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select

from models.orm_global_attribute import GlobalAttribute
from utils.config import BLACKLIST_ATTRIBUTE_KEY


def normalize_extension_list(value: Optional[str]) -> FrozenSet[str]:
    """
    Normalize a ',' or ';' separated extension list.

    Entries are lowercased and stripped of leading dots and spaces,
    so ".EXE; bat" becomes {"exe", "bat"}.
    """
    if not value:
        return frozenset()
    items = (item.strip().lstrip('. ').lower() for item in re.split(r'[,;]', value))
    return frozenset(item for item in items if item)


class GlobalAttributeRepository:
    """Repository for GlobalAttribute lookups."""

    def __init__(self, session: Session):
        self.session = session

    def get_value(self, key: str, default: Optional[str] = None) -> Optional[str]:
        stmt = select(GlobalAttribute.value).where(GlobalAttribute.key == key)
        value = self.session.execute(stmt).scalar_one_or_none()
        return value if value is not None else default

    def set_value(self, key: str, value: Optional[str]) -> GlobalAttribute:
        stmt = select(GlobalAttribute).where(GlobalAttribute.key == key)
        attribute = self.session.execute(stmt).scalar_one_or_none()
        if attribute is None:
            attribute = GlobalAttribute(key=key, value=value)
            self.session.add(attribute)
        else:
            attribute.value = value
        self.session.flush()
        return attribute

    def get_file_type_blacklist(self) -> FrozenSet[str]:
        """Disallowed content file extensions (lowercase, no leading dot)."""
        return normalize_extension_list(self.get_value(BLACKLIST_ATTRIBUTE_KEY, ''))
