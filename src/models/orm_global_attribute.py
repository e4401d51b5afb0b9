"""
SQLAlchemy ORM Model: Global Attribute
Site-wide key/value settings owned by the host record store.
"""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from models.base import Base
from typing import Optional


class GlobalAttribute(Base):
    __tablename__ = "global_attributes"
    __table_args__ = {'extend_existing': True}

    attribute_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    value: Mapped[Optional[str]] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<GlobalAttribute(key='{self.key}')>"
