"""
SQLAlchemy ORM Models: Person and PersonAlias
People that imported assets are attached to, and the aliases that carry
their identifier in the external system the archive was exported from.
"""

from sqlalchemy import String, Integer, ForeignKey, DateTime, Index, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from models.base import Base
from datetime import datetime
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from models.orm_binary_file import BinaryFile


class Person(Base):
    __tablename__ = "people"
    __table_args__ = {'extend_existing': True}

    # Primary Key
    person_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Basic Information
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    nick_name: Mapped[Optional[str]] = mapped_column(String(50))
    last_name: Mapped[str] = mapped_column(String(50), nullable=False, default='')

    # Primary photo back-reference, set when a person image is imported
    photo_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("binary_files.binary_file_id", use_alter=True, name="fk_people_photo"),
        nullable=True,
        comment="Primary photo (binary_files.binary_file_id)"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now()
    )

    # Relationships
    aliases: Mapped[List["PersonAlias"]] = relationship(
        "PersonAlias",
        back_populates="person",
        order_by="PersonAlias.person_alias_id"
    )
    photo: Mapped[Optional["BinaryFile"]] = relationship(
        "BinaryFile",
        foreign_keys=[photo_id]
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def primary_alias_id(self) -> Optional[int]:
        """Alias id used when recording who created a row."""
        return self.aliases[0].person_alias_id if self.aliases else None

    def __repr__(self) -> str:
        return f"<Person(person_id={self.person_id}, name='{self.full_name}')>"


class PersonAlias(Base):
    """
    Alias of a person.

    foreign_id holds the identifier from the external system; aliases with an
    integer foreign_id are the rows the entity cross-reference is built from.
    """
    __tablename__ = "person_aliases"

    person_alias_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    person_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("people.person_id", ondelete="CASCADE"),
        nullable=False
    )

    foreign_id: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="Identifier in the external system"
    )

    __table_args__ = (
        Index('idx_person_alias_foreign', 'foreign_id'),
        {'extend_existing': True}
    )

    person: Mapped["Person"] = relationship("Person", back_populates="aliases")

    def __repr__(self) -> str:
        return (
            f"<PersonAlias(person_alias_id={self.person_alias_id}, "
            f"person_id={self.person_id}, foreign_id='{self.foreign_id}')>"
        )
