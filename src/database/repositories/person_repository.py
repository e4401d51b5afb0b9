"""
Repository: People
Person lookups used by the importer: foreign-keyed aliases and the importing user.
"""

from typing import List, Optional, Tuple
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select, func

from models.orm_person import Person, PersonAlias


class PersonRepository:
    """Repository for Person and PersonAlias lookups."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, person_id: int) -> Optional[Person]:
        return self.session.get(Person, person_id)

    def list_foreign_keyed(self) -> List[Tuple[str, int, int]]:
        """
        Rows for the entity cross-reference.

        Returns:
            List of (foreign_id, person_alias_id, person_id) for every alias
            carrying a foreign id, in alias id order
        """
        stmt = (
            select(PersonAlias.foreign_id, PersonAlias.person_alias_id, PersonAlias.person_id)
            .where(PersonAlias.foreign_id.is_not(None))
            .order_by(PersonAlias.person_alias_id)
        )
        return [tuple(row) for row in self.session.execute(stmt).all()]

    def find_by_full_name(self, full_name: str, allow_first_name_only: bool = False) -> List[Person]:
        """
        Find people by "First Last" name.

        Args:
            full_name: Name to search for
            allow_first_name_only: Match on first or nick name when only one word is given

        Returns:
            Matching people in id order
        """
        parts = full_name.split()
        if not parts:
            return []

        stmt = select(Person).options(selectinload(Person.aliases)).order_by(Person.person_id)
        first = parts[0].lower()

        if len(parts) == 1:
            if not allow_first_name_only:
                return []
            stmt = stmt.where(
                (func.lower(Person.first_name) == first) | (func.lower(Person.nick_name) == first)
            )
        else:
            last = ' '.join(parts[1:]).lower()
            stmt = stmt.where(
                ((func.lower(Person.first_name) == first) | (func.lower(Person.nick_name) == first))
                & (func.lower(Person.last_name) == last)
            )

        return list(self.session.execute(stmt).scalars().all())

    def first(self) -> Optional[Person]:
        """The lowest-id person in the store."""
        stmt = (
            select(Person)
            .options(selectinload(Person.aliases))
            .order_by(Person.person_id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()
