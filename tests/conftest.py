"""
Binary File Importer - pytest Configuration and Fixtures

Provides shared test fixtures for:
- In-memory SQLite record store with the full schema
- Seeded people with foreign-keyed aliases
- A zip archive builder for import tests
"""

import zipfile
from datetime import datetime
from typing import Iterable, Tuple

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from models import Base, Person, PersonAlias


# ============================================================================
# Record Store Fixtures
# ============================================================================

@pytest.fixture
def engine():
    """
    In-memory SQLite engine with all tables created.

    StaticPool keeps a single connection so every session sees the same database.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    """ORM session on the in-memory record store."""
    session = Session(bind=engine, expire_on_commit=False)
    yield session
    session.close()


@pytest.fixture
def people(session):
    """
    Seeded people.

    Returns:
        Dict of foreign id -> Person for the Decker family, plus 'admin'
        (no foreign id) under the key 'admin'
    """
    admin = Person(person_id=1, first_name='Admin', last_name='Admin')
    admin.aliases.append(PersonAlias(person_alias_id=1))

    ted = Person(person_id=55, first_name='Ted', nick_name='Teddy', last_name='Decker')
    ted.aliases.append(PersonAlias(person_alias_id=10, foreign_id='1001'))

    cindy = Person(person_id=56, first_name='Cindy', last_name='Decker')
    cindy.aliases.append(PersonAlias(person_alias_id=11, foreign_id='1002'))

    noah = Person(person_id=57, first_name='Noah', last_name='Decker')
    noah.aliases.append(PersonAlias(person_alias_id=12, foreign_id='1003'))

    session.add_all([admin, ted, cindy, noah])
    session.commit()

    return {
        'admin': admin,
        1001: ted,
        1002: cindy,
        1003: noah,
    }


# ============================================================================
# Archive Fixtures
# ============================================================================

@pytest.fixture
def make_archive(tmp_path):
    """
    Build a zip archive in a temp directory.

    Usage:
        path = make_archive("Person Image", [
            ("1001.jpg", datetime(2020, 1, 1, 10, 0), b"jpeg bytes"),
        ])

    Zip timestamps have two-second resolution, so tests use whole minutes.
    """
    def _make(name: str, entries: Iterable[Tuple[str, datetime, bytes]]) -> str:
        path = tmp_path / f"{name}.zip"
        with zipfile.ZipFile(path, 'w', compression=zipfile.ZIP_DEFLATED) as zip_file:
            for entry_name, modified, content in entries:
                info = zipfile.ZipInfo(entry_name, date_time=modified.timetuple()[:6])
                info.compress_type = zipfile.ZIP_DEFLATED
                zip_file.writestr(info, content)
        return str(path)

    return _make
