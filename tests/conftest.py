"""Shared pytest fixtures and test utilities for Doc-Ref tests."""

import os
import tempfile
from typing import Generator

import pytest

from docref.relations.graph import DocumentGraph
from docref.storage.database import Database
from docref.storage.store import SqlDocumentStore, TargetQuery
from tests.models import Group, Person, Post, Preference, build_registry


class CountingStore(SqlDocumentStore):
    """SqlDocumentStore that records every fetch it performs."""

    def __init__(self, session):
        super().__init__(session)
        self.fetches: list[TargetQuery] = []

    def find(self, query: TargetQuery):
        self.fetches.append(query)
        return super().find(query)


@pytest.fixture(scope="function")
def temp_db() -> Generator[Database, None, None]:
    """
    Create a temporary SQLite database for testing.

    Yields:
        Database instance with tables created
    """
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    database = Database(f"sqlite:///{db_path}")
    database.create_tables()

    yield database

    # Cleanup
    database.drop_tables()
    database.dispose()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def db_session(temp_db):
    """Get a database session from temp_db."""
    with temp_db.session() as session:
        yield session


@pytest.fixture
def registry():
    """Relationship registry for the test models."""
    return build_registry()


@pytest.fixture
def store(db_session):
    """Store that counts its fetches."""
    return CountingStore(db_session)


@pytest.fixture
def graph(registry, store):
    """Document graph bound to the test session."""
    return DocumentGraph(registry, store, validate=True)


@pytest.fixture
def person(db_session):
    """A stored person with no relationships."""
    person = Person(id="person-1", name="Ada")
    db_session.add(person)
    db_session.flush()
    return person


@pytest.fixture
def stored_posts(db_session):
    """Three stored posts, not yet linked to anyone."""
    posts = [Post(id=f"post-{i}", title=f"Post {i}", status="draft") for i in range(1, 4)]
    db_session.add_all(posts)
    db_session.flush()
    return posts


@pytest.fixture
def stored_groups(db_session):
    """Two stored groups, not yet linked to anyone."""
    groups = [Group(id="group-1", name="Readers"), Group(id="group-2", name="Writers")]
    db_session.add_all(groups)
    db_session.flush()
    return groups


@pytest.fixture
def stored_preferences(db_session):
    """Two stored preferences."""
    preferences = [Preference(id="pref-1", name="VGA"), Preference(id="pref-2", name="HDMI")]
    db_session.add_all(preferences)
    db_session.flush()
    return preferences
