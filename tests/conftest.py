"""
Pytest configuration and fixtures for the test suite.
"""
import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Point the app at a throwaway database before importing it
os.environ["DATABASE_URL"] = "sqlite://"

from main import app
from db import get_db, make_engine
from models import Base
from services.folder_store import FolderStore
from services.note_index import NoteIndex


engine = make_engine("sqlite://", poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""

    def override_get_db_with_session():
        yield db

    app.dependency_overrides[get_db] = override_get_db_with_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def folders(db: Session) -> FolderStore:
    return FolderStore(db)


@pytest.fixture
def notes(db: Session) -> NoteIndex:
    return NoteIndex(db)


@pytest.fixture
def sample_tree(folders: FolderStore, notes: NoteIndex):
    """
    Inbox
    ├── Archive
    │   └── 2023        (note: Old)
    └── Work            (notes: Draft, Plan)
    Personal            (note: Diary)
    """
    inbox = folders.create("Inbox")
    work = folders.create("Work", inbox.id)
    archive = folders.create("Archive", inbox.id)
    y2023 = folders.create("2023", archive.id)
    personal = folders.create("Personal")
    notes.create(work.id, "Draft", "first")
    notes.create(work.id, "Plan")
    notes.create(y2023.id, "Old")
    notes.create(personal.id, "Diary")
    return {
        "inbox": inbox.id,
        "work": work.id,
        "archive": archive.id,
        "2023": y2023.id,
        "personal": personal.id,
    }
