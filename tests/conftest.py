"""
Shared pytest fixtures.

Uses a SQLite database so no Postgres is required for tests. GitHub, the
Slack bot and the chart renderer are replaced with in-memory fakes.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_goodday.db")
os.environ.setdefault("GH_API_KEY", "test-token")

import itertools
import threading
from datetime import date, datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from goodday.core.dependencies import get_notifier, get_renderer, get_store
from goodday.core.errors import NotificationError, PathIsDirectoryError, PublishError, RenderError
from goodday.db.base import Base, get_db
from goodday.main import app
from goodday.models.user import User
from goodday.services.publisher import StoredFile
from goodday.services.window import window_for

SQLITE_URL = "sqlite:///./test_goodday.db"

engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Monday 2024-01-22 13:00 UTC: the report covers Sunday 2024-01-14 .. Saturday 2024-01-20.
REPORT_NOW = datetime(2024, 1, 22, 13, 0, tzinfo=timezone.utc)
WEEK_START = date(2024, 1, 14)


class FakeStore:
    """In-memory FileStore with GitHub's sha-conditional write semantics."""

    def __init__(self):
        self.files: dict[tuple[str, str, str], StoredFile] = {}
        self.directories: set[tuple[str, str, str]] = set()
        self.failing_writes: set[str] = set()
        self.writes: list[tuple[str, str, str, str]] = []
        self._shas = itertools.count(1)
        self._lock = threading.Lock()

    def put(self, owner, repo, path, text):
        with self._lock:
            sha = f"sha-{next(self._shas)}"
            self.files[(owner, repo, path)] = StoredFile(path=path, sha=sha, content=text.encode("utf-8"))
        return sha

    def text(self, owner, repo, path):
        return self.files[(owner, repo, path)].text

    def read_file(self, owner, repo, path):
        if (owner, repo, path) in self.directories:
            raise PathIsDirectoryError(path)
        return self.files.get((owner, repo, path))

    def write_file(self, owner, repo, path, content, message, sha=None):
        with self._lock:
            if path in self.failing_writes:
                raise PublishError(path, "403 forbidden")
            current = self.files.get((owner, repo, path))
            if (current.sha if current else None) != sha:
                raise PublishError(path, "409 sha does not match")
            new_sha = f"sha-{next(self._shas)}"
            self.files[(owner, repo, path)] = StoredFile(path=path, sha=new_sha, content=content)
            self.writes.append((owner, repo, path, message))
        return new_sha


class FakeNotifier:
    def __init__(self):
        self.summaries: list[str] = []
        self.prompts: list[str] = []
        self.failing: set[str] = set()
        self._lock = threading.Lock()

    def notify_summary(self, slackid):
        if slackid in self.failing:
            raise NotificationError(slackid, "502 Bad Gateway")
        with self._lock:
            self.summaries.append(slackid)

    def prompt(self, slackid):
        if slackid in self.failing:
            raise NotificationError(slackid, "502 Bad Gateway")
        with self._lock:
            self.prompts.append(slackid)


class FakeRenderer:
    def __init__(self):
        self.failing: set[str] = set()

    def render(self, spec):
        if spec.filename in self.failing:
            raise RenderError(spec.filename, "boom")
        return b"\x89PNG\r\n\x1a\n" + spec.filename.encode()



def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.query(User).delete()
        db.commit()
        db.close()


@pytest.fixture()
def store():
    return FakeStore()


@pytest.fixture()
def notifier():
    return FakeNotifier()


@pytest.fixture()
def renderer():
    return FakeRenderer()


@pytest.fixture()
def week():
    return window_for(REPORT_NOW, "UTC")


@pytest.fixture()
def client(db, store, notifier, renderer):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_renderer] = lambda: renderer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
