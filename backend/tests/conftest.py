import os
import tempfile
from pathlib import Path
from types import SimpleNamespace

import pytest

# Point the module-level engine at a throwaway file before the app is imported.
os.environ["DATABASE_URL"] = f"sqlite:///{Path(tempfile.gettempdir()) / 'studyplanner-test.db'}"
os.environ["ENV"] = "dev"

from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlmodel import Session, create_engine, select

from studyplanner import models
from studyplanner.auth import verify_session
from studyplanner.config import settings
from studyplanner.database import create_db_and_tables, get_engine
from studyplanner.generator import ScheduleGenerator, get_generator
from studyplanner.main import app
from studyplanner.services import PWD_CTX

MONDAY_MATH = '[{"dayOfWeek":"Monday","startTime":"09:00","endTime":"11:00","subject":"Math"}]'


class FakeChatClient:
    """Stands in for `openai.OpenAI`: returns `reply` or raises `error`."""

    def __init__(self, reply: str = "[]", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create a fresh SQLite file database for each test."""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def fake_model():
    return FakeChatClient(reply=MONDAY_MATH)


@pytest.fixture(scope="function")
def client(db_engine, fake_model):
    """TestClient wired to the per-test database and the fake model."""
    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_generator] = lambda: ScheduleGenerator(client=fake_model, model="test-model", timeout=5)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_user(engine, name="Ada", email="ada@example.com", password="secret", daily_focus_hours=None) -> int:
    """Insert a user row directly and return its id."""
    with Session(engine) as session:
        user = models.User(
            name=name,
            email=email,
            password_hash=PWD_CTX.hash(password),
            daily_focus_hours=daily_focus_hours,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user.id


def register(client, name="Ada", email="ada@example.com", password="secret"):
    return client.post(
        "/register",
        data={"name": name, "email": email, "password": password},
        follow_redirects=False,
    )


def current_user_id(client) -> int:
    return verify_session(client.cookies[settings.SESSION_COOKIE_NAME]).user_id


def schedule_rows(engine, user_id):
    """Return the user's items in insertion (id) order."""
    with Session(engine) as session:
        items = session.exec(
            select(models.ScheduleItem)
            .where(models.ScheduleItem.user_id == user_id)
            .order_by(models.ScheduleItem.id)
        ).all()
        return [(it.day_of_week.value, it.start_time.strftime("%H:%M"), it.end_time.strftime("%H:%M"), it.subject) for it in items]


def focus_hours(engine, user_id):
    with Session(engine) as session:
        return session.get(models.User, user_id).daily_focus_hours
