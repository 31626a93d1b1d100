"""
Shared fixtures for MarkShare tests.
Every test gets a fresh in-memory SQLite database; no network calls.
"""
import os

# Must be set before markshare.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["OPENAI_API_KEY"] = ""

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from markshare import models  # noqa: F401
from markshare.core.database import Base, configure_sqlite, get_db
from markshare.core.security import create_access_token, hash_password
from markshare.main import app
from markshare.models.exam import Exam
from markshare.models.school_class import SchoolClass
from markshare.models.student import Student
from markshare.models.subject import Subject
from markshare.models.user import User, UserRole

TEST_PASSWORD = "password123"


@pytest.fixture
def engine():
    """In-memory SQLite shared by every session of one test."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(test_engine)
    Base.metadata.create_all(test_engine)
    yield test_engine
    Base.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, class_=Session, expire_on_commit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    """A session for service-level tests. Closed before the database is dropped."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def school(db):
    """Two classes, three subjects, two exams and five students, committed."""
    sixth = SchoolClass(name="6th Standard")
    second = SchoolClass(name="2nd Standard")
    math = Subject(name="Math")
    science = Subject(name="Science")
    english = Subject(name="English")
    unit_test = Exam(name="Unit Test (25 Marks)", total_marks=25)
    semester = Exam(name="Semester 1", total_marks=100)
    db.add_all([sixth, second, math, science, english, unit_test, semester])
    db.flush()

    names = ["Aryan Patil", "Sneha Deshmukh", "Rahul Sharma", "Neha Rane"]
    students = {name: Student(name=name, class_id=sixth.id) for name in names}
    students["Kahrat Om"] = Student(name="Kahrat Om", class_id=second.id)
    db.add_all(students.values())
    db.commit()

    return SimpleNamespace(
        sixth=sixth,
        second=second,
        math=math,
        science=science,
        english=english,
        unit_test=unit_test,
        semester=semester,
        students=students,
    )


@pytest.fixture
def users(db):
    admin = User(
        name="System Administrator",
        username="admin",
        password_hash=hash_password(TEST_PASSWORD),
        role=UserRole.ADMIN,
    )
    teacher = User(
        name="Class Teacher",
        username="teacher",
        password_hash=hash_password(TEST_PASSWORD),
        role=UserRole.TEACHER,
    )
    db.add_all([admin, teacher])
    db.commit()
    return SimpleNamespace(admin=admin, teacher=teacher)


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(user.id, user.username, user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(users):
    return auth_headers(users.admin)


@pytest.fixture
def teacher_headers(users):
    return auth_headers(users.teacher)


@pytest.fixture
def client(session_factory):
    """
    API client whose requests each get their own session.
    Tests using it should not hold an open transaction on ``db`` across requests.
    """

    def override_get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


class FakeCompletions:
    """Stands in for ``client.chat.completions`` of the OpenAI SDK."""

    def __init__(self, content: str | None = None, error: Exception | None = None):
        self.content = content
        self.error = error
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def fake_openai():
    """Factory for an object shaped like an ``openai.OpenAI`` client."""

    def build(content: str | None = None, error: Exception | None = None):
        completions = FakeCompletions(content=content, error=error)
        return SimpleNamespace(chat=SimpleNamespace(completions=completions))

    return build
