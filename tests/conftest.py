import os

TEST_DB_FILE = "test_session_booking.db"
TEST_DB_URL = f"sqlite:///./{TEST_DB_FILE}"

# startup init_db() must land in the test database too
os.environ["SESSION_BOOKING_DATABASE_URL"] = TEST_DB_URL

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from session_booking.core.deps import get_db  # noqa: E402
from session_booking.core.security import hash_password  # noqa: E402
from session_booking.db.base import Base  # noqa: E402
from session_booking.main import app  # noqa: E402
from session_booking.models.activity import ActivityLog  # noqa: E402
from session_booking.models.booking import Booking  # noqa: E402
from session_booking.models.course import Course  # noqa: E402
from session_booking.models.enrollment import Enrollment  # noqa: E402
from session_booking.models.grade import Grade  # noqa: E402
from session_booking.models.lesson import LessonCompletion  # noqa: E402
from session_booking.models.setting import PluginSetting  # noqa: E402
from session_booking.models.slot import Slot  # noqa: E402
from session_booking.models.user import User  # noqa: E402

PASSWORD = "password123"

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def send(self, template_key, recipient_id, data):
        self.sent.append((template_key, recipient_id, data))
        return True


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


@pytest.fixture(autouse=True)
def seed_data():
    """
    Seed a clean minimal dataset for each test:
    one instructor, two students, one course (posting wait 10 days,
    on-hold after 40 days) with both students enrolled.
    """
    db = TestingSessionLocal()
    try:
        # Clear tables (child -> parent)
        for model in (
            Booking,
            Slot,
            Grade,
            ActivityLog,
            LessonCompletion,
            Enrollment,
            Course,
            PluginSetting,
            User,
        ):
            db.query(model).delete()
        db.commit()

        hashed = hash_password(PASSWORD)
        instructor = User(
            email="instructor1@example.com",
            full_name="Instructor One",
            role="instructor",
            hashed_password=hashed,
        )
        student1 = User(
            email="student1@example.com",
            full_name="Student One",
            role="student",
            hashed_password=hashed,
        )
        student2 = User(
            email="student2@example.com",
            full_name="Student Two",
            role="student",
            hashed_password=hashed,
        )
        db.add_all([instructor, student1, student2])
        db.commit()

        course = Course(
            title="PPL Ground and Flight",
            instructor_id=instructor.id,
            posting_wait_days=10,
            on_hold_period_days=40,
        )
        db.add(course)
        db.commit()

        db.add_all(
            [
                Enrollment(course_id=course.id, student_id=student1.id),
                Enrollment(course_id=course.id, student_id=student2.id),
            ]
        )
        db.commit()

        yield
    finally:
        db.close()


@pytest.fixture()
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def ids(db):
    """Primary keys of the seeded rows."""
    users = {u.email: u.id for u in db.query(User).all()}
    course = db.query(Course).first()
    return {
        "instructor": users["instructor1@example.com"],
        "student1": users["student1@example.com"],
        "student2": users["student2@example.com"],
        "course": course.id,
    }


@pytest.fixture()
def client():
    """Test client that uses the test DB session via dependency override."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def login(client, email: str, password: str = PASSWORD) -> str:
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers_for(client):
    def _headers(email: str) -> dict:
        return auth_header(login(client, email))

    return _headers


@pytest.fixture()
def instructor_headers(headers_for):
    return headers_for("instructor1@example.com")


@pytest.fixture()
def student_headers(headers_for):
    return headers_for("student1@example.com")
