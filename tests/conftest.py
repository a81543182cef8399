import os
import sys
from datetime import date
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker


# Ensure `import backend.interview_scheduler...` works regardless of where pytest is run from.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Must be set before the package's config module is imported.
os.environ["DISABLE_DOTENV"] = "1"
os.environ["NOTIFICATIONS_ENABLED"] = "0"

TODAY = date(2030, 1, 1)


class RecordingSink:
    """Notification sink that remembers what it was asked to send."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.events: list[tuple[str, dict]] = []

    def session_scheduled(self, session: dict) -> None:
        self.events.append(("session_scheduled", session))
        if self.fail:
            raise RuntimeError("SMTP down")

    def session_cancelled(self, session: dict) -> None:
        self.events.append(("session_cancelled", session))
        if self.fail:
            raise RuntimeError("SMTP down")


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory: pytest.TempPathFactory) -> Path:
    return tmp_path_factory.mktemp("db") / "test.sqlite3"


@pytest.fixture()
def app(test_db_path: Path) -> FastAPI:
    """
    Create a FastAPI app wired to a temporary SQLite DB.

    We intentionally do NOT import `main` so startup never touches the dev database.
    """
    os.environ["DATABASE_URL"] = f"sqlite+pysqlite:///{test_db_path}"

    from backend.interview_scheduler import database as db

    engine = db.build_engine(os.environ["DATABASE_URL"])
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    # Patch the shared database module so router dependencies use the test DB.
    db.engine = engine
    db.SessionLocal = TestingSessionLocal

    # Import models so Base metadata is populated, then create tables.
    from backend.interview_scheduler import models  # noqa: F401

    db.Base.metadata.drop_all(bind=engine)
    db.init_db(engine)

    from backend.interview_scheduler.api import availability as availability_api
    from backend.interview_scheduler.api import interviews as interviews_api
    from backend.interview_scheduler.utils.error_handlers import AppError, app_error_handler

    fastapi_app = FastAPI()
    fastapi_app.add_exception_handler(AppError, app_error_handler)
    fastapi_app.include_router(availability_api.router)
    fastapi_app.include_router(interviews_api.router)

    yield fastapi_app

    engine.dispose()


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def db_session(app: FastAPI):
    """
    Direct SQLAlchemy session bound to the same temporary SQLite DB used by the test app.
    """
    from backend.interview_scheduler.database import SessionLocal

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def service(db_session, sink):
    from backend.interview_scheduler.services.scheduling import SchedulingService

    return SchedulingService(db_session, notifier=sink, today=lambda: TODAY)


@pytest.fixture()
def make_user(db_session):
    from backend.interview_scheduler.models import User, UserRole, UserStatus

    counter = {"n": 0}

    def _make(role: str = "INTERVIEW_PANELIST", *, name: str | None = None, status: str = "ACTIVE") -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            full_name=name or f"User {n}",
            email=f"user{n}@example.com",
            role=UserRole(role),
            status=UserStatus(status),
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def make_candidate(db_session):
    from backend.interview_scheduler.models import Candidate, CandidateStatus

    counter = {"n": 0}

    def _make(status: str = "ACTIVE") -> Candidate:
        counter["n"] += 1
        n = counter["n"]
        cand = Candidate(
            full_name=f"Student {n}",
            email=f"student{n}@example.com",
            mobile_number="9000000000",
            college_name="Test College",
            status=CandidateStatus(status),
        )
        db_session.add(cand)
        db_session.commit()
        db_session.refresh(cand)
        return cand

    return _make


@pytest.fixture()
def auth_headers():
    from backend.interview_scheduler.utils.jwt import create_access_token

    def _headers(user) -> dict:
        token = create_access_token({"sub": user.id, "role": user.role.value})
        return {"Authorization": f"Bearer {token}"}

    return _headers
