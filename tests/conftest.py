"""Shared test configuration and fixtures for EZ Forms tests"""

import logging
import os
import subprocess
import sys
import uuid
from pathlib import Path

from tests.config import test_config

# Must be set before ez_forms modules read configuration at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTH_DOMAIN", test_config["auth_domain"])

import pytest
from fastapi import HTTPException, status
from fastapi.testclient import TestClient
from sqlalchemy import delete
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from ez_forms.auth.dependencies import get_current_user, get_current_user_optional
from ez_forms.auth.models import User
from ez_forms.main import app
from ez_forms.models.database import enable_sqlite_foreign_keys, get_db
from ez_forms.models.form import Form
from ez_forms.models.submission import Submission
from ez_forms.services.form_service import FormService
from ez_forms.services.submission_service import SubmissionService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _run_migrations(database_url: str):
    """Run Alembic migrations on the test database"""
    project_dir = Path(__file__).parent.parent
    alembic_ini = project_dir / "alembic.ini"

    env = os.environ.copy()
    env["DATABASE_URL"] = database_url

    result = subprocess.run(
        [sys.executable, "-m", "alembic", "-c", str(alembic_ini), "upgrade", "head"],
        cwd=project_dir,
        env=env,
        capture_output=True,
        text=True,
        timeout=60,
    )
    if result.returncode != 0:
        logger.error(f"Alembic migration failed: {result.stderr}")
        raise RuntimeError(f"Failed to run migrations: {result.stderr}")
    logger.info("Database schema setup completed successfully")


@pytest.fixture(scope="session")
def postgres_url():
    """PostgreSQL container URL, or None when running against SQLite"""
    if not test_config["use_postgres"]:
        yield None
        return

    from testcontainers.postgres import PostgresContainer

    with PostgresContainer(test_config["postgres_image"]) as postgres:
        database_url = postgres.get_connection_url()
        _run_migrations(database_url)
        yield database_url


@pytest.fixture
def db_engine(postgres_url):
    if postgres_url:
        engine = create_engine(postgres_url)
        yield engine
        with Session(engine) as session:
            session.execute(delete(Submission))
            session.execute(delete(Form))
            session.commit()
        engine.dispose()
        return

    # One shared in-memory database per test; TestClient runs handlers on another thread
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def _db_session(db_engine):
    """Private DB session for fixtures only.

    Prefer the service fixtures (`form_service`, `submission_service`) in
    tests to avoid coupling them to session internals.
    """
    session = Session(db_engine)
    yield session
    session.close()


@pytest.fixture
def form_service(_db_session):
    return FormService(_db_session)


@pytest.fixture
def submission_service(_db_session, form_service):
    return SubmissionService(_db_session, form_service)


@pytest.fixture
def make_user():
    """Factory for requester identities"""

    def _make_user(email: str | None = None) -> User:
        user_id = f"auth0|{uuid.uuid4().hex}"
        return User(
            user_id=user_id,
            email=email if email is not None else f"{user_id[6:14]}@example.com",
            claims={"iss": f"https://{test_config['auth_domain']}/"},
        )

    return _make_user


class IdentityStub:
    """Identity the overridden auth dependencies will report; None means anonymous"""

    def __init__(self):
        self.user = None


@pytest.fixture
def api_client(_db_session):
    """Test client using the test database with a switchable requester identity"""
    original_overrides = app.dependency_overrides.copy()
    identity = IdentityStub()

    async def override_current_user():
        if identity.user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required",
                headers={"WWW-Authenticate": "Bearer"},
            )
        return identity.user

    async def override_current_user_optional():
        return identity.user

    def get_test_db():
        return _db_session

    app.dependency_overrides.clear()
    app.dependency_overrides[get_current_user] = override_current_user
    app.dependency_overrides[get_current_user_optional] = override_current_user_optional
    app.dependency_overrides[get_db] = get_test_db

    client = TestClient(app)

    yield client, identity

    app.dependency_overrides.clear()
    app.dependency_overrides.update(original_overrides)
