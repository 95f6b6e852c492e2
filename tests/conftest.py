# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set test environment before importing app
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-32chars!"  # nosec - test-only secret  # noqa: S105
os.environ["DATABASE_URL"] = "sqlite:///./test_portal.db"
os.environ["SEED_ON_STARTUP"] = "false"

from src.database import get_db
from src.main import app
from src.models import Applicant, Application, ApplicationStatus, AdminUser
from src.models.base import Base
from src.models.enums import ActorType
from src.rbac.permissions import build_default_catalog
from src.security import create_access_token
from src.services import rbac_service
from src.services.rbac_seed_service import seed_rbac_data

# Test database setup
TEST_DATABASE_URL = "sqlite:///./test_portal.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def catalog():
    return build_default_catalog()


@pytest.fixture
def seeded_db(db_session, catalog):
    """Database with the default permissions and roles."""
    seed_rbac_data(db_session, catalog)
    return db_session


def create_admin_user(db_session, role_code: str | None, username: str = "admin") -> AdminUser:
    """Helper to create a persisted admin assigned to a role."""
    role = rbac_service.get_role_by_code(db_session, role_code) if role_code else None
    user = AdminUser(
        username=username,
        email=f"{username}@example.com",
        full_name=username.title(),
        is_active=True,
        role_id=role.id if role else None,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def auth_headers(subject, actor_type: ActorType = ActorType.ADMIN) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(subject, actor_type)}"}


@pytest.fixture
def super_admin(seeded_db) -> AdminUser:
    return create_admin_user(seeded_db, "SUPER_ADMIN", username="root")


@pytest.fixture
def viewer_admin(seeded_db) -> AdminUser:
    return create_admin_user(seeded_db, "VIEWER", username="viewer")


@pytest.fixture
def officer_admin(seeded_db) -> AdminUser:
    return create_admin_user(seeded_db, "VERIFICATION_OFFICER", username="officer")


@pytest.fixture
def super_admin_headers(super_admin) -> dict[str, str]:
    return auth_headers(super_admin.id)


@pytest.fixture
def applicant(db_session) -> Applicant:
    """Create a test applicant."""
    applicant = Applicant(full_name="Asha Patel", email="asha@example.com")
    db_session.add(applicant)
    db_session.commit()
    db_session.refresh(applicant)
    return applicant


@pytest.fixture
def applicant_headers(applicant) -> dict[str, str]:
    return auth_headers(applicant.id, ActorType.APPLICANT)


def create_application(
    db_session, applicant: Applicant, status: ApplicationStatus = ApplicationStatus.DRAFT
) -> Application:
    """Helper to persist an application directly in a given status."""
    application = Application(
        application_no=f"APP-{status.value[:4]}-{os.urandom(3).hex().upper()}",
        applicant_id=applicant.id,
        post_code="POST-01",
        status=status,
        is_locked=status != ApplicationStatus.DRAFT,
    )
    db_session.add(application)
    db_session.commit()
    db_session.refresh(application)
    return application


@pytest.fixture
def draft_application(db_session, applicant) -> Application:
    return create_application(db_session, applicant)


@pytest.fixture
def make_application(db_session):
    """Factory fixture: ``make_application(applicant, status)``."""

    def factory(applicant: Applicant, status: ApplicationStatus = ApplicationStatus.DRAFT):
        return create_application(db_session, applicant, status)

    return factory


@pytest.fixture
def make_admin(db_session):
    """Factory fixture: ``make_admin(role_code, username)``."""

    def factory(role_code: str | None, username: str = "admin") -> AdminUser:
        return create_admin_user(db_session, role_code, username=username)

    return factory


@pytest.fixture
def headers_for():
    """Factory fixture building bearer headers for an actor id."""
    return auth_headers


@pytest.fixture
def session_factory(db_session):
    """Opens extra sessions on the test database, e.g. to simulate concurrent requests."""
    return TestingSessionLocal
