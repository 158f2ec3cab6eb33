import os
from pathlib import Path

from dotenv import load_dotenv

env_file = Path(__file__).parent.parent / ".env.test"
load_dotenv(env_file)

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import helpdesk.db.base  # noqa: E402,F401
from helpdesk.core.security import create_access_token  # noqa: E402
from helpdesk.db.session import Base, get_db  # noqa: E402
from helpdesk.main import app  # noqa: E402
from helpdesk.rbac.services.role_service import RoleService  # noqa: E402
from tests.utils.factories import (  # noqa: E402
    create_identity_factory,
    create_student_factory,
    create_worker_factory,
)
from tests.utils.helpers import identity_actor  # noqa: E402


@pytest.fixture(scope="session")
def test_database_url():
    return os.environ.get("TEST_DATABASE_URL", "sqlite://")


@pytest.fixture(scope="session")
def test_engine(test_database_url):
    if test_database_url.startswith("sqlite"):
        engine = create_engine(
            test_database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(test_database_url)

    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="session")
def test_session_local(test_engine):
    return sessionmaker(bind=test_engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(test_session_local):
    session = test_session_local()

    session.commit = session.flush

    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def system_roles(db_session):
    RoleService(db_session).ensure_system_roles()


@pytest.fixture
async def test_app(db_session, system_roles):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
async def test_client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as client:
        yield client


@pytest.fixture
def test_student(db_session):
    return create_student_factory(db_session, admission_number="ADM-1001", student_name="Ada Student")


@pytest.fixture
def other_student(db_session):
    return create_student_factory(db_session, admission_number="ADM-2002")


@pytest.fixture
def test_admin(db_session):
    return create_identity_factory(db_session, username="admin.user", role="admin")


@pytest.fixture
def admin_actor(test_admin):
    return identity_actor(test_admin)


@pytest.fixture
def test_staff(db_session):
    return create_identity_factory(db_session, username="staff.user", role="staff")


@pytest.fixture
def test_worker(db_session, system_roles):
    return create_worker_factory(db_session, username="worker.one", password="workerpass1")


@pytest.fixture
def test_student_token(test_student):
    return create_access_token(
        {
            "sub": str(test_student.id),
            "role": "student",
            "admission_number": test_student.admission_number,
        }
    )


@pytest.fixture
def other_student_token(other_student):
    return create_access_token(
        {
            "sub": str(other_student.id),
            "role": "student",
            "admission_number": other_student.admission_number,
        }
    )


@pytest.fixture
def test_admin_token(test_admin):
    return create_access_token({"sub": str(test_admin.id), "role": test_admin.role})


@pytest.fixture
def test_staff_token(test_staff):
    return create_access_token({"sub": str(test_staff.id), "role": test_staff.role})


@pytest.fixture
def test_worker_token(test_worker):
    return create_access_token(
        {"sub": str(test_worker.id), "role": "worker", "is_worker": True}
    )
