import os

# 必须在导入 archiver 之前设置，Settings 在导入时实例化
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_SALT_ROUNDS"] = "4"
os.environ["AUTO_CREATE_TABLES"] = "true"
os.environ["DEBUG"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from archiver.core.security import create_access_token  # noqa: E402
from archiver.crud.user import create_user  # noqa: E402
from archiver.db.base_class import Base  # noqa: E402
from archiver.db.session import create_db_engine, create_session_factory, init_db, dispose_engine  # noqa: E402
from archiver.main import create_app  # noqa: E402
from archiver.models.user import UserRole  # noqa: E402
from archiver.schemas.user import UserCreate  # noqa: E402

PASSWORD = "correct-horse-battery"


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    dispose_engine(engine)


@pytest.fixture
def db(engine):
    session = create_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


def _make_user(session, username, role=UserRole.USER, password=PASSWORD):
    return create_user(session, UserCreate(
        username=username,
        email=f"{username}@archive.io",
        password=password,
        role=role,
    ))


@pytest.fixture
def make_user(db):
    def factory(username="alice", role=UserRole.USER, password=PASSWORD):
        return _make_user(db, username, role=role, password=password)
    return factory


@pytest.fixture
def client():
    with TestClient(create_app("sqlite://")) as test_client:
        yield test_client


@pytest.fixture
def app_db(client):
    """Session bound to the engine the running app created on startup."""
    session = client.app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def auth_headers(app_db):
    def factory(username="alice", role=UserRole.USER):
        user = _make_user(app_db, username, role=role)
        return {"Authorization": f"Bearer {create_access_token(user)}"}
    return factory
