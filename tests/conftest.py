import sys
import os
import tempfile
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("EMAILS_ENABLED", "false")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "moveminds-test-logs"))
os.environ.setdefault("UPLOAD_DIR", os.path.join(tempfile.gettempdir(), "moveminds-test-uploads"))

import uuid
import pytest
from typing import Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import main
from app.core.constants import RoleEnum
from app.core.database import Base, get_db
from app.core.security import get_password_hash
from app.crud.user import user as crud_user
from app.services.file_storage import FileStorageService, StoredFile
from app.utils import deps as deps_utils

TEST_PASSWORD = "testpass123"


class FakeFileStorage(FileStorageService):
    def __init__(self):
        self.stored = []

    def store(self, content: bytes, filename: Optional[str], content_type: Optional[str], subdirectory: str) -> StoredFile:
        unique_name = self._unique_name(filename)
        self.stored.append((subdirectory, unique_name, content))
        return StoredFile(
            url=f"http://files.test/{subdirectory}/{unique_name}",
            content_type=self._resolve_content_type(filename, content_type),
            size_bytes=len(content),
        )


@pytest.fixture(scope="function")
def database_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite needs these hooks for SAVEPOINT support.
    @event.listens_for(engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(database_engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=database_engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()


@pytest.fixture(scope="function")
def file_storage():
    return FakeFileStorage()


@pytest.fixture(scope="function")
def client(db_session, file_storage):
    main.app.dependency_overrides[get_db] = lambda: db_session
    main.app.dependency_overrides[deps_utils.get_transactional_db] = lambda: db_session
    main.app.dependency_overrides[deps_utils.get_file_storage] = lambda: file_storage
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()


def login(client: TestClient, email: str, password: str = TEST_PASSWORD) -> str:
    response = client.post("/auth/login", json={"email": email, "password": password})
    body = response.json()
    token = body.get("data", {}).get("token", {}).get("access_token")
    assert token, f"Login failed or token missing: {body}"
    return token


@pytest.fixture
def user_factory(db_session):
    def _user_factory(role: RoleEnum = RoleEnum.USER, email: Optional[str] = None, is_active: bool = True):
        user_data = {
            "full_name": f"Test {role.value.capitalize()}",
            "email": email or f"{role.value}-{uuid.uuid4().hex[:8]}@test.com",
            "hashed_password": get_password_hash(TEST_PASSWORD),
            "role": role,
            "is_active": is_active,
        }
        return crud_user.create(db_session, obj_in=user_data)
    return _user_factory


@pytest.fixture
def headers_for(client, user_factory):
    """Creates a fresh user with the given role and returns (user, auth headers)."""
    def _headers_for(role: RoleEnum = RoleEnum.USER):
        user = user_factory(role)
        token = login(client, user.email)
        return user, {"Authorization": f"Bearer {token}"}
    return _headers_for


@pytest.fixture
def token_for_role(client, user_factory):
    """One token per role per test, created on first use."""
    tokens = {}

    def _create_token_for_role(role_name: str):
        if role_name not in tokens:
            user = user_factory(RoleEnum(role_name))
            tokens[role_name] = login(client, user.email)
        return tokens[role_name]

    return _create_token_for_role


@pytest.fixture
def admin_headers(token_for_role):
    return {"Authorization": f"Bearer {token_for_role('admin')}"}


@pytest.fixture
def instructor_headers(token_for_role):
    return {"Authorization": f"Bearer {token_for_role('instructor')}"}


@pytest.fixture
def learner_headers(token_for_role):
    return {"Authorization": f"Bearer {token_for_role('user')}"}
