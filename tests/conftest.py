import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db import Base
from app.models import ActivityLog, User  # noqa: F401  registers tables
from tests.mocks import FakeS3Client, make_storage


@pytest.fixture(scope="session")
def engine():
    database_url = os.getenv("TEST_DATABASE_URL")
    if database_url:
        engine = create_engine(database_url)
    else:
        engine = create_engine(
            "sqlite+pysqlite://",
            connect_args={
                "check_same_thread": False,
            },
            poolclass=StaticPool,
        )

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    Base.metadata.create_all(engine)

    return engine


@pytest.fixture()
def session_factory(engine):
    """Sessionmaker whose writes are rolled back after the test."""
    connection = engine.connect()
    transaction = connection.begin()
    factory = sessionmaker(
        bind=connection,
        autoflush=False,
        autocommit=False,
    )
    try:
        yield factory
    finally:
        transaction.rollback()
        connection.close()


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def auth_env(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", os.getenv("JWT_SECRET", "test-secret"))
    monkeypatch.setenv("JWT_ALGORITHM", os.getenv("JWT_ALGORITHM", "HS256"))


@pytest.fixture()
def s3_client():
    return FakeS3Client(folders=("Paper_Presented", "Profile", "online_info", "dept events"))


@pytest.fixture()
def storage(s3_client):
    service, _ = make_storage(client=s3_client)
    return service


@pytest.fixture()
def temp_storage(tmp_path):
    from app.services.temp_storage import TempDocumentStorage

    return TempDocumentStorage(tmp_path / "uploaded-document")
