from app.db import SessionLocal
from app.services.object_storage import S3StorageService, get_s3_storage
from app.services.temp_storage import TempDocumentStorage, get_temp_storage


def get_storage() -> S3StorageService:
    """The process-wide S3 client; overridden in tests."""
    return get_s3_storage()


def get_holding_area() -> TempDocumentStorage:
    return get_temp_storage()


def get_activity_session_factory():
    """Session factory used by background activity logging."""
    return SessionLocal


__all__ = [
    "get_storage",
    "get_holding_area",
    "get_activity_session_factory",
]
