from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from app.config import settings


class Base(DeclarativeBase):
    pass


def _engine_options(database_url: str) -> dict:
    # SQLite (local development) uses its own single-connection pools.
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout": settings.db_pool_timeout,
        "pool_recycle": settings.db_pool_recycle,
    }


def get_engine(database_url: str | None = None):
    url = database_url or settings.database_url
    return create_engine(url, **_engine_options(url))


# Activity logging opens its own sessions from this factory, outside any request.
SessionLocal = sessionmaker(bind=get_engine(), autoflush=False, autocommit=False)
