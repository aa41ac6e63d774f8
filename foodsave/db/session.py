"""
Database engine and session factory for SQL-backed stores.

Built lazily from Settings so importing models never needs a configured environment.
"""
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker

from foodsave.config import get_settings


def database_url(store_url: str, service_key: str) -> str:
    """Use the service key as the database password when the URL carries none (sqlite has none)."""
    url = make_url(store_url)
    if url.get_backend_name() != "sqlite" and not url.password:
        url = url.set(password=service_key)
    return url.render_as_string(hide_password=False)


@lru_cache
def get_engine() -> Engine:
    settings = get_settings()
    url = database_url(settings.store_url, settings.store_service_key)
    if url.startswith("sqlite"):
        return create_engine(url)
    return create_engine(
        url,
        pool_size=5,
        max_overflow=5,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_timeout=settings.store_timeout_seconds,
    )


def get_session_factory() -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
