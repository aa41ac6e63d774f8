"""Build the configured store: PostgREST for http(s) URLs, SQLAlchemy for database URLs."""
import logging

from foodsave.config import Settings
from foodsave.services.store.base import ExpiryStore
from foodsave.services.store.rest_store import RestExpiryStore, RestStoreConfig
from foodsave.services.store.sql_store import SqlExpiryStore

logger = logging.getLogger(__name__)


def is_rest_url(url: str) -> bool:
    return url.lower().startswith(("http://", "https://"))


def build_store(settings: Settings) -> ExpiryStore:
    if is_rest_url(settings.store_url):
        config = RestStoreConfig(
            base_url=settings.store_url,
            service_key=settings.store_service_key,
            timeout=settings.store_timeout_seconds,
            page_size=settings.store_page_size,
        )
        logger.debug("Using REST store at %s", config.base_url)
        return RestExpiryStore(config)

    from foodsave.db.session import get_session_factory

    logger.debug("Using SQL store")
    return SqlExpiryStore(get_session_factory())
