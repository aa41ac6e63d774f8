"""
Store backends for the expiry check.
- ExpiryStore: the protocol the stages depend on.
- RestExpiryStore: Supabase/PostgREST over httpx (STORE_URL=https://...).
- SqlExpiryStore: SQLAlchemy sessions (STORE_URL=postgresql://... or sqlite://...).
build_store lives in factory (it reads Settings).
"""
from foodsave.services.store.base import ExpiryStore
from foodsave.services.store.rest_store import RestExpiryStore, RestStoreConfig
from foodsave.services.store.sql_store import SqlExpiryStore

__all__ = ["ExpiryStore", "RestExpiryStore", "RestStoreConfig", "SqlExpiryStore"]
