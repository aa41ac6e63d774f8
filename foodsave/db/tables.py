"""
Single source of truth for database tables that exist after migrations (001).

meals is owned by the catalog; it is migrated here only for local and self-hosted stores.
"""
# All tables that exist in the DB. Must match models and migrations.
ALL_TABLE_NAMES = (
    "meals",
    "notifications",
)
