from foodsave.db.base import Base
from foodsave.db.tables import ALL_TABLE_NAMES

__all__ = ["Base", "ALL_TABLE_NAMES"]
