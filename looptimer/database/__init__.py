"""Database package."""

from .db import get_session, init_db, get_item, set_item, remove_item
from .models import StoredValue

__all__ = ["get_session", "init_db", "get_item", "set_item", "remove_item", "StoredValue"]
