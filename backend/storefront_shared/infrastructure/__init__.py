"""
Infrastructure module: database sessions and change notifications.
"""

from storefront_shared.infrastructure.db import (
    engine,
    SessionLocal,
    get_db,
    get_db_context,
    safe_commit,
    enable_sqlite_foreign_keys,
)
from storefront_shared.infrastructure.notifications import (
    ChangeNotifier,
    NullNotifier,
    RedisChangeNotifier,
    get_notifier,
)

__all__ = [
    "engine",
    "SessionLocal",
    "get_db",
    "get_db_context",
    "safe_commit",
    "enable_sqlite_foreign_keys",
    "ChangeNotifier",
    "NullNotifier",
    "RedisChangeNotifier",
    "get_notifier",
]
