from newbridge.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, utcnow
from newbridge.database.engine import async_session, engine
from newbridge.database.session import get_db

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "utcnow",
    "async_session",
    "engine",
    "get_db",
]
