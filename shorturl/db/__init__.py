"""Database module for the short URL service."""
from shorturl.db.base import configure_engine, get_engine, get_session, init_db
from shorturl.db.session import get_db, db_transaction, SessionManager

__all__ = [
    "configure_engine",
    "get_engine",
    "get_session",
    "init_db",
    "get_db",
    "db_transaction",
    "SessionManager",
]
