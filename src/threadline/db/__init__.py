"""Database engine, sessions and transaction helpers."""

from .session import Base, SessionLocal, create_tables, get_db
from .transaction import unit_of_work

__all__ = ["Base", "SessionLocal", "create_tables", "get_db", "unit_of_work"]
