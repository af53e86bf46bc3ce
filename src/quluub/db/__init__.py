"""Database configuration and utilities."""

from .session import SessionLocal, get_db
from .unit_of_work import store_guard, unit_of_work

__all__ = ["get_db", "SessionLocal", "store_guard", "unit_of_work"]
