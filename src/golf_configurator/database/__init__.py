"""Database module."""

from golf_configurator.database.engine import get_engine, get_session, init_db
from golf_configurator.database.repository import SelectionRepository

__all__ = ["get_engine", "get_session", "init_db", "SelectionRepository"]
