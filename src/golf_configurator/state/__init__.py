"""Configurator state management."""

from golf_configurator.state.persistence import DebouncedTask, RepositoryWriter
from golf_configurator.state.store import ConfigurationStore, create_persistent_store, derive

__all__ = [
    "ConfigurationStore",
    "DebouncedTask",
    "RepositoryWriter",
    "create_persistent_store",
    "derive",
]
