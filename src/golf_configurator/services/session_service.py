"""Service layer for server-side configurator sessions."""

import uuid
from collections.abc import Callable
from typing import Any

from sqlalchemy.orm import Session

from golf_configurator.config import ConfiguratorConfig
from golf_configurator.database.repository import SelectionRepository
from golf_configurator.models.pydantic_models import SessionSnapshot
from golf_configurator.state.store import ConfigurationStore


class SessionNotFoundError(Exception):
    """Raised when a configurator session does not exist."""

    pass


class UnknownActionError(Exception):
    """Raised when an action name is not supported."""

    pass


# action name -> (store, params) -> accepted
ACTIONS: dict[str, Callable[[ConfigurationStore, dict[str, Any]], bool]] = {
    "set_hand": lambda store, p: store.set_hand(p["value"]),
    "toggle_club": lambda store, p: store.toggle_club(p["value"]),
    "set_clubs": lambda store, p: store.set_clubs(p["value"]),
    "set_shaft_brand": lambda store, p: store.set_shaft_brand(p["value"]),
    "set_shaft_flex": lambda store, p: store.set_shaft_flex(p["value"]),
    "set_shaft_length": lambda store, p: store.set_shaft_length(p["value"]),
    "clear_shaft": lambda store, p: store.clear_shaft(),
    "set_grip": lambda store, p: store.set_grip(p["brand"], p["model"], p["size"]),
    "set_lie": lambda store, p: store.set_lie(p["value"]),
    "go_to_step": lambda store, p: store.go_to_step(p["step"]),
    "next_step": lambda store, p: store.next_step(),
    "previous_step": lambda store, p: store.previous_step(),
    "reset": lambda store, p: store.reset(),
}


class SessionService:
    """Service for configurator sessions stored in the database.

    Each request restores the session's snapshot into a fresh
    ConfigurationStore, applies one action and saves the result.
    """

    def __init__(self, session: Session, config: ConfiguratorConfig) -> None:
        """Initialize with database session and configuration.

        Args:
            session: SQLAlchemy session instance.
            config: Catalog and business rules.
        """
        self._config = config
        self._repo = SelectionRepository(session)

    def _snapshot(self, session_key: str, store: ConfigurationStore, applied: bool = True) -> SessionSnapshot:
        return SessionSnapshot(
            session_key=session_key,
            state=store.state,
            derived=store.derived,
            applied=applied,
        )

    def _restore(self, session_key: str) -> ConfigurationStore:
        if not self._repo.exists(session_key):
            raise SessionNotFoundError(f"Session {session_key} not found")
        return ConfigurationStore(self._config, initial_state=self._repo.load(session_key))

    def create_session(self) -> SessionSnapshot:
        """Start a new session with the default selection."""
        session_key = uuid.uuid4().hex
        store = ConfigurationStore(self._config)
        self._repo.save(session_key, store.state)
        return self._snapshot(session_key, store)

    def get_session(self, session_key: str) -> SessionSnapshot:
        """Return the current snapshot of a session.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        return self._snapshot(session_key, self._restore(session_key))

    def apply_action(self, session_key: str, action: str, params: dict[str, Any]) -> SessionSnapshot:
        """Apply one store action to a session.

        Rejected actions leave the stored selection unchanged; the returned
        snapshot carries the rejection reason in ``state.error``.

        Args:
            session_key: Session key.
            action: Action name, one of ACTIONS.
            params: Action parameters.

        Returns:
            Snapshot after the action.

        Raises:
            SessionNotFoundError: If the session does not exist.
            UnknownActionError: If the action is not supported.
        """
        handler = ACTIONS.get(action)
        if handler is None:
            raise UnknownActionError(f"Unknown action: {action}")

        store = self._restore(session_key)
        try:
            applied = handler(store, params)
        except KeyError as e:
            store.set_error(f"Missing parameter: {e.args[0]}")
            applied = False

        if applied:
            self._repo.save(session_key, store.state)
        return self._snapshot(session_key, store, applied=applied)

    def delete_session(self, session_key: str) -> None:
        """Delete a session.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        if not self._repo.delete(session_key):
            raise SessionNotFoundError(f"Session {session_key} not found")
