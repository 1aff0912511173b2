"""Repository layer for saved configurator selections."""

import functools
import logging
from collections.abc import Callable
from typing import TypeVar

from pydantic import ValidationError
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from typing_extensions import ParamSpec

from golf_configurator.models.db_models import SavedSelection, utc_now
from golf_configurator.models.pydantic_models import SelectionState, StoredSelection

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

# Bump when SelectionState changes shape; older snapshots are discarded
STORAGE_VERSION = "1.0.0"

# Retry configuration for SQLite lock errors
DB_RETRY_MAX_ATTEMPTS = 5
DB_RETRY_WAIT_MIN = 1  # seconds
DB_RETRY_WAIT_MAX = 8  # seconds
DB_RETRY_WAIT_MULTIPLIER = 2


def with_db_retry(func: Callable[P, R]) -> Callable[P, R]:
    """Retry a write on sqlalchemy OperationalError with exponential backoff."""

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        for attempt in Retrying(
            retry=retry_if_exception_type(OperationalError),
            stop=stop_after_attempt(DB_RETRY_MAX_ATTEMPTS),
            wait=wait_exponential(
                multiplier=DB_RETRY_WAIT_MULTIPLIER,
                min=DB_RETRY_WAIT_MIN,
                max=DB_RETRY_WAIT_MAX,
            ),
            reraise=True,
        ):
            with attempt:
                return func(*args, **kwargs)
        raise RuntimeError("Retry logic failed unexpectedly")

    return wrapper


def _transient_fields_cleared(state: SelectionState) -> SelectionState:
    """Drop UI-only fields that must not survive a reload."""
    return state.model_copy(update={"error": None, "is_loading": False})


class SelectionRepository:
    """Repository for saved selection snapshots keyed by session."""

    def __init__(self, session: Session) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session instance.
        """
        self._session = session

    def _get_row(self, session_key: str) -> SavedSelection | None:
        return (
            self._session.query(SavedSelection)
            .filter(SavedSelection.session_key == session_key)
            .first()
        )

    @with_db_retry
    def save(self, session_key: str, state: SelectionState) -> StoredSelection:
        """Insert or replace the snapshot for a session.

        Args:
            session_key: Configurator session key.
            state: Selection snapshot to store.

        Returns:
            The stored snapshot.
        """
        payload = _transient_fields_cleared(state).model_dump(mode="json")
        row = self._get_row(session_key)
        if row is None:
            row = SavedSelection(
                session_key=session_key,
                version=STORAGE_VERSION,
                state=payload,
            )
            self._session.add(row)
        else:
            row.version = STORAGE_VERSION
            row.state = payload
            row.saved_at = utc_now()

        self._session.commit()
        self._session.refresh(row)
        return StoredSelection(
            session_key=row.session_key,
            version=row.version,
            state=SelectionState.model_validate(row.state),
            saved_at=row.saved_at,
        )

    def load(self, session_key: str) -> SelectionState | None:
        """Load the snapshot for a session.

        Snapshots written by another storage version or failing validation
        are treated as absent.

        Args:
            session_key: Configurator session key.

        Returns:
            SelectionState if a usable snapshot exists, None otherwise.
        """
        row = self._get_row(session_key)
        if row is None:
            return None

        if row.version != STORAGE_VERSION:
            logger.warning(
                "Discarding selection %s: version %s != %s",
                session_key, row.version, STORAGE_VERSION,
            )
            return None

        try:
            return SelectionState.model_validate(row.state)
        except ValidationError:
            logger.warning("Discarding invalid selection snapshot %s", session_key)
            return None

    def exists(self, session_key: str) -> bool:
        """Return True when a snapshot row exists for the session."""
        return self._get_row(session_key) is not None

    @with_db_retry
    def delete(self, session_key: str) -> bool:
        """Delete the snapshot for a session.

        Returns:
            True if a row was deleted, False if none existed.
        """
        row = self._get_row(session_key)
        if row is None:
            return False
        self._session.delete(row)
        self._session.commit()
        return True
