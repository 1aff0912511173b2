"""Unit tests for the saved selection repository and persistence helpers."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from golf_configurator.database.repository import (
    DB_RETRY_MAX_ATTEMPTS,
    STORAGE_VERSION,
    SelectionRepository,
    with_db_retry,
)
from golf_configurator.models.db_models import Base, SavedSelection
from golf_configurator.models.pydantic_models import GripSelection, Hand, SelectionState, Step


@pytest.fixture
def session_factory(tmp_path: Path) -> sessionmaker[Session]:
    """Session factory bound to a fresh SQLite file."""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)


@pytest.fixture
def session(session_factory: sessionmaker[Session]):
    """Database session closed after the test."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def state() -> SelectionState:
    """A partially configured selection."""
    return SelectionState(
        hand=Hand.LEFT,
        clubs=("6", "7", "8", "9", "PW", "5"),
        shaft_brand="KBS",
        shaft_flex="Stiff",
        grip=GripSelection(brand="Lamkin", model="UTx", size="Midsize"),
        current_step=Step.GRIP,
    )


class TestSelectionRepository:
    """Tests for SelectionRepository."""

    def test_save_and_load(self, session: Session, state: SelectionState) -> None:
        """A saved snapshot loads back equal."""
        repo = SelectionRepository(session)

        stored = repo.save("abc", state)

        assert stored.version == STORAGE_VERSION
        assert stored.session_key == "abc"
        assert repo.load("abc") == state

    def test_save_replaces_existing(self, session: Session, state: SelectionState) -> None:
        """Saving again overwrites the snapshot for the session."""
        repo = SelectionRepository(session)
        repo.save("abc", state)

        repo.save("abc", state.model_copy(update={"lie": "+2°"}))

        loaded = repo.load("abc")
        assert loaded is not None
        assert loaded.lie == "+2°"
        assert session.query(SavedSelection).count() == 1

    def test_transient_fields_not_saved(self, session: Session, state: SelectionState) -> None:
        """Error text and loading flag do not survive a reload."""
        repo = SelectionRepository(session)

        repo.save("abc", state.model_copy(update={"error": "oops", "is_loading": True}))

        loaded = repo.load("abc")
        assert loaded is not None
        assert loaded.error is None
        assert loaded.is_loading is False

    def test_load_missing(self, session: Session) -> None:
        """Unknown sessions load as None."""
        assert SelectionRepository(session).load("nope") is None

    def test_version_mismatch_discarded(self, session: Session, state: SelectionState) -> None:
        """Snapshots from another storage version are ignored."""
        repo = SelectionRepository(session)
        repo.save("abc", state)
        row = session.query(SavedSelection).filter_by(session_key="abc").one()
        row.version = "0.9.0"
        session.commit()

        assert repo.load("abc") is None
        assert repo.exists("abc") is True

    def test_invalid_snapshot_discarded(self, session: Session) -> None:
        """Snapshots that fail validation are ignored."""
        session.add(
            SavedSelection(
                session_key="bad", version=STORAGE_VERSION, state={"hand": "Sideways"}
            )
        )
        session.commit()

        assert SelectionRepository(session).load("bad") is None

    def test_delete(self, session: Session, state: SelectionState) -> None:
        """Delete removes the row and reports whether one existed."""
        repo = SelectionRepository(session)
        repo.save("abc", state)

        assert repo.delete("abc") is True
        assert repo.delete("abc") is False
        assert repo.exists("abc") is False


class TestWithDbRetry:
    """Tests for the with_db_retry decorator."""

    def test_retry_on_operational_error(self) -> None:
        """Verify retries occur on OperationalError and succeeds after transient failure."""
        mock_func = MagicMock()
        mock_func.side_effect = [
            OperationalError("database is locked", None, None),
            "success",
        ]

        @with_db_retry
        def decorated_func() -> str:
            return mock_func()

        with patch("golf_configurator.database.repository.wait_exponential", return_value=0):
            result = decorated_func()

        assert result == "success"
        assert mock_func.call_count == 2

    def test_no_retry_on_other_exceptions(self) -> None:
        """Verify non-retryable errors raise immediately without retry."""
        mock_func = MagicMock()
        mock_func.side_effect = ValueError("some other error")

        @with_db_retry
        def decorated_func() -> str:
            return mock_func()

        with pytest.raises(ValueError, match="some other error"):
            decorated_func()

        assert mock_func.call_count == 1

    def test_max_retries_exhausted(self) -> None:
        """Verify OperationalError raised after max failed attempts."""
        mock_func = MagicMock()
        mock_func.side_effect = OperationalError("database is locked", None, None)

        @with_db_retry
        def decorated_func() -> str:
            return mock_func()

        with patch("golf_configurator.database.repository.wait_exponential", return_value=0):
            with pytest.raises(OperationalError):
                decorated_func()

        assert mock_func.call_count == DB_RETRY_MAX_ATTEMPTS


class TestPersistenceHelpers:
    """Tests for RepositoryWriter, load_selection and create_persistent_store."""

    def test_writer_round_trip(
        self, session_factory: sessionmaker[Session], state: SelectionState
    ) -> None:
        """RepositoryWriter output is readable through load_selection."""
        from golf_configurator.state.persistence import RepositoryWriter, load_selection

        RepositoryWriter("key-1", session_factory)(state)

        assert load_selection("key-1", session_factory) == state
        assert load_selection("key-2", session_factory) is None

    def test_persistent_store_restores(
        self, session_factory: sessionmaker[Session], state: SelectionState
    ) -> None:
        """A persistent store starts from the saved snapshot and saves changes."""
        from golf_configurator.state.persistence import load_selection
        from golf_configurator.state.store import create_persistent_store

        store = create_persistent_store("key-1", session_factory=session_factory)
        assert store.state.hand is None

        store.set_hand(Hand.RIGHT)
        store.flush()

        restored = create_persistent_store("key-1", session_factory=session_factory)
        assert restored.state.hand == Hand.RIGHT
        assert load_selection("key-1", session_factory) == restored.state

    def test_persistent_store_ignores_rule_breaking_snapshot(
        self, session_factory: sessionmaker[Session]
    ) -> None:
        """A saved selection whose clubs break the rules falls back to defaults."""
        from golf_configurator.state.persistence import RepositoryWriter
        from golf_configurator.state.store import create_persistent_store

        RepositoryWriter("key-1", session_factory)(
            SelectionState(hand=Hand.LEFT, clubs=("4", "6", "7", "8", "9", "PW"))
        )

        store = create_persistent_store("key-1", session_factory=session_factory)

        assert store.state.hand is None
        assert store.state.clubs == ("6", "7", "8", "9", "PW")
