"""Configurator store: owned selection state, derivations and actions."""

import functools
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from sqlalchemy.orm import Session, sessionmaker

from golf_configurator.config import ConfiguratorConfig
from golf_configurator.errors import (
    ConfigurationIncomplete,
    SelectionRuleViolation,
    SubmissionFailure,
)
from golf_configurator.models.pydantic_models import (
    BusinessRules,
    DerivedState,
    GripSelection,
    Hand,
    SelectionState,
    Step,
)
from golf_configurator.rules.selection_rules import (
    apply_club_selection_rules,
    dependents_of,
    is_club_locked,
    iron_set_type,
    validate_club_selection,
    validate_grip_configuration,
    validate_shaft_configuration,
)
from golf_configurator.rules.steps import can_checkout, max_unlocked_step, shaft_satisfied
from golf_configurator.state.persistence import DebouncedTask, RepositoryWriter, load_selection

logger = logging.getLogger(__name__)

Listener = Callable[[SelectionState, DerivedState], None]
Derivation = Callable[[SelectionState, BusinessRules], Any]
Submitter = Callable[[SelectionState, DerivedState], Awaitable[Any]]

F = TypeVar("F", bound=Callable[..., bool])

# Every derived field and the only inputs it reads
DERIVATIONS: dict[str, Derivation] = {
    "max_unlocked_step": max_unlocked_step,
    "can_checkout": can_checkout,
    "iron_set_type": lambda state, rules: iron_set_type(state.clubs),
    "club_count": lambda state, rules: len(state.clubs),
}


def derive(state: SelectionState, rules: BusinessRules) -> DerivedState:
    """Compute every derived value for a snapshot."""
    return DerivedState(**{name: fn(state, rules) for name, fn in DERIVATIONS.items()})


def safe_action(name: str) -> Callable[[F], F]:
    """Wrap a store action so failures become error state instead of raising.

    Rule violations are reported with their reason; anything unexpected is
    logged with its traceback and reported with its message.
    """

    def decorator(method: F) -> F:
        @functools.wraps(method)
        def wrapper(self: "ConfigurationStore", *args: Any, **kwargs: Any) -> bool:
            logger.debug("ACTION: %s", name)
            try:
                return method(self, *args, **kwargs)
            except SelectionRuleViolation as e:
                logger.warning("ACTION: %s blocked: %s", name, e.reason)
                self._set_error(e.reason)
                return False
            except Exception as e:
                logger.exception("ACTION: %s failed", name)
                self._set_error(str(e) or f"{name} failed")
                return False

        return wrapper  # type: ignore[return-value]

    return decorator


class ConfigurationStore:
    """Single owner of the configurator selection.

    Actions validate the candidate selection, commit a new immutable
    snapshot, recompute derived values synchronously and notify subscribers
    before returning. Rejected actions leave the selection untouched and set
    ``state.error``.
    """

    def __init__(
        self,
        config: ConfiguratorConfig | None = None,
        initial_state: SelectionState | None = None,
        persister: DebouncedTask[SelectionState] | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            config: Catalog and business rules. Defaults to built-in values.
            initial_state: Snapshot to start from, e.g. a restored selection.
            persister: Debounced writer scheduled on every committed change.
        """
        self._config = config or ConfiguratorConfig()
        self._rules = self._config.rules
        self._catalog = {club.id: club for club in self._config.clubs}
        self._listeners: list[Listener] = []
        self._persister = persister

        self._state = initial_state or self.default_state()
        self._derived = derive(self._state, self._rules)

    # ========== SNAPSHOT ==========

    @property
    def state(self) -> SelectionState:
        """Current selection snapshot."""
        return self._state

    @property
    def derived(self) -> DerivedState:
        """Values derived from the current snapshot."""
        return self._derived

    @property
    def config(self) -> ConfiguratorConfig:
        return self._config

    def default_state(self) -> SelectionState:
        """Return the session-start selection: required clubs, stock shaft."""
        required = [c.id for c in self._config.clubs if c.id in self._rules.required_clubs]
        return SelectionState(
            clubs=tuple(required),
            shaft_length=self._rules.default_shaft_length,
            lie=self._rules.default_lie,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called after every commit.

        Returns:
            Callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def flush(self) -> None:
        """Write any pending snapshot immediately."""
        if self._persister is not None:
            self._persister.flush()

    # ========== COMMIT ==========

    def _commit(self, state: SelectionState, persist: bool = True) -> None:
        derived = derive(state, self._rules)
        if state.current_step > derived.max_unlocked_step:
            state = state.model_copy(update={"current_step": derived.max_unlocked_step})

        self._state = state
        self._derived = derived

        # The snapshot is committed; side effects below must not undo or fail it
        self._notify(state, derived)
        if persist and self._persister is not None:
            try:
                self._persister.schedule(state)
            except Exception:
                logger.exception("Failed to schedule selection write")

    def _notify(self, state: SelectionState, derived: DerivedState) -> None:
        for listener in list(self._listeners):
            try:
                listener(state, derived)
            except Exception:
                logger.exception("Listener %r failed", listener)

    def _update(self, **changes: Any) -> None:
        self._commit(self._state.model_copy(update={**changes, "error": None}))

    def _set_error(self, message: str | None) -> None:
        self._commit(self._state.model_copy(update={"error": message}), persist=False)

    # ========== SELECTION ACTIONS ==========

    @safe_action("setHand")
    def set_hand(self, hand: Hand | str) -> bool:
        try:
            value = Hand(hand)
        except ValueError:
            raise SelectionRuleViolation(f"Invalid hand: {hand}") from None
        self._update(hand=value)
        logger.info("Hand: %s", value.value)
        return True

    @safe_action("toggleClub")
    def toggle_club(self, club_id: str) -> bool:
        """Select or deselect a club, applying lock and dependency rules."""
        club = self._catalog.get(club_id)
        if club is None:
            raise SelectionRuleViolation(f"Unknown club: {club_id}")

        current = list(self._state.clubs)

        if club_id in current:
            if is_club_locked(club_id, self._rules):
                raise SelectionRuleViolation(f"{club.name} is required and cannot be removed")
            removed = {club_id, *dependents_of(club_id, self._rules.dependencies)}
            new_selection = [c for c in current if c not in removed]
        else:
            selected_clubs = [self._catalog[c] for c in current if c in self._catalog]
            new_clubs = apply_club_selection_rules(
                selected_clubs, club, self._config.clubs, self._rules
            )
            new_selection = [c.id for c in new_clubs]

        result = validate_club_selection(new_selection, self._rules)
        if not result.valid:
            raise SelectionRuleViolation(result.reason or "Invalid club selection")

        self._update(clubs=tuple(new_selection))
        logger.info("Clubs: [%s] (%d)", ", ".join(new_selection), len(new_selection))
        return True

    @safe_action("setClubs")
    def set_clubs(self, club_ids: list[str] | tuple[str, ...]) -> bool:
        """Replace the whole club selection after validating it as one list."""
        unknown = [c for c in club_ids if c not in self._catalog]
        if unknown:
            raise SelectionRuleViolation(f"Unknown club: {', '.join(unknown)}")

        new_selection = list(dict.fromkeys(club_ids))
        result = validate_club_selection(new_selection, self._rules)
        if not result.valid:
            raise SelectionRuleViolation(result.reason or "Invalid club selection")

        self._update(clubs=tuple(new_selection))
        logger.info("Clubs: [%s] (%d)", ", ".join(new_selection), len(new_selection))
        return True

    @safe_action("setShaftBrand")
    def set_shaft_brand(self, brand: str) -> bool:
        """Choose a shaft brand; the flex is cleared because it is brand specific."""
        if not brand:
            raise SelectionRuleViolation("Shaft brand required")
        if self._config.shaft_brands and brand not in self._config.shaft_brands:
            raise SelectionRuleViolation(f"Unknown shaft brand: {brand}")
        logger.info("Shaft brand: %s -> %s", self._state.shaft_brand or "None", brand)
        self._update(shaft_brand=brand, shaft_flex="")
        return True

    @safe_action("setShaftFlex")
    def set_shaft_flex(self, flex: str) -> bool:
        if not flex:
            raise SelectionRuleViolation("Shaft flex required")
        if not self._state.shaft_brand:
            raise SelectionRuleViolation("Select a shaft brand before choosing flex")
        logger.info("Shaft flex: %s -> %s", self._state.shaft_flex or "None", flex)
        self._update(shaft_flex=flex)
        return True

    @safe_action("setShaftLength")
    def set_shaft_length(self, length: str) -> bool:
        if not length:
            raise SelectionRuleViolation("Shaft length required")
        if length not in self._rules.shaft_lengths:
            raise SelectionRuleViolation(f"Invalid shaft length: {length}")
        logger.info("Shaft length: %s -> %s", self._state.shaft_length or "None", length)
        self._update(shaft_length=length)
        return True

    @safe_action("clearShaft")
    def clear_shaft(self) -> bool:
        """Go back to the stock shaft."""
        self._update(
            shaft_brand="",
            shaft_flex="",
            shaft_length=self._rules.default_shaft_length,
        )
        return True

    @safe_action("setGrip")
    def set_grip(self, brand: str, model: str, size: str) -> bool:
        """Choose a grip; brand, model and size must be given together."""
        grip = GripSelection(brand=brand or "", model=model or "", size=size or "")
        result = validate_grip_configuration(grip)
        if not result.valid:
            raise SelectionRuleViolation(result.reason or "Invalid grip")

        entry = self._config.grips.get(grip.brand)
        if self._config.grips and entry is None:
            raise SelectionRuleViolation(f"Unknown grip brand: {grip.brand}")
        if entry is not None:
            if entry.models and grip.model not in entry.models:
                raise SelectionRuleViolation(f"{grip.brand} has no model {grip.model}")
            if entry.sizes and grip.size not in entry.sizes:
                raise SelectionRuleViolation(f"{grip.brand} has no size {grip.size}")

        self._update(grip=grip)
        logger.info("Grip: %s", grip.display())
        return True

    @safe_action("setLie")
    def set_lie(self, lie: str) -> bool:
        if not lie:
            raise SelectionRuleViolation("Lie adjustment required")
        if lie not in self._rules.lie_options:
            raise SelectionRuleViolation(f"Invalid lie adjustment: {lie}")
        self._update(lie=lie)
        return True

    @safe_action("reset")
    def reset(self) -> bool:
        """Return to the session-start selection."""
        self._commit(self.default_state())
        return True

    # ========== NAVIGATION ==========

    @safe_action("goToStep")
    def go_to_step(self, step: Step | int) -> bool:
        """Move to a step; forward moves are limited to unlocked steps."""
        try:
            target = Step(step)
        except ValueError:
            raise SelectionRuleViolation(f"Unknown step: {step}") from None
        if target > self._derived.max_unlocked_step:
            raise SelectionRuleViolation(f"Step {target.name.title()} is locked")
        self._update(current_step=target)
        return True

    def next_step(self) -> bool:
        if self._state.current_step == Step.REVIEW:
            return False
        return self.go_to_step(self._state.current_step + 1)

    def previous_step(self) -> bool:
        if self._state.current_step == Step.CLUB:
            return False
        return self.go_to_step(self._state.current_step - 1)

    # ========== ERRORS ==========

    def set_error(self, message: str) -> None:
        self._set_error(message)

    def clear_error(self) -> None:
        self._set_error(None)

    # ========== CHECKOUT ==========

    def first_incomplete_section(self) -> tuple[str, str] | None:
        """Return (section, reason) for the first section blocking checkout."""
        state = self._state
        if state.hand is None:
            return "hand", "Hand selection required"

        club_result = validate_club_selection(state.clubs, self._rules)
        if not club_result.valid:
            return "clubs", club_result.reason or "Invalid club selection"

        if not shaft_satisfied(state):
            shaft_result = validate_shaft_configuration(
                state.shaft_brand, state.shaft_flex, state.shaft_length
            )
            return "shaft", shaft_result.reason or "Incomplete shaft"

        grip_result = validate_grip_configuration(state.grip)
        if not grip_result.valid:
            return "grip", grip_result.reason or "Incomplete grip"

        return None

    def ensure_checkout_ready(self) -> None:
        """Raise ConfigurationIncomplete unless the selection can be submitted."""
        incomplete = self.first_incomplete_section()
        if incomplete is not None:
            raise ConfigurationIncomplete(*incomplete)

    async def submit(self, submitter: Submitter) -> bool:
        """Submit the current selection once; concurrent calls are refused.

        ``is_loading`` gates the trigger while a submission is pending.
        Failures clear the flag and surface the error; nothing is retried.

        Args:
            submitter: Coroutine function receiving the snapshot and derived state.

        Returns:
            True if the submitter completed, False otherwise.
        """
        if self._state.is_loading:
            logger.warning("Submission already in progress, ignoring")
            return False

        try:
            self.ensure_checkout_ready()
        except ConfigurationIncomplete as e:
            logger.warning("Checkout blocked: %s", e)
            self._set_error(f"Cannot add to cart - {e.reason}")
            return False

        self._commit(
            self._state.model_copy(update={"is_loading": True, "error": None}), persist=False
        )
        try:
            await submitter(self._state, self._derived)
        except SubmissionFailure as e:
            logger.error("Submission failed: %s", e)
            self._finish_submission(str(e) or "Failed to add to cart")
            return False
        except ConfigurationIncomplete as e:
            logger.warning("Submission refused: %s", e)
            self._finish_submission(f"Cannot add to cart - {e.reason}")
            return False
        except Exception:
            logger.exception("Submission failed unexpectedly")
            self._finish_submission("Failed to add to cart")
            return False

        self._finish_submission(None)
        logger.info("Added to cart successfully")
        return True

    def _finish_submission(self, error: str | None) -> None:
        self._commit(
            self._state.model_copy(update={"is_loading": False, "error": error}), persist=False
        )


def create_persistent_store(
    session_key: str,
    config: ConfiguratorConfig | None = None,
    session_factory: sessionmaker[Session] | None = None,
) -> ConfigurationStore:
    """Build a store restored from, and saving to, the selection repository.

    A stored snapshot whose clubs no longer satisfy the rules is ignored.

    Args:
        session_key: Configurator session key.
        config: Catalog and business rules.
        session_factory: Session factory; defaults to the shared engine.

    Returns:
        ConfigurationStore with a debounced repository writer.
    """
    config = config or ConfiguratorConfig()
    if not config.persistence.enabled:
        return ConfigurationStore(config)

    initial = load_selection(session_key, session_factory)
    if initial is not None and not validate_club_selection(initial.clubs, config.rules).valid:
        logger.warning("Stored selection for %s breaks club rules, using defaults", session_key)
        initial = None

    persister: DebouncedTask[SelectionState] = DebouncedTask(
        config.persistence.debounce_ms / 1000,
        RepositoryWriter(session_key, session_factory),
    )
    return ConfigurationStore(config, initial_state=initial, persister=persister)
