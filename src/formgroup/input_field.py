"""
Input: a single form field holding a live and a confirmed value.

The live value (``input_value``) follows what the user is typing; the
confirmed value (``value``) changes only on confirm() or reset(). This is the
leaf every InputGroup is built from.

Lifecycle of a value:
- set_input_value(): user edit, live value only
- confirm(): validate, normalize and commit the live value (or a given value)
- reset(): put both live and confirmed value back to a value or the default
- user_confirm(): confirm triggered by the end user, which also runs the
  ``handle_input_confirm`` hook of every group containing this input
"""
import logging
from typing import Any, Callable, List, Optional

from formgroup.config import get_default_membership_index
from formgroup.exceptions import InputValidationError
from formgroup.membership import MembershipIndex
from formgroup.node_kind import NodeKind
from formgroup.reactive import ReactiveContext
from formgroup.shape import UNSET

logger = logging.getLogger(__name__)


class Input:
    """
    Form field with live, confirmed and normalized values.

    Example:
        age = Input(0, name="age", normalizer=int,
                    validator=lambda v: None if v >= 0 else "must be positive")
        age.set_input_value("42")
        age.normalized_input_value  # 42
        age.confirm()
        age.value  # 42
    """

    __formgroup_node__ = NodeKind.INPUT

    def __init__(
        self,
        default_value: Any = None,
        *,
        name: Optional[str] = None,
        normalizer: Optional[Callable[[Any], Any]] = None,
        validator: Optional[Callable[[Any], Optional[str]]] = None,
        membership: Optional[MembershipIndex] = None,
    ):
        """
        Args:
            default_value: Value used by reset() when no value is given
            name: Name used in repr and log messages
            normalizer: Maps a live value to its normalized form (identity if None)
            validator: Returns an error message for an invalid normalized value,
                       None if it is valid
            membership: Index used to find the groups containing this input
        """
        self.name = name
        self.default_value = default_value
        self._normalizer = normalizer
        self._validator = validator
        self._membership = membership if membership is not None else get_default_membership_index()

        self._input_value = default_value
        self._value = self._normalize(default_value)

        self._on_focus_next_callbacks: List[Callable[['Input'], None]] = []

    def __repr__(self) -> str:
        if self.name:
            return f"<Input {self.name!r}>"
        return f"<Input at {id(self):#x}>"

    def _normalize(self, value: Any) -> Any:
        return self._normalizer(value) if self._normalizer is not None else value

    # === Values ===

    @property
    def value(self) -> Any:
        """Confirmed value."""
        return self._value

    @property
    def input_value(self) -> Any:
        """Live value, as last entered."""
        return self._input_value

    @input_value.setter
    def input_value(self, value: Any) -> None:
        self.set_input_value(value)

    @property
    def normalized_input_value(self) -> Any:
        """Live value passed through the normalizer."""
        return self._normalize(self._input_value)

    @property
    def dirty(self) -> bool:
        """True if the live value differs from the confirmed one."""
        return self.normalized_input_value != self._value

    def set_input_value(self, value: Any) -> None:
        """Update the live value (a user edit)."""
        self._input_value = value
        ReactiveContext.increment_token()

    # === Mutations ===

    def reset(self, value: Any = UNSET) -> None:
        """Set live and confirmed value to value, or to the default if UNSET."""
        if value is UNSET:
            value = self.default_value
        self._input_value = value
        self._value = self._normalize(value)
        logger.debug(f"Reset {self!r} to {value!r}")
        ReactiveContext.increment_token()

    def confirm(self, value: Any = UNSET, *, next: bool = False) -> None:
        """Validate and commit a value.

        Args:
            value: Value to commit; the current live value if UNSET
            next: Ask focus to move to the next field (fires on_focus_next callbacks)

        Raises:
            InputValidationError: the validator rejected the value. Nothing is
                                  committed in that case.
        """
        if value is UNSET:
            value = self._input_value
        normalized = self._normalize(value)

        if self._validator is not None:
            error = self._validator(normalized)
            if error is not None:
                raise InputValidationError(self, error)

        self._input_value = value
        self._value = normalized
        logger.debug(f"Confirmed {self!r} = {normalized!r}")
        ReactiveContext.increment_token()

        if next:
            self._fire_focus_next()

    def user_confirm(self, *, next: bool = True) -> None:
        """Confirm the live value on behalf of the end user.

        After committing, runs the ``handle_input_confirm`` hook of every group
        currently containing this input. Batch confirms through a group never
        come through here.
        """
        with ReactiveContext.transaction(f"user confirm {self!r}"):
            self.confirm(next=next)

        for group in self._membership.groups_of(self):
            hook = group.options.handle_input_confirm
            if hook is not None:
                logger.debug(f"Running handle_input_confirm of {group!r} for {self!r}")
                hook(self)

    # === Focus ===

    def on_focus_next(self, callback: Callable[['Input'], None]) -> None:
        """Subscribe to "move focus to the next field" requests."""
        if callback not in self._on_focus_next_callbacks:
            self._on_focus_next_callbacks.append(callback)

    def off_focus_next(self, callback: Callable[['Input'], None]) -> None:
        """Unsubscribe from focus requests."""
        if callback in self._on_focus_next_callbacks:
            self._on_focus_next_callbacks.remove(callback)

    def _fire_focus_next(self) -> None:
        for callback in list(self._on_focus_next_callbacks):
            try:
                callback(self)
            except Exception as e:
                logger.warning(f"Error in focus_next callback of {self!r}: {e}")
