"""
InputGroup: arbitrary structural grouping of inputs.

A group wraps a structure of inputs (a single Input, a mapping or list of
inputs and groups, any nesting thereof) or a function returning such a
structure. It is the base for anything acting on several inputs at once, such
as a validator over related fields or a form submitting many fields.

Derived views are recomputed from the description on every access generation
(see formgroup.reactive). The description is not evaluated on construction, so
it may refer to attributes set after InputGroup.__init__ returns. Every
flattening is reported to the group's MembershipIndex, which also flattens
groups again when the change token moved, so inputs always know which groups
hold them.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Set, Union, TYPE_CHECKING

from formgroup.config import get_default_membership_index
from formgroup.membership import MembershipIndex
from formgroup.node_kind import NodeKind
from formgroup.reactive import ReactiveContext, computed
from formgroup.shape import (
    UNSET,
    ValueMode,
    confirm_shape,
    flatten_inputs,
    flatten_structure,
    get_value_from_shape,
    reset_shape,
    resolve,
    unwrap_groups,
)
from formgroup.token_cache import TokenCache

if TYPE_CHECKING:
    from formgroup.input_field import Input

logger = logging.getLogger(__name__)


@dataclass
class InputGroupOptions:
    """Customizes input group behavior.

    Attributes:
        name: Name used in repr and log messages
        handle_input_confirm: Called with the input whenever one of the group's
                              inputs is confirmed by the user (not by a batch
                              confirm through a group)
    """
    name: Optional[str] = None
    handle_input_confirm: Optional[Callable[['Input'], None]] = None


class InputGroup:
    """
    Composite node over a structure of inputs and subgroups.

    Example:
        address = InputGroup({'street': street, 'city': city})
        form = InputGroup(lambda: {'name': name, 'address': address, 'tags': list(tags)})

        form.value            # {'name': ..., 'address': {'street': ..., 'city': ...}, 'tags': [...]}
        form.flattened_inputs  # [name, street, city, *tags] in no particular order
        form.reset({'address': {'city': 'Paris'}})  # everything else back to defaults
    """

    __formgroup_node__ = NodeKind.GROUP

    def __init__(
        self,
        inputs: Union[Any, Callable[[], Any]],
        options: Optional[InputGroupOptions] = None,
        *,
        membership: Optional[MembershipIndex] = None,
    ):
        """
        Args:
            inputs: The structure of inputs: an input, a group, a mapping or list
                    of those, a nested structure thereof, or a function returning
                    such a structure (evaluated again on every access generation)
            options: Customizes group behavior
            membership: Index recording which inputs this group contains
        """
        self._inputs = inputs
        self.options = options if options is not None else InputGroupOptions()
        self._membership = membership if membership is not None else get_default_membership_index()
        self._views: TokenCache[Any] = TokenCache(ReactiveContext.generation_token)

        # Change token of the last flattening reported to the index
        self._membership_token = None
        self._membership.track(self)

    def __repr__(self) -> str:
        if self.options.name:
            return f"<InputGroup {self.options.name!r}>"
        return f"<InputGroup at {id(self):#x}>"

    @property
    def membership(self) -> MembershipIndex:
        return self._membership

    # === Derived views ===

    @computed
    def structure(self) -> Any:
        """The structure of inputs as given to the constructor, subgroups preserved.

        If a function was given it is evaluated here, once per access generation.

        Use ``inputs`` for the structure with subgroups collapsed, or
        ``flattened_inputs`` for a plain list of inputs.
        """
        return resolve(self._inputs)

    @computed
    def inputs(self) -> Any:
        """The structure with every subgroup collapsed into its own inputs."""
        return unwrap_groups(self.structure)

    @computed
    def value(self) -> Any:
        """Structure of *confirmed* values matching ``inputs``.

        For a group over ``{'a': some_input, 'b': other_group}`` this is
        ``{'a': some_input.value, 'b': other_group.value}``.
        """
        return get_value_from_shape(self.inputs, ValueMode.VALUE)

    @computed
    def input_value(self) -> Any:
        """Same as ``value`` but with each input's live value."""
        return get_value_from_shape(self.inputs, ValueMode.INPUT_VALUE)

    @computed
    def normalized_input_value(self) -> Any:
        """Same as ``value`` but with each input's normalized live value."""
        return get_value_from_shape(self.inputs, ValueMode.NORMALIZED_INPUT_VALUE)

    @computed
    def flattened_inputs(self) -> List['Input']:
        """All inputs of the group in a list. The order is not guaranteed."""
        flattened = flatten_inputs(self.inputs)
        self._membership_token = ReactiveContext.get_token()
        self._membership.track(self)
        self._membership.update(self, flattened)
        return flattened

    @computed
    def flattened_structure(self) -> List[Union['Input', 'InputGroup']]:
        """Inputs and subgroups of the structure in a list, subgroups not broken down."""
        return flatten_structure(self.structure)

    @computed
    def dirty_inputs(self) -> Set['Input']:
        """Inputs whose live value differs from their confirmed value."""
        return {input for input in self.flattened_inputs if input.dirty}

    @property
    def is_dirty(self) -> bool:
        """True if any input has a live value differing from its confirmed value."""
        return bool(self.dirty_inputs)

    def refresh_membership(self) -> None:
        """Flatten again if the index may hold memberships from an older shape.

        Called by the membership index before it answers a query.
        """
        if self._membership_token != ReactiveContext.get_token():
            self.flattened_inputs

    # === Batch operations ===

    def reset(self, value: Any = UNSET) -> None:
        """Reset every input, using the matching part of value where present.

        Args:
            value: Structure shaped like ``value``. Inputs it has no entry for
                   (or all inputs, if omitted) reset to their defaults.
        """
        logger.debug(f"Batch reset of {self!r}")
        with ReactiveContext.transaction(f"reset {self!r}"):
            reset_shape(self.structure, value)

    def confirm(self, value: Any) -> None:
        """Confirm every input with the matching part of value.

        Unlike confirming a single input, this never asks focus to move to the
        next field. An input rejecting its value aborts the rest of the batch.
        """
        logger.debug(f"Batch confirm of {self!r}")
        with ReactiveContext.transaction(f"confirm {self!r}"):
            confirm_shape(self.structure, value)

    def dispose(self) -> None:
        """Remove this group from its membership index."""
        self._membership.discard(self)
        self._membership_token = None
        self._views.invalidate()
