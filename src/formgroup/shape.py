"""
Shape resolution and structural recursion over input structures.

An input structure is an Input, an InputGroup, a list/tuple of structures or a
mapping of structures, nested arbitrarily. All walks here share one dispatch
(see node_kind()):

- INPUT: apply the leaf operation, stop.
- GROUP: recurse into the group's own structure (or collapsed inputs).
- SEQUENCE: recurse element-wise, keeping order and length.
- MAPPING: recurse per key, keeping the key set.

Mapping traversal order is whatever the mapping yields; flattened results make
no ordering promise. An input appearing at several positions is visited at each.
"""
from collections.abc import Mapping
from enum import Enum
from typing import Any, Callable, List, Optional, Union

from formgroup.node_kind import NodeKind, node_kind


class _Unset:
    """Marker for "no value supplied"."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'UNSET'

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


class ValueMode(Enum):
    """Which input attribute value extraction reads."""
    VALUE = "value"
    INPUT_VALUE = "input_value"
    NORMALIZED_INPUT_VALUE = "normalized_input_value"


def resolve(description: Any) -> Any:
    """Evaluate a content description now.

    Callables are invoked with no arguments; anything else is returned as is.
    Nothing is memoized here, caching belongs to the caller.
    """
    return description() if callable(description) else description


def _map_sequence(node: Union[list, tuple], fn: Callable[[Any], Any]) -> Union[list, tuple]:
    items = [fn(child) for child in node]
    return tuple(items) if isinstance(node, tuple) else items


def _map_mapping(node: Mapping, fn: Callable[[Any], Any]) -> dict:
    return {key: fn(child) for key, child in node.items()}


def _sequence_item(value: Any, index: int) -> Any:
    """value[index] if value is a sequence long enough, else UNSET."""
    if isinstance(value, (list, tuple)) and index < len(value):
        return value[index]
    return UNSET


def _mapping_item(value: Any, key: Any) -> Any:
    """value[key] if value is a mapping holding key, else UNSET."""
    if isinstance(value, Mapping) and key in value:
        return value[key]
    return UNSET


# ========== VALUE EXTRACTION ==========

def get_value_from_shape(shape: Any, mode: ValueMode = ValueMode.VALUE) -> Any:
    """Extract a structure of input values mirroring a structure of inputs.

    Args:
        shape: Input structure, normally a group's collapsed ``inputs``
        mode: Attribute read from every input

    Returns:
        Same shape with every input replaced by its value. Groups are replaced
        by the values of their own inputs.

    Example:
        get_value_from_shape({'a': name_input, 'b': [age_input]})
        # {'a': 'Ada', 'b': [36]}
    """
    kind = node_kind(shape)
    if kind is NodeKind.INPUT:
        return getattr(shape, mode.value)
    if kind is NodeKind.GROUP:
        return get_value_from_shape(shape.inputs, mode)
    if kind is NodeKind.SEQUENCE:
        return _map_sequence(shape, lambda child: get_value_from_shape(child, mode))
    return _map_mapping(shape, lambda child: get_value_from_shape(child, mode))


# ========== BATCH RESET / CONFIRM ==========

def _walk_lockstep(node: Any, value: Any, apply: Callable[[Any, Any], None]) -> None:
    """Descend node and value together, calling apply(input, value) at leaves.

    Missing keys, short sequences and non-container values give UNSET for the
    inputs underneath; keys present only in value are ignored. Errors from
    apply propagate and stop the walk.
    """
    kind = node_kind(node)
    if kind is NodeKind.INPUT:
        apply(node, value)
    elif kind is NodeKind.GROUP:
        _walk_lockstep(node.structure, value, apply)
    elif kind is NodeKind.SEQUENCE:
        for index, child in enumerate(node):
            _walk_lockstep(child, _sequence_item(value, index), apply)
    else:
        for key, child in node.items():
            _walk_lockstep(child, _mapping_item(value, key), apply)


def _reset_input(input, value: Any) -> None:
    input.reset(value)


def _confirm_input(input, value: Any) -> None:
    # Batch confirmation never moves focus
    input.confirm(value, next=False)


def reset_shape(node: Any, value: Any = UNSET) -> None:
    """Reset every input of a structure.

    Args:
        node: Input structure (subgroups are re-resolved)
        value: Optional value structure shaped like the aggregate value. Inputs
               without a corresponding entry reset to their own default.
    """
    _walk_lockstep(node, value, _reset_input)


def confirm_shape(node: Any, value: Any = UNSET) -> None:
    """Confirm every input of a structure with the matching part of value.

    Inputs without a corresponding entry confirm their current input value.
    """
    _walk_lockstep(node, value, _confirm_input)


# ========== FLATTENING ==========

def flatten_inputs(shape: Any, buffer: Optional[List[Any]] = None) -> List[Any]:
    """Collect every input of a structure into a list, collapsing subgroups.

    Order is not guaranteed and duplicates are kept.
    """
    if buffer is None:
        buffer = []
    kind = node_kind(shape)
    if kind is NodeKind.INPUT:
        buffer.append(shape)
    elif kind is NodeKind.GROUP:
        flatten_inputs(shape.inputs, buffer)
    elif kind is NodeKind.SEQUENCE:
        for child in shape:
            flatten_inputs(child, buffer)
    else:
        for child in shape.values():
            flatten_inputs(child, buffer)
    return buffer


def flatten_structure(node: Any, buffer: Optional[List[Any]] = None) -> List[Any]:
    """Collect the inputs and groups of a structure without entering groups."""
    if buffer is None:
        buffer = []
    kind = node_kind(node)
    if kind is NodeKind.INPUT or kind is NodeKind.GROUP:
        buffer.append(node)
    elif kind is NodeKind.SEQUENCE:
        for child in node:
            flatten_structure(child, buffer)
    else:
        for child in node.values():
            flatten_structure(child, buffer)
    return buffer


# ========== COLLAPSING ==========

def unwrap_groups(node: Any) -> Any:
    """Rebuild a structure with every group replaced by its collapsed inputs.

    Containers are copied; inputs keep their identity.
    """
    kind = node_kind(node)
    if kind is NodeKind.INPUT:
        return node
    if kind is NodeKind.GROUP:
        return unwrap_groups(node.inputs)
    if kind is NodeKind.SEQUENCE:
        return _map_sequence(node, unwrap_groups)
    return _map_mapping(node, unwrap_groups)
