"""
Node kind discriminant for input structures.

Structures are built from plain Python containers, so the node kind is derived
at runtime: leaf and group classes declare ``__formgroup_node__``, lists and
tuples are sequences and mappings are mappings. Every tree algorithm dispatches
on the value returned by node_kind().
"""
from collections.abc import Mapping
from enum import Enum
from typing import Any

from formgroup.exceptions import InvalidNodeError


class NodeKind(Enum):
    """The four kinds of node an input structure can contain."""
    INPUT = "input"
    GROUP = "group"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


def node_kind(node: Any) -> NodeKind:
    """Classify a structure node.

    Raises:
        InvalidNodeError: node is not an input, group, list, tuple or mapping.
    """
    declared = getattr(type(node), '__formgroup_node__', None)
    if declared is not None:
        return declared
    if isinstance(node, (list, tuple)):
        return NodeKind.SEQUENCE
    if isinstance(node, Mapping):
        return NodeKind.MAPPING
    raise InvalidNodeError(node)
