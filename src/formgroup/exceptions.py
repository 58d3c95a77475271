"""
Exception taxonomy for formgroup.

Tree algorithms raise nothing for malformed value trees. The only structural
error is a node that is neither an input, a group, a sequence nor a mapping.
Errors raised by inputs themselves propagate through groups unchanged.
"""
from typing import Any


class FormGroupError(Exception):
    """Base class for all formgroup errors."""


class InvalidNodeError(FormGroupError, TypeError):
    """Raised when a structure contains a node of unsupported type."""

    def __init__(self, node: Any):
        self.node = node
        super().__init__(
            f"Unsupported node in input structure: {type(node).__name__} "
            f"(expected Input, InputGroup, list, tuple or mapping)"
        )


class InputValidationError(FormGroupError, ValueError):
    """Raised by Input.confirm() when the validator rejects a value."""

    def __init__(self, input, message: str):
        self.input = input
        self.message = message
        super().__init__(f"{input!r}: {message}")
