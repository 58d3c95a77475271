"""
Process-wide defaults for formgroup.

Groups and inputs created without an explicit ``membership`` argument share the
default MembershipIndex held here. Applications that need isolated indexes
(tests, several independent forms) can pass their own index or swap the default.
"""
import logging
from typing import Optional

from formgroup.membership import MembershipIndex

logger = logging.getLogger(__name__)

_default_membership_index: Optional[MembershipIndex] = None


def get_default_membership_index() -> MembershipIndex:
    """Get the shared MembershipIndex, creating it on first use."""
    global _default_membership_index
    if _default_membership_index is None:
        _default_membership_index = MembershipIndex()
    return _default_membership_index


def set_default_membership_index(index: MembershipIndex) -> None:
    """Replace the shared MembershipIndex.

    Groups and inputs created earlier keep the index they were created with.
    """
    global _default_membership_index
    _default_membership_index = index
    logger.debug(f"Default membership index set to {index!r}")


def reset_default_membership_index() -> None:
    """Drop the shared index; the next lookup creates a fresh one."""
    global _default_membership_index
    _default_membership_index = None
