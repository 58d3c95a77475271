"""
Reverse index from inputs to the groups that contain them.

Every time a group computes its flattened inputs it reports them here. Groups
register themselves with track() when created; before answering a query the
index asks every tracked group whose flattening predates the current change
token to flatten again, so a reshaped group is never reported stale. Both sides
are held weakly: the index never keeps an input or a group alive, and entries
vanish when either is garbage collected. Groups can also leave explicitly via
discard() (InputGroup.dispose()).
"""
import logging
import threading
import weakref
from typing import Iterable, Set, TYPE_CHECKING

if TYPE_CHECKING:
    from formgroup.input_field import Input
    from formgroup.input_group import InputGroup

logger = logging.getLogger(__name__)


class MembershipIndex:
    """Weak two-way index between inputs and input groups.

    Tracked groups must provide ``refresh_membership()``, which flattens the
    group again (reporting through update()) when its last flattening is older
    than the current change token.

    Thread safety: updates and reads are serialized with a reentrant lock so
    the "remove stale group" and "add group" steps of one update are never
    interleaved with another update. Refreshing runs group descriptions and
    happens outside the lock.
    """

    def __init__(self):
        self._groups_by_input: 'weakref.WeakKeyDictionary[Input, weakref.WeakSet[InputGroup]]' = (
            weakref.WeakKeyDictionary()
        )
        self._inputs_by_group: 'weakref.WeakKeyDictionary[InputGroup, weakref.WeakSet[Input]]' = (
            weakref.WeakKeyDictionary()
        )
        self._tracked: 'weakref.WeakSet[InputGroup]' = weakref.WeakSet()
        self._lock = threading.RLock()

    def track(self, group: 'InputGroup') -> None:
        """Register group so queries keep its memberships current."""
        with self._lock:
            self._tracked.add(group)

    def refresh(self) -> None:
        """Re-flatten every tracked group whose memberships may be stale."""
        with self._lock:
            groups = list(self._tracked)
        for group in groups:
            group.refresh_membership()

    def update(self, group: 'InputGroup', inputs: Iterable['Input']) -> None:
        """Record that group currently contains exactly the given inputs.

        Inputs no longer present lose their membership in group. Calling this
        again with the same inputs changes nothing.
        """
        current = set(inputs)
        with self._lock:
            previous = self._inputs_by_group.get(group)
            previous_set = set(previous) if previous is not None else set()

            removed = previous_set - current
            added = current - previous_set

            for input in removed:
                groups = self._groups_by_input.get(input)
                if groups is not None:
                    groups.discard(group)
                    if not groups:
                        del self._groups_by_input[input]

            for input in added:
                groups = self._groups_by_input.get(input)
                if groups is None:
                    groups = weakref.WeakSet()
                    self._groups_by_input[input] = groups
                groups.add(group)

            if previous is None or removed or added:
                self._inputs_by_group[group] = weakref.WeakSet(current)

        if removed or added:
            logger.debug(f"Membership of {group!r}: +{len(added)} -{len(removed)} inputs")

    def discard(self, group: 'InputGroup') -> None:
        """Stop tracking group and forget every membership of it."""
        with self._lock:
            self._tracked.discard(group)
            previous = self._inputs_by_group.pop(group, None)
            if previous is None:
                return
            for input in list(previous):
                groups = self._groups_by_input.get(input)
                if groups is not None:
                    groups.discard(group)
                    if not groups:
                        del self._groups_by_input[input]
        logger.debug(f"Discarded membership of {group!r}")

    def groups_of(self, input: 'Input') -> Set['InputGroup']:
        """Live groups currently containing input."""
        self.refresh()
        with self._lock:
            groups = self._groups_by_input.get(input)
            return set(groups) if groups is not None else set()

    def inputs_of(self, group: 'InputGroup') -> Set['Input']:
        """Inputs group currently contains, as far as the index knows."""
        self.refresh()
        with self._lock:
            inputs = self._inputs_by_group.get(group)
            return set(inputs) if inputs is not None else set()

    def __contains__(self, group: 'InputGroup') -> bool:
        self.refresh()
        with self._lock:
            return group in self._inputs_by_group

    def __len__(self) -> int:
        """Number of inputs that belong to at least one live group."""
        self.refresh()
        with self._lock:
            return sum(1 for groups in self._groups_by_input.values() if groups)
