"""
Explicit reactive host for input groups.

Derived group views are plain cached properties (see computed()). The cache
discipline is explicit rather than dependency tracked:

- Access generation: one logical read of the tree. All views computed during a
  generation share their results, so a group's description is resolved exactly
  once per generation. Every computed read opens a generation if none is active;
  callers can widen it with ``ReactiveContext.access_generation()``.
- Change token: bumped by every input mutation and by ``invalidate()``. A token
  change discards cached views even inside a generation.
- Transactions: batch mutations (group reset/confirm) run inside
  ``ReactiveContext.transaction()``. Listeners are told about the batch once,
  when the outermost transaction exits.

Thread safety: the active generation is stored in a ContextVar. Token and
transaction bookkeeping is expected to happen on one thread.
"""
import contextvars
import functools
import itertools
import logging
from contextlib import contextmanager
from typing import Any, Callable, Generator, List, Optional, Tuple

from formgroup.token_cache import CacheKey

logger = logging.getLogger(__name__)

_generation_ids = itertools.count(1)

# Id of the access generation the current read belongs to (None outside reads)
active_generation: contextvars.ContextVar[Optional[int]] = contextvars.ContextVar(
    'active_generation', default=None
)


class ReactiveContext:
    """Process-wide change token, access generations and transactions."""

    _token: int = 0
    _change_callbacks: List[Callable[[], None]] = []

    _transaction_depth: int = 0
    _transaction_label: Optional[str] = None
    _pending_notify: bool = False

    # ========== TOKEN MANAGEMENT AND CHANGE NOTIFICATION ==========

    @classmethod
    def get_token(cls) -> int:
        """Get current change token."""
        return cls._token

    @classmethod
    def increment_token(cls, notify: bool = True) -> None:
        """Bump the change token, invalidating every cached view.

        Args:
            notify: Notify listeners. Inside a transaction the notification is
                    deferred until the outermost transaction exits.
        """
        cls._token += 1
        if not notify:
            return
        if cls._transaction_depth:
            cls._pending_notify = True
        else:
            cls._notify_change()

    @classmethod
    def invalidate(cls) -> None:
        """Declare that data behind some group description changed."""
        logger.debug("Explicit invalidation at token %d", cls._token)
        cls.increment_token()

    @classmethod
    def _notify_change(cls) -> None:
        """Call every listener. A failing listener is logged and skipped."""
        logger.debug(f"_notify_change: notifying {len(cls._change_callbacks)} listeners")
        for callback in list(cls._change_callbacks):
            try:
                callback()
            except Exception as e:
                logger.warning(f"Change callback failed: {e}")

    @classmethod
    def connect_listener(cls, callback: Callable[[], None]) -> None:
        """Connect a callback that runs after every (batched) change."""
        if callback not in cls._change_callbacks:
            cls._change_callbacks.append(callback)
            logger.debug(f"Connected change listener: {callback}")

    @classmethod
    def disconnect_listener(cls, callback: Callable[[], None]) -> None:
        """Disconnect a change listener."""
        if callback in cls._change_callbacks:
            cls._change_callbacks.remove(callback)
            logger.debug(f"Disconnected change listener: {callback}")

    # ========== ACCESS GENERATIONS ==========

    @classmethod
    def current_generation(cls) -> Optional[int]:
        """Id of the active access generation, or None outside reads."""
        return active_generation.get()

    @classmethod
    def generation_token(cls) -> Tuple[Optional[int], int]:
        """Token used by view caches: (active generation, change token)."""
        return active_generation.get(), cls._token

    @classmethod
    @contextmanager
    def access_generation(cls) -> Generator[int, None, None]:
        """Run a block as one logical read of the tree.

        Reuses the active generation when there is one, so nested view reads
        observe the same resolved structures.

        Example:
            with ReactiveContext.access_generation():
                value = group.value
                inputs = group.flattened_inputs  # same snapshot as value
        """
        current = active_generation.get()
        if current is not None:
            yield current
            return

        generation = next(_generation_ids)
        token = active_generation.set(generation)
        try:
            yield generation
        finally:
            active_generation.reset(token)

    # ========== TRANSACTIONS ==========

    @classmethod
    def in_transaction(cls) -> bool:
        return cls._transaction_depth > 0

    @classmethod
    @contextmanager
    def transaction(cls, label: str) -> Generator[None, None, None]:
        """Group mutations so listeners observe them as one change.

        Nested transactions are supported; only the outermost one notifies.
        Listeners are still notified if the block raises part way, since the
        mutations applied so far are visible.

        Args:
            label: Human-readable label used in debug logs
        """
        cls._transaction_depth += 1
        if cls._transaction_depth == 1:
            cls._transaction_label = label

        try:
            yield
        finally:
            cls._transaction_depth -= 1
            if cls._transaction_depth == 0:
                final_label = cls._transaction_label or label
                cls._transaction_label = None
                if cls._pending_notify:
                    cls._pending_notify = False
                    logger.debug(f"Transaction '{final_label}' committed, notifying listeners")
                    cls._notify_change()


def computed(fn: Callable[[Any], Any]) -> property:
    """Turn a method into a read-only property cached per access generation.

    The owning instance must expose a ``_views`` TokenCache built on
    ``ReactiveContext.generation_token``.
    """
    key = CacheKey.from_args(fn.__name__)

    @functools.wraps(fn)
    def getter(self):
        with ReactiveContext.access_generation():
            return self._views.get_or_compute(key, lambda: fn(self))

    return property(getter)
