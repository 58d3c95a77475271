"""
Token-based cache invalidation for derived group views.

A TokenCache holds computed values until the token reported by its provider
changes. Groups use the (access generation, change token) pair as token, so a
view is reused only within one read of the tree and only while no input changed.
"""

from typing import TypeVar, Generic, Optional, Callable, Tuple, Any, Dict, Hashable
from dataclasses import dataclass

T = TypeVar('T')

_NO_TOKEN = object()


@dataclass(frozen=True)
class CacheKey:
    """Immutable cache key made of several components."""
    components: Tuple[Any, ...]

    @classmethod
    def from_args(cls, *args) -> 'CacheKey':
        """Create cache key from variable arguments."""
        return cls(components=args)


class TokenCache(Generic[T]):
    """
    Keyed cache that empties itself whenever the provider token changes.

    Example:
        cache = TokenCache(ReactiveContext.generation_token)

        value = cache.get_or_compute(
            key=CacheKey.from_args('value'),
            compute_fn=lambda: get_value_from_shape(group.inputs, ValueMode.VALUE)
        )
    """

    def __init__(self, token_provider: Callable[[], Hashable]):
        """
        Args:
            token_provider: Function returning the current token
        """
        self._token_provider = token_provider
        self._cache: Dict[CacheKey, T] = {}
        self._last_token: Any = _NO_TOKEN

    def _sync_token(self) -> bool:
        """Drop cached entries if the token moved. Returns True if it did."""
        current_token = self._token_provider()
        if current_token != self._last_token:
            self._cache.clear()
            self._last_token = current_token
            return True
        return False

    def get_or_compute(self, key: CacheKey, compute_fn: Callable[[], T]) -> T:
        """
        Get cached value or compute and cache it.

        Args:
            key: Cache key
            compute_fn: Function to compute value on a cache miss

        Returns:
            Cached or computed value
        """
        self._sync_token()
        if key in self._cache:
            return self._cache[key]

        value = compute_fn()
        # compute_fn may have mutated inputs and moved the token; don't cache then
        if not self._sync_token():
            self._cache[key] = value
        return value

    def get(self, key: CacheKey) -> Optional[T]:
        """Cached value, or None if absent or the token changed."""
        if self._sync_token():
            return None
        return self._cache.get(key)

    def put(self, key: CacheKey, value: T) -> None:
        """Store value under the current token."""
        self._sync_token()
        self._cache[key] = value

    def invalidate(self) -> None:
        """Manually invalidate the entire cache."""
        self._cache.clear()
        self._last_token = _NO_TOKEN

    def __contains__(self, key: CacheKey) -> bool:
        return not self._sync_token() and key in self._cache
