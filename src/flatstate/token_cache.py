"""
Token-based cache for transform output.

Transform functions attached to range specs may be expensive (reshaping a
slice, building objects), so their output is memoized per range spec until
the owning engine's change token moves. Any values or structure change bumps
the token, which drops every entry at once.
"""

from typing import Any, Callable, Dict, Generic, Optional, Tuple, TypeVar
from dataclasses import dataclass

T = TypeVar('T')


@dataclass(frozen=True)
class CacheKey:
    """Identity key for a cached object.

    Two keys are equal only when they were made from the very same object,
    regardless of the object's value or hashability.
    """
    identity: int

    @classmethod
    def for_object(cls, obj: Any) -> 'CacheKey':
        """Create a cache key from the identity of ``obj``."""
        return cls(identity=id(obj))


class TransformCache(Generic[T]):
    """
    Cache keyed by range-spec identity, invalidated when a token changes.

    The owning object is stored next to the value so an ``id()`` recycled by
    a new object never hits a stale entry.

    Example:
        cache = TransformCache(state.get_token)

        value = cache.get_or_compute(
            spec,
            lambda: spec[2](values[spec[0]:spec[1]]),
        )

        # Cache drops everything once the token changes
    """

    def __init__(self, token_provider: Callable[[], int], enabled: bool = True):
        """
        Initialize transform cache.

        Args:
            token_provider: Function that returns the current token value
            enabled: When False every lookup recomputes
        """
        self._token_provider = token_provider
        self._cache: Dict[CacheKey, Tuple[Any, T]] = {}
        self._last_token: int = -1
        self.enabled = enabled

    def _sync_token(self) -> None:
        current_token = self._token_provider()
        if current_token != self._last_token:
            self._cache.clear()
            self._last_token = current_token

    def get_or_compute(self, owner: Any, compute_fn: Callable[[], T]) -> T:
        """
        Get cached value for ``owner`` or compute and cache it.

        Args:
            owner: Object whose identity keys the entry (the range spec)
            compute_fn: Function to compute value on a cache miss

        Returns:
            Cached or computed value
        """
        if not self.enabled:
            return compute_fn()

        self._sync_token()

        key = CacheKey.for_object(owner)
        entry = self._cache.get(key)
        if entry is not None and entry[0] is owner:
            return entry[1]

        value = compute_fn()
        self._cache[key] = (owner, value)
        return value

    def get(self, owner: Any) -> Optional[T]:
        """
        Get cached value without computing.

        Returns:
            Cached value or None if not cached or the token changed
        """
        self._sync_token()
        entry = self._cache.get(CacheKey.for_object(owner))
        if entry is None or entry[0] is not owner:
            return None
        return entry[1]

    def __contains__(self, owner: Any) -> bool:
        self._sync_token()
        entry = self._cache.get(CacheKey.for_object(owner))
        return entry is not None and entry[0] is owner

    def __len__(self) -> int:
        self._sync_token()
        return len(self._cache)

    def invalidate(self):
        """Manually invalidate the entire cache."""
        self._cache.clear()
        self._last_token = -1
