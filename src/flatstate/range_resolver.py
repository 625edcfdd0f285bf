"""
Compile range specs into zero-argument accessors.

Supported spec shapes:
- fn                  -> fn(previous), previous being what the slot held before
- index               -> values[index]
- (index, fn)         -> fn(values[index])          (cached)
- (start, end)        -> values[start:end]
- (start, end, fn)    -> fn(values[start:end])      (cached)

Lists work the same as tuples. Index and slice reads follow Python's
negative-index and slice conventions and are always computed live from the
current values; transform output is memoized per spec identity in the
engine's TransformCache. Nothing is validated: an out-of-range or ill-typed
read, or a spec of any other shape, yields None.
"""

import logging
from numbers import Integral
from typing import Any, Callable, Sequence

from flatstate.token_cache import TransformCache

logger = logging.getLogger(__name__)

Accessor = Callable[[], Any]
ValuesProvider = Callable[[], Sequence[Any]]


def read_index(values: Sequence[Any], index: Any) -> Any:
    """Return ``values[index]``, or None when it cannot be read."""
    try:
        return values[index]
    except (IndexError, KeyError, TypeError):
        return None


def read_slice(values: Sequence[Any], start: Any, end: Any) -> Any:
    """Return ``values[start:end]``, or None when it cannot be sliced."""
    try:
        return values[start:end]
    except (IndexError, KeyError, TypeError):
        return None


def is_index(spec: Any) -> bool:
    return isinstance(spec, Integral) and not isinstance(spec, bool)


def compile_range(
    spec: Any,
    values: ValuesProvider,
    cache: TransformCache,
    previous: Any = None,
) -> Accessor:
    """Return an accessor for ``spec`` bound to the engine's values.

    Args:
        spec: Range spec (see module docstring)
        values: Returns the engine's current value sequence
        cache: Cache for transform output, keyed by ``spec`` identity
        previous: Value that occupied the slot before, for bare functions

    Returns:
        Zero-argument callable producing the field's value
    """
    if callable(spec):
        return lambda: spec(previous)

    if is_index(spec):
        return lambda: read_index(values(), spec)

    if isinstance(spec, (list, tuple)) and spec:
        if len(spec) >= 2 and callable(spec[1]):
            index, transform = spec[0], spec[1]
            return lambda: cache.get_or_compute(
                spec, lambda: transform(read_index(values(), index))
            )

        start = spec[0]
        end = spec[1] if len(spec) >= 2 else None

        if len(spec) >= 3 and callable(spec[2]):
            transform = spec[2]
            return lambda: cache.get_or_compute(
                spec, lambda: transform(read_slice(values(), start, end))
            )

        return lambda: read_slice(values(), start, end)

    logger.debug(f"Unrecognised range spec {spec!r}, field will read as None")
    return lambda: None
