"""
Snapshot walker turning the live view into plain interchange data.

export() forces every field of the container tree and deep-copies the
result into values JSON can carry: None, bool, int, finite float, str,
dicts with string keys and lists. Callables and other values with no
interchange form are dropped (omitted from maps, None inside lists).

Walking the whole tree costs O(structure size) per call, so it suits
debugging, logging and persistence by callers rather than per-frame reads.
"""

from dataclasses import dataclass, fields as dataclass_fields, is_dataclass
import math
import time
from collections.abc import Mapping
from numbers import Integral, Real
from typing import Any, Dict

import numpy as np

from flatstate.collection_containers import Field, ListContainer, MapContainer

_DROP = object()  # Distinguishes "no interchange form" from None


def _to_interchange(value: Any) -> Any:
    if isinstance(value, Field):
        value = value.read()

    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, np.generic):
        return _to_interchange(value.item())
    if isinstance(value, Integral):
        return int(value)
    if isinstance(value, Real):
        number = float(value)
        return number if math.isfinite(number) else None

    if isinstance(value, MapContainer):
        return _map_to_interchange(value._slots())
    if isinstance(value, ListContainer):
        return _list_to_interchange(value._slots())
    if isinstance(value, np.ndarray):
        return _list_to_interchange(value.tolist())
    if isinstance(value, Mapping):
        return _map_to_interchange(value)
    if isinstance(value, (list, tuple)):
        return _list_to_interchange(value)
    if is_dataclass(value) and not isinstance(value, type):
        return _map_to_interchange({f.name: getattr(value, f.name) for f in dataclass_fields(value)})

    return _DROP


def _map_to_interchange(items: Mapping) -> Dict[str, Any]:
    result = {}
    for key, item in items.items():
        if not isinstance(key, (str, Integral, Real)) or isinstance(key, bool):
            continue
        converted = _to_interchange(item)
        if converted is not _DROP:
            result[str(key)] = converted
    return result


def _list_to_interchange(items) -> list:
    result = []
    for item in items:
        converted = _to_interchange(item)
        result.append(None if converted is _DROP else converted)
    return result


def to_interchange(value: Any) -> Any:
    """Deep-copy ``value`` into interchange-safe data.

    Returns None when the value itself has no interchange form.
    """
    converted = _to_interchange(value)
    return None if converted is _DROP else converted


@dataclass(frozen=True)
class Snapshot:
    """Immutable export of a FlatState at a point in time.

    Captures the change token the data was read at, so two snapshots with the
    same token were taken without any values or structure change between them.
    """
    token: int
    timestamp: float
    paths: tuple  # live field paths, registration order
    data: Dict[str, Any]

    @classmethod
    def create(cls, token: int, paths, root: MapContainer) -> 'Snapshot':
        """Create a snapshot by walking ``root``."""
        return cls(
            token=token,
            timestamp=time.time(),
            paths=tuple(paths),
            data=to_interchange(root),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Export to JSON-serializable dict."""
        return {
            'token': self.token,
            'timestamp': self.timestamp,
            'paths': list(self.paths),
            'data': self.data,
        }
