"""
FlatState: structured, lazily evaluated view over a flat value sequence.

Values are expected to change often (every frame, every datagram) while the
structure describing them changes rarely. FlatState keeps the two apart:
set_values() swaps the backing sequence and nothing else, while
add_structure()/reset_structure() maintain a tree of containers whose leaves
are compiled accessors reading the current sequence on demand.

Single-threaded: one logical writer is assumed and no locks are taken.
"""
from collections.abc import Mapping
from contextlib import contextmanager
import json
import logging
from typing import Any, Callable, Dict, Generator, Iterable, List, Optional, Sequence, Tuple, Union

from flatstate.collection_containers import (
    Field,
    ListContainer,
    MapContainer,
    is_container,
    is_index_segment,
    read_node,
)
from flatstate.config import FlatStateConfig, StructureOrder, resolve_config
from flatstate.path_resolver import Cursor, cursor_to_end_of_path, ensure_path, split_path
from flatstate.range_resolver import compile_range
from flatstate.snapshot_model import Snapshot, to_interchange
from flatstate.token_cache import TransformCache

logger = logging.getLogger(__name__)

_MISSING = object()  # Distinguishes "no such path" from a field reading None

StructureInput = Union[Mapping, Iterable[Tuple[str, Any]]]


class FlatState:
    """
    Separates a flat sequence of values from the structure explaining them.

    Structure makes values readable; a bare sequence is what is cheap to ship
    and update. FlatState is built once from a structure and then fed new
    sequences; fields are read through the structure instead of offsets.

    Example:
        state = FlatState()
        state.set_values([0, 1, 2, 3, 4, 5, 6, 7])
        state.add_structure({
            'position.x': 0,
            'position.y': (1, lambda v: f'{v}{v}'),
            'list': (3, 8, lambda items: [v + 1 for v in items]),
        })
        state.export()
        # {'position': {'y': '11', 'x': 0}, 'list': [4, 5, 6, 7, 8]}

        state.set_values([10, 11, 12, 13, 14, 15, 16, 17])
        state.fields.position.y
        # '1111'

        # Same values, different structure
        state.set_structure({'pair.x': 3, 'pair.y': 4, 'another.x': 0})

    Internal state (owned exclusively by the instance):
    - _values: Current value sequence
    - _fields: Live field paths -> installed Field, registration order
    - _unused: Parent paths orphaned by reset_structure(), reclaimable
    - _cache: Transform output keyed by range-spec identity
    - _token: Change counter; any values or structure change bumps it
    """

    def __init__(self, config: Optional[FlatStateConfig] = None):
        self.config = resolve_config(config)

        self._values: Sequence[Any] = []
        self._fields: Dict[str, Field] = {}
        self._unused: Dict[str, List[str]] = {}  # joined path -> segments
        self._root = MapContainer()

        self._token: int = 0
        self._cache: TransformCache = TransformCache(self.get_token, enabled=self.config.cache_transforms)

        self._change_callbacks: List[Callable[[Tuple[str, ...]], None]] = []
        self._batch_depth = 0
        self._pending_reasons: List[str] = []

    # ========== VALUES ==========

    def set_values(self, values: Sequence[Any]) -> None:
        """Replace the backing value sequence.

        Fields read the new sequence on next access; no structural work is
        done and no length check against the structure is made.

        Args:
            values: Any indexable, sliceable sequence (list, tuple, ndarray, ...)
        """
        self._values = values
        self._changed('values')

    @property
    def values(self) -> Sequence[Any]:
        """Current value sequence."""
        return self._values

    def _get_values(self) -> Sequence[Any]:
        return self._values

    # ========== STRUCTURE ==========

    def add_structure(self, structure: StructureInput) -> None:
        """Install fields described by ``structure`` on top of the current ones.

        Args:
            structure: Mapping of field path -> range spec. Paths are split on
                config.separator; numeric segments address list slots. Range
                specs are an index, (index, fn), (start, end), (start, end, fn)
                or a bare fn receiving the value previously at that slot.

        Raises:
            PathResolutionError: A path runs through a field or addresses a
                list with a non-numeric segment.
        """
        entries = self._sorted_entries(structure)
        separator = self.config.separator

        try:
            for path, spec in entries:
                segments = split_path(path, separator)

                if len(segments) > 1:
                    cursor = ensure_path(self._root, segments, on_walk=self._reclaim_unused)
                else:
                    cursor = Cursor(container=self._root, key=path)

                # Only a bare fn consumes the previous value; others stay lazy
                previous = read_node(cursor.get()) if callable(spec) else None
                accessor = compile_range(spec, self._get_values, self._cache, previous)
                field = Field(path, spec, accessor)

                cursor.set(field)
                self._fields[path] = field
        finally:
            self._changed('structure')

        logger.debug(f"Added {len(entries)} field(s), {len(self._fields)} live")

    def reset_structure(self) -> None:
        """Remove every field so the instance can take a new structure.

        Only leaves are removed. Intermediate containers stay in place and
        are remembered as unused, so a following add_structure() reusing the
        same prefix gets the very same container objects back (references
        held elsewhere keep working). remove_unused_structure() drops the
        ones nobody reclaimed.

        Raises:
            PathResolutionError: A registered path lost a parent container.
        """
        self._unused.clear()
        separator = self.config.separator

        try:
            for path in self._fields:
                segments = split_path(path, separator)

                if len(segments) > 1:
                    cursor = cursor_to_end_of_path(self._root, segments)
                    if cursor is None:
                        continue
                    self._unused[separator.join(cursor.path)] = list(cursor.path)
                    cursor.delete()
                    continue

                self._root._delete_slot(path)

            logger.debug(f"Reset {len(self._fields)} field(s), {len(self._unused)} unused container(s)")
            self._fields.clear()
        finally:
            self._changed('structure')

    def set_structure(self, structure: StructureInput) -> None:
        """reset_structure(), add_structure() and remove_unused_structure() in one step."""
        with self.batch():
            self.reset_structure()
            self.add_structure(structure)
            self.remove_unused_structure()

    def remove_unused_structure(self) -> None:
        """Delete containers orphaned by the last reset and not reclaimed since.

        Ancestors left empty by the removal are pruned as well. A slot that has
        been re-declared as a field in the meantime is left untouched.
        """
        removed = 0

        # Deepest first so pruning never strands a path still to be visited
        for segments in sorted(self._unused.values(), key=len, reverse=True):
            cursor = cursor_to_end_of_path(self._root, segments, strict=False)
            if cursor is None or not is_container(cursor.get()):
                continue
            cursor.delete()
            removed += 1
            self._prune_empty(cursor.path)

        self._unused.clear()
        if removed:
            logger.debug(f"Removed {removed} unused container(s)")
            self._changed('structure')

    def _prune_empty(self, segments: List[str]) -> None:
        for depth in range(len(segments), 0, -1):
            cursor = cursor_to_end_of_path(self._root, segments[:depth], strict=False)
            if cursor is None:
                return
            node = cursor.get()
            if not is_container(node) or not node._is_empty():
                return
            cursor.delete()

    def _reclaim_unused(self, walked: List[str]) -> None:
        key = self.config.separator.join(walked)
        if self._unused.pop(key, None) is not None:
            logger.debug(f"Reclaimed unused container '{key}'")

    def _sorted_entries(self, structure: StructureInput) -> List[Tuple[str, Any]]:
        # Longer paths sharing a prefix go first: a shorter path may wrap the
        # container they build (bare fn spec receiving the previous value).
        items = list(structure.items() if isinstance(structure, Mapping) else structure)

        if self.config.order is StructureOrder.DEPTH:
            separator = self.config.separator
            return sorted(items, key=lambda e: (len(split_path(e[0], separator)), e[0]), reverse=True)
        return sorted(items, key=lambda e: e[0], reverse=True)

    @property
    def paths(self) -> Tuple[str, ...]:
        """Live field paths in registration order."""
        return tuple(self._fields)

    @property
    def unused_paths(self) -> Tuple[str, ...]:
        """Container paths orphaned by the last reset and not yet reclaimed."""
        return tuple(self._unused)

    # ========== READS ==========

    @property
    def fields(self) -> MapContainer:
        """Root container of the view.

        Supports item and attribute access: ``state.fields['position']['x']``
        or ``state.fields.position.x``.
        """
        return self._root

    def _lookup(self, path: str) -> Any:
        node: Any = self._root
        for segment in split_path(path, self.config.separator):
            if isinstance(node, Field):
                node = node.read()
            if isinstance(node, ListContainer):
                if not is_index_segment(segment):
                    return _MISSING
                node = node._get_slot(int(segment))
            elif isinstance(node, MapContainer):
                node = node._get_slot(segment)
            else:
                return _MISSING
            if node is None:
                return _MISSING
        return read_node(node)

    def get(self, path: str, default: Any = None) -> Any:
        """Read the field or container at ``path``, or ``default`` if there is none."""
        value = self._lookup(path)
        return default if value is _MISSING else value

    def __getitem__(self, path: str) -> Any:
        value = self._lookup(path)
        if value is _MISSING:
            raise KeyError(path)
        return value

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self._lookup(path) is not _MISSING

    # ========== EXPORT ==========

    def export(self) -> Dict[str, Any]:
        """Plain, structure-shaped copy of the view with every field evaluated.

        Only interchange-safe data is kept (see snapshot_model). Walks the
        whole structure; read fields directly on hot paths.
        """
        return to_interchange(self._root)

    def export_json(self, **kwargs: Any) -> str:
        """export() serialized with json.dumps(**kwargs)."""
        return json.dumps(self.export(), **kwargs)

    def snapshot(self) -> Snapshot:
        """Immutable export tagged with the current change token."""
        return Snapshot.create(self._token, self._fields, self._root)

    # ========== TOKEN MANAGEMENT AND CHANGE NOTIFICATION ==========

    def get_token(self) -> int:
        """Get current change token (bumped on every values or structure change)."""
        return self._token

    def _changed(self, reason: str) -> None:
        self._token += 1
        if self._batch_depth:
            if reason not in self._pending_reasons:
                self._pending_reasons.append(reason)
            return
        self._notify_change((reason,))

    def _notify_change(self, reasons: Tuple[str, ...]) -> None:
        """Notify all listeners; a failing callback is logged and skipped."""
        for callback in list(self._change_callbacks):
            try:
                callback(reasons)
            except Exception as e:
                logger.warning(f"Change callback failed: {e}")

    def connect_listener(self, callback: Callable[[Tuple[str, ...]], None]) -> None:
        """Connect a listener called after each change.

        The callback receives the change reasons: 'values' and/or 'structure'.
        """
        if callback not in self._change_callbacks:
            self._change_callbacks.append(callback)
            logger.debug(f"Connected change listener: {callback}")

    def disconnect_listener(self, callback: Callable[[Tuple[str, ...]], None]) -> None:
        """Disconnect a change listener."""
        if callback in self._change_callbacks:
            self._change_callbacks.remove(callback)
            logger.debug(f"Disconnected change listener: {callback}")

    @contextmanager
    def batch(self) -> Generator[None, None, None]:
        """Coalesce the changes made inside the block into one notification.

        Nested blocks are supported; only the outermost one notifies.

        Example:
            with state.batch():
                state.set_values(frame)
                state.add_structure({'gear': 4})
            # listeners called once with ('values', 'structure')
        """
        self._batch_depth += 1
        try:
            yield
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and self._pending_reasons:
                reasons = tuple(self._pending_reasons)
                self._pending_reasons.clear()
                self._notify_change(reasons)

    def __repr__(self) -> str:
        return f"FlatState(fields={len(self._fields)}, values={len(self._values)}, token={self._token})"
