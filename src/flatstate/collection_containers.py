"""
Tagged container nodes making up the structured view.

The view is a tree of two container kinds plus leaves:
- MapContainer: string keys, built for non-numeric path segments
- ListContainer: integer indices, built when the next path segment is numeric
- Field: leaf holding the compiled accessor for one declared field path

Containers are read-only views for callers: item access (and attribute
access on maps) evaluates Field leaves lazily and hands back nested
containers as-is, so a reference to a container stays live across value
updates. Mutation goes through the underscore-prefixed slot methods, which
only the engine and the path resolver use.

On maps, a field named like a Mapping method (items, keys, get, ...) wins
attribute access over the method; Mapping.items(container) still reaches
the method itself.
"""
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Dict, Iterator, List, Optional, Union


def is_index_segment(segment: str) -> bool:
    """True when a path segment addresses a list slot (ASCII digits only)."""
    return segment.isascii() and segment.isdigit()


class Field:
    """Leaf node: one declared field path and its compiled accessor."""

    __slots__ = ('path', 'spec', '_accessor')

    def __init__(self, path: str, spec: Any, accessor: Callable[[], Any]):
        self.path = path
        self.spec = spec
        self._accessor = accessor

    def read(self) -> Any:
        """Evaluate the accessor against the current values."""
        return self._accessor()

    def __repr__(self) -> str:
        return f"Field({self.path!r}, spec={self.spec!r})"


Node = Union[Field, 'MapContainer', 'ListContainer']


def read_node(node: Optional[Node]) -> Any:
    """Resolve a slot for callers: fields are evaluated, containers returned."""
    if isinstance(node, Field):
        return node.read()
    return node


class MapContainer(Mapping):
    """Map-like container node, keyed by path segment."""

    def __init__(self):
        object.__setattr__(self, '_children', {})

    # Slot API (engine side)

    def _get_slot(self, key: str) -> Optional[Node]:
        return self._children.get(key)

    def _set_slot(self, key: str, node: Node) -> None:
        self._children[key] = node

    def _delete_slot(self, key: str) -> None:
        self._children.pop(key, None)

    def _is_empty(self) -> bool:
        return not self._children

    def _slots(self) -> Dict[str, Node]:
        return self._children

    # View API (caller side)

    def __getitem__(self, key: str) -> Any:
        if key not in self._children:
            raise KeyError(key)
        return read_node(self._children[key])

    def __iter__(self) -> Iterator[str]:
        return iter(self._children)

    def __len__(self) -> int:
        return len(self._children)

    def __contains__(self, key: object) -> bool:
        return key in self._children

    def __getattribute__(self, name: str) -> Any:
        # Fields win over Mapping methods of the same name (items, keys, get, ...)
        if not name.startswith('_'):
            children = object.__getattribute__(self, '_children')
            if name in children:
                return read_node(children[name])
        return object.__getattribute__(self, name)

    def __getattr__(self, name: str) -> Any:
        if name.startswith('_'):
            raise AttributeError(name)
        raise AttributeError(f"MapContainer has no field '{name}'")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        return dict(Mapping.items(self)) == dict(Mapping.items(other))

    __hash__ = None

    def __setattr__(self, name: str, value: Any) -> None:
        _ = (name, value)
        raise AttributeError("Containers are read-only. Use FlatState.set_values() to change values.")

    def __repr__(self) -> str:
        return f"MapContainer({list(self._children)!r})"


class ListContainer(Sequence):
    """List-like container node; unassigned slots are holes reading as None."""

    def __init__(self):
        object.__setattr__(self, '_items', [])

    # Slot API (engine side)

    def _get_slot(self, index: int) -> Optional[Node]:
        if 0 <= index < len(self._items):
            return self._items[index]
        return None

    def _set_slot(self, index: int, node: Node) -> None:
        if index >= len(self._items):
            self._items.extend([None] * (index + 1 - len(self._items)))
        self._items[index] = node

    def _delete_slot(self, index: int) -> None:
        # Leaves a hole; length is kept
        if 0 <= index < len(self._items):
            self._items[index] = None

    def _is_empty(self) -> bool:
        return all(item is None for item in self._items)

    def _slots(self) -> List[Optional[Node]]:
        return self._items

    # View API (caller side)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [read_node(item) for item in self._items[index]]
        return read_node(self._items[index])

    def __len__(self) -> int:
        return len(self._items)

    def __setattr__(self, name: str, value: Any) -> None:
        _ = (name, value)
        raise AttributeError("Containers are read-only. Use FlatState.set_values() to change values.")

    def __repr__(self) -> str:
        return f"ListContainer(len={len(self._items)})"


Container = Union[MapContainer, ListContainer]


def make_container(next_segment: str) -> Container:
    """Build the container for a segment, typed by the segment that follows it."""
    return ListContainer() if is_index_segment(next_segment) else MapContainer()


def is_container(node: Any) -> bool:
    return isinstance(node, (MapContainer, ListContainer))
