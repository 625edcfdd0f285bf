"""
Path resolution over the tagged container tree.

Two walks are provided:
- ensure_path(): builds missing intermediate containers for a field path
  (list when the next segment is numeric, map otherwise) and reuses the ones
  already there, so external references to them stay valid.
- cursor_to_end_of_path(): navigates an existing path without building
  anything, for removal of leaves and unused containers.

Both stop one segment short and return a Cursor on the final key, which the
caller reads, installs or deletes.
"""

from dataclasses import dataclass, field
import logging
from typing import Callable, List, Optional, Union

from flatstate.collection_containers import (
    Container,
    Field,
    ListContainer,
    MapContainer,
    is_container,
    is_index_segment,
    make_container,
)
from flatstate.errors import PathResolutionError

logger = logging.getLogger(__name__)


@dataclass
class Cursor:
    """Position inside the tree: the parent container and the final key."""
    container: Container
    key: Union[str, int]
    path: List[str] = field(default_factory=list)  # segments walked to reach container

    def get(self):
        return self.container._get_slot(self.key)

    def set(self, node) -> None:
        self.container._set_slot(self.key, node)

    def delete(self) -> None:
        self.container._delete_slot(self.key)


def split_path(path: str, separator: str = '.') -> List[str]:
    """Split a field path into its segments."""
    return path.split(separator)


def slot_key(container: Container, segment: str, cursor_path: List[str]) -> Union[str, int]:
    """Convert a path segment into the key type the container uses."""
    if isinstance(container, ListContainer):
        if not is_index_segment(segment):
            raise PathResolutionError(
                f'"{segment}" cannot address a list container at path elements {cursor_path}',
                {'cursor': cursor_path, 'segment': segment},
            )
        return int(segment)
    return segment


def ensure_path(
    root: MapContainer,
    segments: List[str],
    on_walk: Optional[Callable[[List[str]], None]] = None,
) -> Cursor:
    """Make sure every segment but the last exists as a container.

    Missing segments are created as a ListContainer when the segment after
    them is numeric, otherwise as a MapContainer. Existing containers are
    reused as they are.

    Example:
        ensure_path(root, ['b', 'c', '0', 'd', 'e'])
        # root -> {b: {c: [{d: <cursor at 'e'>}]}}

    Args:
        root: Container the path starts from
        segments: Field path segments, including the final key
        on_walk: Called with the walked prefix after each intermediate segment

    Returns:
        Cursor on the final segment
    """
    *parents, last = segments
    container: Container = root
    walked: List[str] = []

    for index, segment in enumerate(parents):
        key = slot_key(container, segment, walked)
        node = container._get_slot(key)

        if node is None:
            node = make_container(segments[index + 1])
            container._set_slot(key, node)
        elif isinstance(node, Field):
            raise PathResolutionError(
                f'"{segment}" is declared as a field and cannot hold path elements {segments}',
                {'cursor': list(walked), 'segment': segment},
            )

        container = node
        walked.append(segment)
        if on_walk is not None:
            on_walk(walked)

    return Cursor(container=container, key=slot_key(container, last, walked), path=walked)


def cursor_to_end_of_path(root: MapContainer, segments: List[str], strict: bool = True) -> Optional[Cursor]:
    """Navigate down an existing path and return a cursor on its final key.

    A parent that is a field evaluating to a container (a bare-function
    field wrapping the container it replaced) is navigated through. A parent
    that is a field evaluating to anything else detaches the rest of the
    path; None is returned.

    Args:
        root: Container the path starts from
        segments: Field path segments, including the final key
        strict: Raise on missing parents; when False return None instead

    Raises:
        PathResolutionError: A parent segment is absent (strict mode only)
    """
    *parents, last = segments
    container: Container = root
    walked: List[str] = []

    for segment in parents:
        if isinstance(container, ListContainer) and not is_index_segment(segment):
            node = None
        else:
            node = container._get_slot(slot_key(container, segment, walked))

        if isinstance(node, Field):
            value = node.read()
            if not is_container(value):
                logger.debug(f"Path {segments} passes through field '{segment}', nothing to navigate")
                return None
            node = value

        if node is None:
            if not strict:
                return None
            raise PathResolutionError(
                f'"{segment}" may be misdefined, encountered undefined parent for path elements {segments}',
                {'cursor': list(walked), 'segment': segment},
            )

        container = node
        walked.append(segment)

    if isinstance(container, ListContainer) and not is_index_segment(last):
        if strict:
            raise PathResolutionError(
                f'"{last}" cannot address a list container at path elements {segments}',
                {'cursor': list(walked), 'segment': last},
            )
        return None

    return Cursor(container=container, key=slot_key(container, last, walked), path=walked)
