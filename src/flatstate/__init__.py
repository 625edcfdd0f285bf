"""
Structured views over flat value sequences.

Streaming state over a narrow channel is cheapest as a bare sequence of
values, while code reading it is clearest with named, nested fields. This
package keeps the two apart: structure is declared once (or rarely), values
are swapped as often as they arrive.

Key Features:
- Dotted field paths building nested maps and lists (numeric segments -> lists)
- Index, slice and transform range specs compiled into lazy accessors
- Transform output cached until values or structure change
- Reset/re-add cycles that preserve container identity
- Plain interchange export of the whole view

Quick Start:
    >>> from flatstate import FlatState
    >>>
    >>> state = FlatState()
    >>> state.set_values([11, 12, 13, 14, 15, 16])
    >>> state.set_structure({
    ...     'position.x': 0,
    ...     'position.y': 1,
    ...     'list': (3, 6, lambda items: [v + 10 for v in items]),
    ... })
    >>> state.export()
    {'position': {'y': 12, 'x': 11}, 'list': [24, 25, 26]}
    >>> state.set_values([111, 112, 113, 114, 115, 116])
    >>> state.fields.position.y
    112

Modules:
    - flat_state: The FlatState engine (values, structure lifecycle, reads)
    - path_resolver: Container construction and navigation for field paths
    - range_resolver: Range spec compilation into accessors
    - collection_containers: Tagged map/list container nodes and field leaves
    - token_cache: Transform output cache keyed by spec identity
    - snapshot_model: Interchange export and snapshots
    - config: Engine configuration and process-wide defaults
    - errors: Exception types
"""

from flatstate.flat_state import FlatState

from flatstate.collection_containers import Field, ListContainer, MapContainer

from flatstate.config import (
    FlatStateConfig,
    StructureOrder,
    set_default_config,
    get_default_config,
    reset_default_config,
)

from flatstate.errors import FlatStateError, PathResolutionError

from flatstate.snapshot_model import Snapshot, to_interchange

from flatstate.token_cache import TransformCache, CacheKey

__all__ = [
    # Engine
    'FlatState',
    # Containers
    'Field',
    'ListContainer',
    'MapContainer',
    # Configuration
    'FlatStateConfig',
    'StructureOrder',
    'set_default_config',
    'get_default_config',
    'reset_default_config',
    # Errors
    'FlatStateError',
    'PathResolutionError',
    # Export
    'Snapshot',
    'to_interchange',
    # Cache
    'TransformCache',
    'CacheKey',
]

__version__ = '1.0.0'
__description__ = 'Structured views over flat, frequently updated value sequences'
