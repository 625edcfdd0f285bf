"""
Engine configuration and process-wide defaults.

``FlatState()`` without an explicit config picks up the process-wide
default set here. Tests and applications can swap the default with
``set_default_config()`` and restore it with ``reset_default_config()``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class StructureOrder(Enum):
    """Order in which the entries of one add_structure() call are installed."""
    LEXICOGRAPHIC = "lexicographic"  # full path string, descending
    DEPTH = "depth"  # most segments first, then lexicographic descending


@dataclass(frozen=True)
class FlatStateConfig:
    """Configuration for a FlatState instance.

    Attributes:
        separator: Delimiter between field path segments.
        order: Installation order for structure entries.
        cache_transforms: Memoize transform output until values or structure change.
    """
    separator: str = "."
    order: StructureOrder = StructureOrder.LEXICOGRAPHIC
    cache_transforms: bool = True

    def __post_init__(self):
        if not self.separator:
            raise ValueError("separator must be a non-empty string")


DEFAULT_CONFIG = FlatStateConfig()

_default_config: FlatStateConfig = DEFAULT_CONFIG


def set_default_config(config: FlatStateConfig) -> None:
    """Set the config used by FlatState instances created without one.

    Args:
        config: The config instance new engines should use
    """
    global _default_config
    if not isinstance(config, FlatStateConfig):
        raise TypeError(f"Expected FlatStateConfig, got {type(config).__name__}")
    _default_config = config
    logger.debug(f"Default FlatStateConfig set: {config}")


def get_default_config() -> FlatStateConfig:
    """Get the config used by FlatState instances created without one."""
    return _default_config


def reset_default_config() -> None:
    """Restore the built-in default config."""
    global _default_config
    _default_config = DEFAULT_CONFIG


def resolve_config(config: Optional[FlatStateConfig] = None) -> FlatStateConfig:
    """Return ``config`` if given, otherwise the process-wide default."""
    return config if config is not None else _default_config
