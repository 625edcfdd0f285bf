"""Exceptions raised by the structure engine."""

from typing import Any, Dict, Optional


class FlatStateError(Exception):
    """Base class for flatstate errors.

    Carries a ``context`` dict with diagnostic details for the failure.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context: Dict[str, Any] = context or {}


class PathResolutionError(FlatStateError):
    """A field path could not be navigated.

    ``context`` holds ``cursor``, the list of path segments walked before
    the failure, and the offending ``segment``.
    """
