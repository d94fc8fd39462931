"""Version resolver.

``resolve_versions(declaration, source)`` returns the concrete, ascending list
of versions a route answers for:

1. constraints are validated (``validate_constraints``);
2. explicit ``accepted_versions`` are returned exactly as declared and the
   source is never consulted;
3. otherwise the current version is read from ``source``;
4. the range starts at ``starting_version`` (or ``1`` when unset) and a start
   above the current version raises ``RangeViolation``;
5. every integer from start to current, inclusive.

The function is pure: the same declaration and the same configuration value
always give the same tuple.
"""

from __future__ import annotations

from typing import Optional, Tuple

from .declaration import RouteDeclaration
from .errors import RangeViolation
from .settings import VersionSource, read_current_version
from .validation import validate_constraints

__all__ = ["resolve_versions", "version_range"]


def resolve_versions(declaration: RouteDeclaration, source: VersionSource) -> Tuple[int, ...]:
    validate_constraints(declaration.accepted_versions, declaration.starting_version)
    if declaration.accepted_versions is not None:
        return tuple(declaration.accepted_versions)
    current = read_current_version(source)
    return version_range(declaration.starting_version, current)


def version_range(starting_version: Optional[int], current: int) -> Tuple[int, ...]:
    """Inclusive ``[start, current]`` with ``start`` defaulting to 1."""
    start = 1 if starting_version is None else starting_version
    if start > current:
        raise RangeViolation(
            "The 'starting_version' cannot be greater than the 'currentApiVersion' "
            "specified in the config."
        )
    return tuple(range(start, current + 1))
