"""Error taxonomy for route declarations and version resolution.

Every error is raised synchronously where it is detected and is meant to abort
route registration. None of them is transient: they describe a malformed
declaration or a broken deployment setting.

- ``InvalidDeclaration``: blank template or template starting with ``/``.
- ``ConflictingConstraints``: both accepted versions and a starting version.
- ``InvalidVersionValue``: a declared version that is not a positive integer.
- ``InvalidConfiguration``: the current API version setting is missing,
  non-numeric or not positive.
- ``RangeViolation``: the starting version is above the current version.
"""

from __future__ import annotations

__all__ = [
    "VersionRouteError",
    "InvalidDeclaration",
    "ConflictingConstraints",
    "InvalidVersionValue",
    "InvalidConfiguration",
    "RangeViolation",
]


class VersionRouteError(ValueError):
    """Base class for all declaration and resolution failures."""


class InvalidDeclaration(VersionRouteError):
    pass


class ConflictingConstraints(VersionRouteError):
    pass


class InvalidVersionValue(VersionRouteError):
    pass


class InvalidConfiguration(VersionRouteError):
    pass


class RangeViolation(VersionRouteError):
    pass
