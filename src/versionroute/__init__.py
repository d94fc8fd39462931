"""versionroute public API surface.

- Core values: ``RouteDeclaration``, ``ResolvedRoute`` and the error classes.
- Pure operations: ``resolve_versions``, ``build_route_template``,
  ``resolve_route``.
- Version sources: ``AppSettings``, ``EnvironSettings``, ``StaticVersion``.
- Routing host: ``Router`` and the ``api_route`` decorator.
- Built-in plugins (``logging``, ``pydantic``) are imported for their side
  effect of calling ``Router.register_plugin``. Imports are done lazily via
  ``import_module`` to avoid cycles.
"""

from importlib import import_module

__version__ = "0.1.0"

from .core import (
    AppSettings,
    BaseRouter,
    ConflictingConstraints,
    EnvironSettings,
    InvalidConfiguration,
    InvalidDeclaration,
    InvalidVersionValue,
    RangeViolation,
    ResolvedRoute,
    RouteDeclaration,
    RouteMatch,
    Router,
    StaticVersion,
    VersionRouteError,
    api_route,
    build_route_template,
    resolve_route,
    resolve_versions,
)

# Import plugins to trigger auto-registration (lazy to avoid cycles)
for _plugin in ("logging", "pydantic"):
    import_module(f"{__name__}.plugins.{_plugin}")
del _plugin

__all__ = [
    "AppSettings",
    "BaseRouter",
    "ConflictingConstraints",
    "EnvironSettings",
    "InvalidConfiguration",
    "InvalidDeclaration",
    "InvalidVersionValue",
    "RangeViolation",
    "ResolvedRoute",
    "RouteDeclaration",
    "RouteMatch",
    "Router",
    "StaticVersion",
    "VersionRouteError",
    "api_route",
    "build_route_template",
    "resolve_route",
    "resolve_versions",
]
