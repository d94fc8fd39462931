"""Core runtime aggregator.

Exposes the building blocks from a single module; importing it performs only
imports and does not register plugins.

* ``errors`` -> error taxonomy
* ``declaration`` / ``validation`` -> ``RouteDeclaration`` and its checks
* ``settings`` -> current API version sources
* ``resolver`` / ``template`` -> version list and route template
* ``decorators`` -> ``api_route``
* ``base_router`` / ``router`` -> routing host (plugin-free / plugin-enabled)
"""

from .base_router import BaseRouter, RouteMatch
from .declaration import RouteDeclaration
from .decorators import api_route
from .errors import (
    ConflictingConstraints,
    InvalidConfiguration,
    InvalidDeclaration,
    InvalidVersionValue,
    RangeViolation,
    VersionRouteError,
)
from .resolver import resolve_versions
from .router import Router
from .settings import AppSettings, EnvironSettings, StaticVersion, VersionSource
from .template import ResolvedRoute, build_route_template, resolve_route

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
    "VersionSource",
    "api_route",
    "build_route_template",
    "resolve_route",
    "resolve_versions",
]
