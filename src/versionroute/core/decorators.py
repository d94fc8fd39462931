"""Decorator helper attaching route declarations to handlers.

``api_route(template, *, accepted_versions=None, starting_version=None,
name=None, order=0, methods=("GET",), **options)``

- Builds a ``RouteDeclaration`` immediately, so a blank template or one that
  starts with ``/`` fails at import time of the handler module.
- Appends the declaration to the function under ``TARGET_ATTR_NAME``; stacking
  several decorators on one handler serves several routes.
- Extra ``**options`` are stored next to the declaration and become entry
  metadata (``<plugin>_<key>`` options become per-entry plugin config).
- Returns the function unchanged apart from the marker. No router is touched:
  handlers are registered explicitly with ``Router.add_entry``.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional

from .declaration import DEFAULT_METHODS, RouteDeclaration

__all__ = ["api_route", "TARGET_ATTR_NAME", "declarations_of"]

TARGET_ATTR_NAME = "__versionroute_declarations__"


def api_route(
    template: str,
    *,
    accepted_versions: Optional[Iterable[int]] = None,
    starting_version: Optional[int] = None,
    name: Optional[str] = None,
    order: int = 0,
    methods: Iterable[str] = DEFAULT_METHODS,
    **options: Any,
) -> Callable:
    """Mark a handler as serving ``template`` for the given versions.

    Args:
        template: Resource fragment, e.g. ``"GamingGroups/{id}"``.
        accepted_versions: Explicit versions served by the handler.
        starting_version: First version served; the route extends to current.
        name: Route name handed to the host.
        order: Match priority, lower first.
        methods: HTTP methods bound to the route.
    """
    declaration = RouteDeclaration(
        template,
        accepted_versions=tuple(accepted_versions) if accepted_versions is not None else None,
        starting_version=starting_version,
        name=name,
        order=order,
        methods=tuple(methods) if not isinstance(methods, str) else methods,
    )

    def decorator(func: Callable) -> Callable:
        markers = list(getattr(func, TARGET_ATTR_NAME, []))
        markers.append((declaration, dict(options)))
        setattr(func, TARGET_ATTR_NAME, markers)
        return func

    return decorator


def declarations_of(func: Callable) -> list:
    """Return ``[(declaration, options), ...]`` stacked on ``func`` (innermost first)."""
    return list(getattr(func, TARGET_ATTR_NAME, None) or [])
