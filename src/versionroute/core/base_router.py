"""Plugin-free routing host.

The module exposes :class:`BaseRouter`, an in-process host for versioned
routes. Handlers are registered explicitly; declared versions are expanded
once, when the host calls ``resolve()`` at startup; requests are then matched
against the rendered templates.

Constructor
-----------
::

    BaseRouter(name=None, *, get_default_handler=None,
               get_use_smartasync=None, get_kwargs=None)

- ``get_default_handler`` and ``get_use_smartasync`` become defaults merged
  via ``SmartOptions`` in ``get()``; extra ``get_kwargs`` are copied into
  ``_get_defaults``.

Registration
------------
``add_route(declaration, handler, *, metadata=None, **options)``

- Registers ``handler`` for one ``RouteDeclaration``.
- The logical entry name is ``declaration.name`` when set, else the handler
  ``__name__``. Explicit route names must be unique (``ValueError``).
- ``options`` named ``<plugin>_<key>`` for a known plugin become per-entry
  plugin configuration; the rest is merged into entry metadata.
- Any registration discards a previous resolution: the host must call
  ``resolve()`` again.

``add_entry(target, *, metadata=None, **options)``

- Accepts a handler decorated with ``api_route`` or a list/tuple of them.
  Each stacked declaration becomes one entry. Undecorated targets raise
  ``TypeError``.

Resolution
----------
``resolve(source)`` expands every entry against the version source. The first
error propagates and nothing is stored, so a host never serves a partially
built table. On success each entry gets its ``ResolvedRoute`` and a compiled
matcher; ``_after_entry_resolved`` runs per entry. Returns the resolved
routes in match order (``order`` ascending, then registration order).

Lookup and execution
--------------------
- ``match(path, method="GET")`` returns the first ``RouteMatch`` whose
  template and method fit, else ``None``. Calling it before ``resolve()``
  raises ``RuntimeError``.
- ``dispatch(path, method="GET", **kwargs)`` matches then calls the wrapped
  handler with the path parameters it accepts plus ``kwargs``; no match
  raises ``LookupError``.
- ``get(name, **options)`` returns the wrapped handler for a route name;
  falls back to ``default_handler`` else raises ``NotImplementedError``. With
  ``use_smartasync`` the handler is wrapped by ``smartasync.smartasync``.
- ``members()`` describes entries, declarations and resolved templates.

Hooks for subclasses
--------------------
``_wrap_handler``, ``_after_entry_registered``, ``_after_entry_resolved`` and
``_describe_entry_extra``; defaults are no-ops/passthrough.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from smartseeds import SmartOptions

from versionroute.core.declaration import RouteDeclaration
from versionroute.core.decorators import declarations_of
from versionroute.core.settings import VersionSource
from versionroute.core.template import ResolvedRoute, TemplateMatcher, compile_template, resolve_route
from versionroute.plugins._base_plugin import RouteEntry

__all__ = ["BaseRouter", "RouteMatch"]


@dataclass(frozen=True)
class RouteMatch:
    """Outcome of matching a request path."""

    entry: RouteEntry
    route: ResolvedRoute
    params: Dict[str, Any]
    handler: Callable


class BaseRouter:
    """Plugin-free host for versioned routes.

    Responsibilities:
    - register handlers with their route declarations
    - resolve every declaration once against the current API version
    - match request paths and invoke handlers
    - expose introspection data
    """

    __slots__ = (
        "name",
        "_entries",
        "_handlers",
        "_get_defaults",
        "_table",
    )

    def __init__(
        self,
        name: Optional[str] = None,
        *,
        get_default_handler: Optional[Callable] = None,
        get_use_smartasync: Optional[bool] = None,
        get_kwargs: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.name = name
        self._entries: List[RouteEntry] = []
        self._handlers: List[Callable] = []
        self._table: Optional[List[Tuple[RouteEntry, TemplateMatcher]]] = None
        defaults: Dict[str, Any] = dict(get_kwargs or {})
        if get_default_handler is not None:
            defaults.setdefault("default_handler", get_default_handler)
        if get_use_smartasync is not None:
            defaults.setdefault("use_smartasync", get_use_smartasync)
        self._get_defaults: Dict[str, Any] = defaults

    def _is_known_plugin(self, prefix: str) -> bool:
        try:
            from versionroute.core.router import Router  # type: ignore
        except Exception:  # pragma: no cover - import safety
            return False
        return prefix in Router.available_plugins()

    # ------------------------------------------------------------------
    # Registration helpers
    # ------------------------------------------------------------------
    def add_route(
        self,
        declaration: RouteDeclaration,
        handler: Callable,
        *,
        metadata: Optional[Dict[str, Any]] = None,
        **options: Any,
    ) -> "BaseRouter":
        """Register ``handler`` for ``declaration``.

        Returns:
            self (to allow chaining).

        Raises:
            TypeError: when ``declaration`` or ``handler`` have the wrong type.
            ValueError: on route name collision.
        """
        if not isinstance(declaration, RouteDeclaration):
            raise TypeError(f"Expected a RouteDeclaration, got {type(declaration).__name__}")
        if not callable(handler):
            raise TypeError(f"Handler must be callable, got {handler!r}")
        plugin_options: Dict[str, Dict[str, Any]] = {}
        core_options: Dict[str, Any] = {}
        for key, value in options.items():
            if "_" in key:
                plugin_name, plug_key = key.split("_", 1)
                if plugin_name and plug_key and self._is_known_plugin(plugin_name):
                    plugin_options.setdefault(plugin_name, {})[plug_key] = value
                    continue
            core_options[key] = value
        entry_meta = dict(metadata or {})
        entry_meta.update(core_options)
        self._register(declaration, handler, metadata=entry_meta, plugin_options=plugin_options)
        return self

    def add_entry(
        self,
        target: Any,
        *,
        metadata: Optional[Dict[str, Any]] = None,
        **options: Any,
    ) -> "BaseRouter":
        """Register every declaration stacked on ``target`` by ``api_route``."""
        if isinstance(target, (list, tuple)):
            for item in target:
                self.add_entry(item, metadata=dict(metadata or {}), **options)
            return self
        if not callable(target):
            raise TypeError(f"Unsupported add_entry target: {target!r}")
        markers = declarations_of(target)
        if not markers:
            raise TypeError(
                f"Handler {getattr(target, '__name__', target)!r} has no api_route declaration"
            )
        for declaration, marker_options in markers:
            merged = dict(marker_options)
            merged.update(options)
            self.add_route(declaration, target, metadata=dict(metadata or {}), **merged)
        return self

    def _register(
        self,
        declaration: RouteDeclaration,
        handler: Callable,
        *,
        metadata: Dict[str, Any],
        plugin_options: Dict[str, Dict[str, Any]],
    ) -> None:
        taken = {entry.name for entry in self._entries}
        if declaration.name is not None:
            if declaration.name in taken:
                raise ValueError(f"Route name collision: {declaration.name}")
            name = declaration.name
        else:
            name = _unique_name(getattr(handler, "__name__", "handler"), taken)
        entry = RouteEntry(
            name=name,
            func=handler,
            router=self,
            declaration=declaration,
            plugins=[],
            metadata=dict(metadata),
        )
        if plugin_options:
            entry.metadata["plugin_config"] = plugin_options
        self._entries.append(entry)
        self._table = None
        self._after_entry_registered(entry)
        self._rebuild_handlers()

    def _wrap_handler(
        self, entry: RouteEntry, call_next: Callable
    ) -> Callable:  # pragma: no cover - overridden by plugin routers
        return call_next

    def _rebuild_handlers(self) -> None:
        self._handlers = [self._wrap_handler(entry, entry.func) for entry in self._entries]

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def resolve(self, source: VersionSource) -> Tuple[ResolvedRoute, ...]:
        """Resolve every registered route against ``source``.

        Errors from the declaration validator, resolver, configuration or a
        plugin ``on_resolve`` hook propagate unchanged; the router then keeps
        its previous table (or stays unresolved).
        """
        resolved = [(entry, resolve_route(entry.declaration, source)) for entry in self._entries]
        matchers = [compile_template(route.template) for _, route in resolved]
        previous = [entry.resolved for entry in self._entries]
        try:
            for entry, route in resolved:
                entry.resolved = route
            for entry, route in resolved:
                self._after_entry_resolved(entry, route)
        except Exception:
            for entry, route in zip(self._entries, previous):
                entry.resolved = route
            raise
        indexed = sorted(
            enumerate(zip(self._entries, matchers)),
            key=lambda item: (item[1][0].declaration.order, item[0]),
        )
        self._table = [pair for _, pair in indexed]
        return self.routes()

    @property
    def is_resolved(self) -> bool:
        return self._table is not None

    def routes(self) -> Tuple[ResolvedRoute, ...]:
        """Resolved routes in match order."""
        table = self._require_table()
        return tuple(entry.resolved for entry, _ in table)  # type: ignore[misc]

    def _require_table(self) -> List[Tuple[RouteEntry, TemplateMatcher]]:
        if self._table is None:
            raise RuntimeError(f"Router {self.name!r} is not resolved; call resolve() first")
        return self._table

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def match(self, path: str, method: str = "GET") -> Optional[RouteMatch]:
        """Return the first route matching ``path`` and ``method``."""
        method = method.upper()
        for entry, matcher in self._require_table():
            if method not in entry.declaration.methods:
                continue
            params = matcher.match(path)
            if params is None:
                continue
            return RouteMatch(
                entry=entry,
                route=entry.resolved,  # type: ignore[arg-type]
                params=params,
                handler=self._handler_for(entry),
            )
        return None

    def dispatch(self, path: str, method: str = "GET", **kwargs: Any) -> Any:
        """Match ``path`` and invoke the handler with its path parameters."""
        found = self.match(path, method)
        if found is None:
            raise LookupError(f"No route matches {method.upper()} {path!r}")
        call_kwargs = _accepted_params(found.entry.func, found.params)
        call_kwargs.update(kwargs)
        return found.handler(**call_kwargs)

    def get(self, name: str, **options: Any) -> Callable:
        """Return the handler registered under route ``name``.

        Falls back to ``default_handler`` if provided, otherwise raises
        NotImplementedError. When ``use_smartasync`` is true, the handler is
        wrapped accordingly.
        """
        opts = SmartOptions(options, defaults=self._get_defaults)
        default = getattr(opts, "default_handler", None)
        use_smartasync = getattr(opts, "use_smartasync", False)

        handler = None
        for entry in self._entries:
            if entry.name == name:
                handler = self._handler_for(entry)
                break
        if handler is None:
            handler = default
        if handler is None:
            raise NotImplementedError(f"Route '{name}' not found on router {self.name!r}")

        if use_smartasync:
            from smartasync import smartasync  # type: ignore

            handler = smartasync(handler)

        return handler

    __getitem__ = get

    def call(self, name: str, *args, **kwargs):
        """Fetch and invoke a handler in one step."""
        handler = self.get(name)
        return handler(*args, **kwargs)

    def entries(self) -> Tuple[str, ...]:
        """Return logical names of the registered entries, in registration order."""
        return tuple(entry.name for entry in self._entries)

    def _handler_for(self, entry: RouteEntry) -> Callable:
        for candidate, handler in zip(self._entries, self._handlers):
            if candidate is entry:
                return handler
        raise KeyError(entry.name)  # pragma: no cover - entry always registered here

    # ------------------------------------------------------------------
    # Introspection helpers
    # ------------------------------------------------------------------
    def members(self) -> Dict[str, Any]:
        """Return a description of the router and its entries."""
        if not self._entries:
            return {}
        return {
            "name": self.name,
            "router": self,
            "resolved": self.is_resolved,
            "plugin_info": self._get_plugin_info(),
            "entries": [self._entry_member_info(entry) for entry in self._entries],
        }

    def _entry_member_info(self, entry: RouteEntry) -> Dict[str, Any]:
        declaration = entry.declaration
        info: Dict[str, Any] = {
            "name": entry.name,
            "callable": entry.func,
            "template": declaration.template,
            "accepted_versions": declaration.accepted_versions,
            "starting_version": declaration.starting_version,
            "order": declaration.order,
            "methods": declaration.methods,
            "metadata": entry.metadata,
            "doc": inspect.getdoc(entry.func) or "",
        }
        if entry.resolved is not None:
            info["versions"] = entry.resolved.versions
            info["route"] = entry.resolved.template
        extra = self._describe_entry_extra(entry, info)
        if extra:
            info.update(extra)
        return info

    def _get_plugin_info(self) -> Dict[str, Any]:
        info_source = getattr(self, "_plugin_info", {}) or {}
        return {
            pname: {
                key: {
                    "config": dict(slot.get("config", {})),
                    "locals": dict(slot.get("locals", {})),
                }
                for key, slot in pdata.items()
            }
            for pname, pdata in info_source.items()
        }

    # ------------------------------------------------------------------
    # Plugin hooks (no-op for BaseRouter)
    # ------------------------------------------------------------------
    def iter_plugins(self) -> List[Any]:  # pragma: no cover - base router has no plugins
        return []

    def _after_entry_registered(
        self, entry: RouteEntry
    ) -> None:  # pragma: no cover - hook for subclasses
        return None

    def _after_entry_resolved(
        self, entry: RouteEntry, resolved: ResolvedRoute
    ) -> None:  # pragma: no cover - hook for subclasses
        return None

    def _describe_entry_extra(
        self, entry: RouteEntry, base_description: Dict[str, Any]
    ) -> Dict[str, Any]:  # pragma: no cover - overridden when plugins present
        return {}


def _accepted_params(func: Callable, params: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only path parameters ``func`` can receive by keyword."""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):  # pragma: no cover - builtins without signature
        return dict(params)
    parameters = signature.parameters.values()
    if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in parameters):
        return dict(params)
    accepted = {
        p.name
        for p in parameters
        if p.kind in (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY)
    }
    return {key: value for key, value in params.items() if key in accepted}


def _unique_name(base: str, taken: Set[str]) -> str:
    """``base`` or the first free ``base_2``, ``base_3``, ..."""
    if base not in taken:
        return base
    index = 2
    while f"{base}_{index}" in taken:
        index += 1
    return f"{base}_{index}"
