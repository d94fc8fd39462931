"""Plugin contract used by the Router runtime.

Objects
~~~~~~~
``RouteEntry``
    Dataclass capturing a registered route. Fields:

    - ``name`` - logical name (declaration name, else handler ``__name__``)
    - ``func`` - callable invoked when a request matches
    - ``router`` - Router instance owning the entry
    - ``declaration`` - the ``RouteDeclaration`` the entry was registered with
    - ``plugins`` - names of plugins applied to the entry (order matters)
    - ``metadata`` - mutable dict plugins use for annotations
    - ``resolved`` - ``ResolvedRoute`` once the router has been resolved

``BasePlugin``
    Base class every plugin subclasses. Class attributes ``plugin_code`` and
    ``plugin_description`` are required. ``BasePlugin(router, **config)``
    forwards ``config`` to ``configure()``.

    ``configure(**config)``
        Declares accepted options through its signature. ``__init_subclass__``
        wraps it so that ``flags`` strings (``"enabled,before:off"``) become
        booleans, ``_target`` selects the bucket (``"--base--"`` for the router,
        a route name, or ``"a,b"`` for several) and the values are checked with
        Pydantic ``validate_call`` before being stored on the router.

    ``configuration(entry_name=None)``
        Merged configuration (router level plus per-entry override).

    Hooks (defaults are no-ops):

    - ``on_decore(router, func, entry)`` when an entry is registered;
    - ``on_resolve(router, entry, resolved)`` after the router resolved the
      entry against the current API version;
    - ``wrap_handler(router, entry, call_next)`` to build call middleware;
    - ``entry_metadata(router, entry)`` extra data for ``members()``.

Configuration lives in the router's ``_plugin_info`` store so every plugin
behaves the same way.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from pydantic import validate_call

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from versionroute.core.declaration import RouteDeclaration
    from versionroute.core.template import ResolvedRoute

__all__ = ["BasePlugin", "RouteEntry"]


@dataclass
class RouteEntry:
    """Metadata for a registered route handler."""

    name: str
    func: Callable
    router: Any
    declaration: "RouteDeclaration"
    plugins: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    resolved: Optional["ResolvedRoute"] = None


def _wrap_configure(original_configure: Callable) -> Callable:
    """Wrap a plugin's configure() to handle flags, _target, validation, and storage."""
    validated = validate_call(original_configure)

    def wrapper(self: "BasePlugin", *, _target: str = "--base--", flags: Optional[str] = None, **kwargs: Any) -> None:
        if flags:
            kwargs.update(self._parse_flags(flags))

        if "," in _target:
            for target in [t.strip() for t in _target.split(",") if t.strip()]:
                wrapper(self, _target=target, **kwargs)
            return

        validated(self, **kwargs)
        self._write_config(_target, kwargs)

    return wrapper


class BasePlugin:
    """Hook interface + configuration helpers for router plugins."""

    __slots__ = ("name", "_router")

    plugin_code: str = ""
    plugin_description: str = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "configure" in cls.__dict__:
            cls.configure = _wrap_configure(cls.__dict__["configure"])

    def __init__(self, router: Any, **config: Any):
        self.name = self.plugin_code
        self._router = router
        self._init_store()
        self.configure(**config)

    def _init_store(self) -> None:
        store = self._get_store()
        store.setdefault(self.name, {}).setdefault(
            "--base--", {"config": {"enabled": True}, "locals": {}}
        )

    def configure(self, *, _target: str = "--base--", flags: Optional[str] = None) -> None:
        """Override in subclasses to declare accepted options."""
        if flags:
            self._write_config(_target, self._parse_flags(flags))

    def _write_config(self, target: str, config: Dict[str, Any]) -> None:
        if not config:
            return
        plugin_bucket = self._get_store().setdefault(self.name, {})
        bucket = plugin_bucket.setdefault(target, {"config": {}, "locals": {}})
        bucket["config"].update(config)

    def configuration(self, entry_name: Optional[str] = None) -> Dict[str, Any]:
        """Read merged configuration (base + optional per-entry override)."""
        plugin_bucket = self._get_store().get(self.name)
        if not plugin_bucket:
            return {}
        merged = dict(plugin_bucket.get("--base--", {}).get("config", {}))
        if entry_name:
            merged.update(plugin_bucket.get(entry_name, {}).get("config", {}))
        return merged

    def _parse_flags(self, flags: str) -> Dict[str, bool]:
        mapping: Dict[str, bool] = {}
        for chunk in flags.split(","):
            chunk = chunk.strip()
            if not chunk:
                continue
            if ":" in chunk:
                name, value = chunk.split(":", 1)
                mapping[name.strip()] = value.strip().lower() != "off"
            else:
                mapping[chunk] = True
        return mapping

    def on_decore(
        self, router: Any, func: Callable, entry: RouteEntry
    ) -> None:  # pragma: no cover - default no-op
        """Hook run when the route is registered."""

    def on_resolve(
        self, router: Any, entry: RouteEntry, resolved: "ResolvedRoute"
    ) -> None:  # pragma: no cover - default no-op
        """Hook run after the route has been resolved."""

    def wrap_handler(self, router: Any, entry: RouteEntry, call_next: Callable) -> Callable:
        """Wrap handler invocation; default passthrough."""
        return call_next

    def entry_metadata(self, router: Any, entry: RouteEntry) -> Dict[str, Any]:
        return {}

    def _get_store(self) -> Dict[str, Any]:
        return getattr(self._router, "_plugin_info")
