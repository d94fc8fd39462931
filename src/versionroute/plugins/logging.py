"""Logging plugin.

Responsibilities
----------------
- Wrap each handler call and emit configurable messages:
  * ``before`` (default True): ``"{entry.name} start"``; when the call carries
    a ``version`` keyword the label becomes ``"{entry.name} v{version}"``.
  * ``after`` (default True): ``"{label} end (<ms> ms)"`` with
    ``{elapsed:.2f}`` formatting.
- After ``Router.resolve``: ``resolve`` (default True) emits
  ``"{entry.name} -> {rendered template}"`` once per route.
- Sinks:
  * ``print`` true -> ``print(message)``;
  * else ``log`` true -> ``logger.info(message)`` if the logger has handlers,
    otherwise ``print(message)`` so messages are not dropped;
  * else no output.
- ``enabled`` gates the plugin entirely (default True).
- Logger defaults to ``logging.getLogger("versionroute")``.

Configuration
-------------
Accepted keys (router level or per entry): ``enabled``, ``before``,
``after``, ``resolve``, ``log``, ``print``; as kwargs, ``flags`` strings
(``"before:off,print:on"``) or ``logging_<key>`` options on ``api_route``.
Exceptions raised by handlers propagate and skip the end message.

Registration
------------
Registers itself as ``"logging"`` at import.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from versionroute.core.router import Router
from versionroute.core.template import ResolvedRoute
from versionroute.plugins._base_plugin import BasePlugin, RouteEntry


class LoggingPlugin(BasePlugin):
    """Logs route resolution and handler calls with timing."""

    plugin_code = "logging"
    plugin_description = "Logs route resolution and handler calls with timing"

    __slots__ = ("_logger",)

    def __init__(self, router, *, logger: Optional[logging.Logger] = None, **cfg):
        self._logger = logger or logging.getLogger("versionroute")
        super().__init__(router, **cfg)

    def configure(
        self,
        enabled: bool = True,
        before: bool = True,
        after: bool = True,
        resolve: bool = True,
        log: bool = True,
        print: bool = False,  # noqa: A002 - shadowing builtin intentionally
    ):
        """Configure logging plugin options.

        The wrapper added by __init_subclass__ handles writing to store.
        """
        pass

    def _emit(self, message: str, *, cfg: Optional[dict] = None):
        if cfg is None:
            return
        if cfg.get("print"):
            print(message)
            return
        if cfg.get("log"):
            logger = self._logger
            has_handlers = getattr(logger, "hasHandlers", None) or getattr(
                logger, "has_handlers", None
            )
            if callable(has_handlers) and has_handlers():
                logger.info(message)
            else:
                print(message)

    def on_resolve(self, router, entry: RouteEntry, resolved: ResolvedRoute) -> None:
        cfg = self._effective_config(entry.name)
        if cfg["enabled"] and cfg["resolve"]:
            self._emit(f"{entry.name} -> {resolved.template}", cfg=cfg)

    def wrap_handler(self, router, entry: RouteEntry, call_next: Callable):
        """Wrap handler with start/end logging and timing."""

        def logged(*args, **kwargs):
            cfg = self._effective_config(entry.name)
            if not cfg["enabled"]:
                return call_next(*args, **kwargs)
            version = kwargs.get("version")
            label = entry.name if version is None else f"{entry.name} v{version}"
            if cfg["before"]:
                self._emit(f"{label} start", cfg=cfg)
            t0 = time.perf_counter()
            result = call_next(*args, **kwargs)
            elapsed = (time.perf_counter() - t0) * 1000
            if cfg["after"]:
                self._emit(f"{label} end ({elapsed:.2f} ms)", cfg=cfg)
            return result

        return logged

    def _effective_config(self, entry_name: str) -> dict:
        defaults = {
            "enabled": True,
            "before": True,
            "after": True,
            "resolve": True,
            "log": True,
            "print": False,
        }
        cfg = defaults | self.configuration(entry_name)

        def to_bool(key: str) -> bool:
            val = cfg.get(key)
            return defaults[key] if val is None else bool(val)

        return {key: to_bool(key) for key in defaults}


Router.register_plugin(LoggingPlugin)
