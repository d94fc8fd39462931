"""Pydantic validation plugin for route path parameters.

Responsibilities
----------------
- At registration time (``on_decore``), read the route parameters of the
  declaration template (plus the ``version`` prefix parameter) and build a
  Pydantic model with one field per parameter the handler can receive.
- At call time (``wrap_handler``), validate the matched path values before
  calling the real handler. Path values arrive as strings (or ``int`` for
  ``int``/``long`` constraints) and are coerced to the handler's hint
  (``id: UUID`` receives a ``UUID``).
- Validation failures surface as Pydantic ``ValidationError`` titled
  ``"Validation error in <entry.name>"``.

Field types
-----------
- the handler's type hint for the parameter name when present;
- otherwise ``int`` for ``version`` and ``int``/``long`` constrained
  parameters, ``str`` for everything else.

Defaults come from the handler signature. Optional route parameters
(``{id?}``, ``{*rest}``) without a handler default become ``Optional`` with
``None``. A handler taking ``**kwargs`` receives every route parameter.

Behaviour
---------
- ``on_decore``: handlers without a signature or with unresolvable hints
  skip model creation. Metadata is stored in ``entry.metadata["pydantic"]``
  as ``{"model", "fields", "signature"}``.
- ``wrap_handler``: passthrough when no model exists. Otherwise binds the
  call, validates the route values passed to it (handler defaults fill the
  rest) and calls the next layer with keyword arguments. Other arguments
  (request objects, services) are passed through unvalidated even when
  annotated. ``disabled`` config is read at call time.

Registration
------------
Registers itself as ``"pydantic"`` at import.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Dict, Optional, get_type_hints

from pydantic import ValidationError, create_model

from versionroute.core.router import Router
from versionroute.core.validation import (
    INT_CONSTRAINTS,
    VERSION_PARAM,
    RouteParameter,
    iter_route_parameters,
)
from versionroute.plugins._base_plugin import BasePlugin, RouteEntry


class PydanticPlugin(BasePlugin):
    """Validate route path parameters with Pydantic."""

    plugin_code = "pydantic"
    plugin_description = "Validates route path parameters using Pydantic"

    def configure(self, disabled: bool = False):
        """Configure pydantic plugin options.

        The wrapper added by __init_subclass__ handles writing to store.
        """
        pass

    def on_decore(self, router: Router, func: Callable, entry: RouteEntry) -> None:
        try:
            sig = inspect.signature(func)
            hints = get_type_hints(func)
        except Exception:
            return

        takes_kwargs = any(p.kind is inspect.Parameter.VAR_KEYWORD for p in sig.parameters.values())
        params = [RouteParameter(VERSION_PARAM, constraints=(("int", None),))]
        params.extend(iter_route_parameters(entry.declaration.template))

        fields: Dict[str, Any] = {}
        for param in params:
            if param.name.startswith("_"):
                continue
            handler_param = sig.parameters.get(param.name)
            if handler_param is None and not takes_kwargs:
                continue
            hint = hints.get(param.name, _fallback_type(param))
            if handler_param is not None and handler_param.default is not inspect.Parameter.empty:
                fields[param.name] = (hint, handler_param.default)
            elif param.optional or param.catch_all:
                fields[param.name] = (Optional[hint], None)
            else:
                fields[param.name] = (hint, ...)
        if not fields:
            return

        validation_model = create_model(f"{func.__name__}_RouteModel", **fields)  # type: ignore

        entry.metadata["pydantic"] = {
            "model": validation_model,
            "fields": tuple(fields),
            "signature": sig,
        }

    def wrap_handler(self, router: Router, entry: RouteEntry, call_next: Callable):
        """Validate route values with the cached Pydantic model before calling."""
        meta = entry.metadata.get("pydantic", {})
        model = meta.get("model")
        if not model:
            return call_next

        sig = meta["signature"]
        fields = meta["fields"]
        var_keyword = next(
            (p.name for p in sig.parameters.values() if p.kind is inspect.Parameter.VAR_KEYWORD),
            None,
        )

        def wrapper(*args, **kwargs):
            cfg = self.configuration(entry.name)
            if cfg.get("disabled"):
                return call_next(*args, **kwargs)

            bound = sig.bind_partial(*args, **kwargs)
            arguments = dict(bound.arguments)
            if var_keyword is not None:
                arguments.update(arguments.pop(var_keyword, {}))
            route_values = {k: v for k, v in arguments.items() if k in fields}
            try:
                validated = model(**route_values)
            except ValidationError as exc:
                raise ValidationError.from_exception_data(
                    title=f"Validation error in {entry.name}",
                    line_errors=exc.errors(),
                ) from exc

            final_args = arguments.copy()
            for key in validated.model_fields_set:
                final_args[key] = getattr(validated, key)
            return call_next(**final_args)

        return wrapper

    def entry_metadata(self, router: Any, entry: RouteEntry) -> Dict[str, Any]:
        meta = entry.metadata.get("pydantic", {})
        if not meta:
            return {}
        return {"model": meta.get("model"), "fields": meta.get("fields")}


def _fallback_type(param: RouteParameter) -> type:
    return int if param.has_constraint(*INT_CONSTRAINTS) else str


Router.register_plugin(PydanticPlugin)
