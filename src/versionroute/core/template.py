"""Route template builder and matcher.

``build_route_template(versions, template)`` renders::

    api/v{version:int:regex(2|3|4)}/<template>

with versions joined by ``|`` in the order the resolver produced them. The
fragment is appended untouched (no slash or case normalization).

``resolve_route`` chains resolver and builder and returns a ``ResolvedRoute``
carrying the passthrough metadata (name, order, methods).

``compile_template`` turns a rendered template into a ``TemplateMatcher`` used
by the in-process router:

- ``{param}`` matches a single path segment;
- ``{param:int}`` (or ``long``) matches digits and converts the value to ``int``;
- ``{param:...:regex(a|b)}`` matches the alternation ``a|b``;
- ``alpha``, ``bool`` and ``guid`` narrow the segment; other constraints
  (``min(1)``, ``length(3)``, ...) accept any segment;
- ``{param?}`` and ``{param=default}`` may be omitted together with their
  leading slash;
- ``{*rest}`` captures the remaining path, slashes included, and may be empty.

Matching is case-insensitive and tolerates a trailing slash on either side.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from .declaration import RouteDeclaration
from .resolver import resolve_versions
from .settings import VersionSource
from .validation import (
    INT_CONSTRAINTS,
    PARAM_RE,
    VERSION_PARAM,
    RouteParameter,
    split_route_parameter,
)

__all__ = [
    "ROUTE_PREFIX",
    "VERSION_PARAM",
    "ResolvedRoute",
    "TemplateMatcher",
    "build_route_template",
    "compile_template",
    "resolve_route",
]

ROUTE_PREFIX = "api/v"
_SEGMENT_PATTERNS = {
    "alpha": "[a-z]+",
    "bool": "true|false",
    "guid": r"[0-9a-f]{8}-?[0-9a-f]{4}-?[0-9a-f]{4}-?[0-9a-f]{4}-?[0-9a-f]{12}",
}


def build_route_template(versions: Iterable[int], template: str) -> str:
    alternation = "|".join(str(version) for version in versions)
    return f"{ROUTE_PREFIX}{{{VERSION_PARAM}:int:regex({alternation})}}/{template}"


@dataclass(frozen=True)
class ResolvedRoute:
    """A declaration expanded against a configuration snapshot."""

    declaration: RouteDeclaration
    versions: Tuple[int, ...]
    template: str

    @property
    def name(self) -> Optional[str]:
        return self.declaration.name

    @property
    def order(self) -> int:
        return self.declaration.order

    @property
    def methods(self) -> Tuple[str, ...]:
        return self.declaration.methods


def resolve_route(declaration: RouteDeclaration, source: VersionSource) -> ResolvedRoute:
    versions = resolve_versions(declaration, source)
    return ResolvedRoute(
        declaration=declaration,
        versions=versions,
        template=build_route_template(versions, declaration.template),
    )


@dataclass(frozen=True)
class TemplateMatcher:
    pattern: re.Pattern
    int_params: FrozenSet[str] = field(default_factory=frozenset)
    defaults: Mapping[str, str] = field(default_factory=dict)

    def match(self, path: str) -> Optional[Dict[str, Any]]:
        """Return converted path parameters or ``None`` when ``path`` does not match.

        Optional parameters missing from ``path`` take their declared default
        or are left out.
        """
        path = path.split("?", 1)[0].lstrip("/")
        found = self.pattern.match(path)
        if found is None:
            return None
        params: Dict[str, Any] = {}
        for key, value in found.groupdict().items():
            if value is None:
                value = self.defaults.get(key)
                if value is None:
                    continue
            params[key] = int(value) if key in self.int_params else value
        return params


def compile_template(template: str) -> TemplateMatcher:
    parts = []
    int_params = set()
    defaults = {}
    position = 0
    body = template.rstrip("/")
    for found in PARAM_RE.finditer(body):
        literal = body[position : found.start()]
        param = split_route_parameter(found.group(1))
        segment, is_int = _segment_pattern(param)
        if is_int:
            int_params.add(param.name)
        group = f"(?P<{param.name}>{segment})"
        if param.optional or param.catch_all:
            if literal.endswith("/"):
                parts.append(re.escape(literal[:-1]))
                group = f"(?:/{group})?"
            else:
                parts.append(re.escape(literal))
                group = f"{group}?"
        else:
            parts.append(re.escape(literal))
        if param.default is not None:
            defaults[param.name] = param.default
        parts.append(group)
        position = found.end()
    parts.append(re.escape(body[position:]))
    pattern = re.compile("^" + "".join(parts) + "/?$", re.IGNORECASE)
    return TemplateMatcher(pattern=pattern, int_params=frozenset(int_params), defaults=defaults)


def _segment_pattern(param: RouteParameter) -> Tuple[str, bool]:
    if not param.name.isidentifier():
        raise ValueError(f"Invalid route parameter name: {param.name!r}")
    if param.catch_all:
        return ".+", False
    is_int = param.has_constraint(*INT_CONSTRAINTS)
    for kind, argument in param.constraints:
        if kind.lower() == "regex" and argument is not None:
            return f"(?:{argument})", is_int
    if is_int:
        return r"-?\d+", True
    for kind, _ in param.constraints:
        segment = _SEGMENT_PATTERNS.get(kind.lower())
        if segment is not None:
            return segment, False
    # remaining constraints (min, length, ...) only narrow values; any segment matches
    return "[^/]+", False
