"""Declaration checks run before any version math.

``validate_template`` runs when a declaration is built; ``validate_constraints``
runs at resolution time, mirroring when the routing host first needs the
version list.

Route parameters follow the ``{name[:constraint...][=default|?]}`` grammar,
with a leading ``*`` or ``**`` marking a catch-all. ``split_route_parameter``
is shared with the template matcher so both agree on names. The ``version``
name is reserved for the prefix added at resolution time.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple

from .errors import ConflictingConstraints, InvalidDeclaration, InvalidVersionValue

__all__ = [
    "PATH_SEPARATOR",
    "VERSION_PARAM",
    "INT_CONSTRAINTS",
    "RouteParameter",
    "iter_route_parameters",
    "split_route_parameter",
    "validate_template",
    "validate_constraints",
]

PATH_SEPARATOR = "/"
VERSION_PARAM = "version"
INT_CONSTRAINTS = ("int", "long")

PARAM_RE = re.compile(r"\{([^{}]+)\}")
_CONSTRAINT_RE = re.compile(r"(\w+)(?:\(([^)]*)\))?")


@dataclass(frozen=True)
class RouteParameter:
    name: str
    constraints: Tuple[Tuple[str, Optional[str]], ...] = ()
    optional: bool = False
    catch_all: bool = False
    default: Optional[str] = None

    def has_constraint(self, *kinds: str) -> bool:
        return any(kind.lower() in kinds for kind, _ in self.constraints)


def split_route_parameter(spec: str) -> RouteParameter:
    """Parse the text between braces of a route parameter."""
    text = spec.strip()
    catch_all = text.startswith("*")
    text = text.lstrip("*")
    default: Optional[str] = None
    optional = False
    if "=" in text:
        text, default = text.split("=", 1)
        optional = True
    elif text.endswith("?"):
        text = text[:-1]
        optional = True
    name, _, constraint_text = text.partition(":")
    constraints = tuple(
        (found.group(1), found.group(2)) for found in _CONSTRAINT_RE.finditer(constraint_text)
    )
    return RouteParameter(
        name=name.strip(),
        constraints=constraints,
        optional=optional,
        catch_all=catch_all,
        default=default,
    )


def iter_route_parameters(template: str) -> Iterator[RouteParameter]:
    for found in PARAM_RE.finditer(template):
        yield split_route_parameter(found.group(1))


def validate_template(template: Optional[str]) -> str:
    """Return ``template`` unchanged or raise ``InvalidDeclaration``."""
    if template is None or not isinstance(template, str) or not template.strip():
        raise InvalidDeclaration("template")
    if template.startswith(PATH_SEPARATOR):
        raise InvalidDeclaration(
            "The route cannot start with a forward slash ('/') since it will be "
            "prefixed with the api version (e.g. api/v2/)."
        )
    seen = set()
    for param in iter_route_parameters(template):
        if not param.name.isidentifier():
            raise InvalidDeclaration(f"Invalid route parameter name: {param.name!r}")
        key = param.name.lower()
        if key == VERSION_PARAM:
            raise InvalidDeclaration(
                f"The route parameter '{{{VERSION_PARAM}}}' is reserved for the api version prefix."
            )
        if key in seen:
            raise InvalidDeclaration(f"The route parameter '{param.name}' appears more than once.")
        seen.add(key)
    return template


def _is_positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def validate_constraints(
    accepted_versions: Optional[Sequence[int]], starting_version: Optional[int]
) -> None:
    """Check the accepted/starting version pair of a declaration.

    Raises:
        ConflictingConstraints: both values are set.
        InvalidVersionValue: an accepted version or the starting version is not
            a positive integer, or the accepted list is empty.
    """
    if accepted_versions is not None and starting_version is not None:
        raise ConflictingConstraints(
            "Either 'accepted_versions' or 'starting_version' can be set, but not both."
        )
    if accepted_versions is not None:
        if not accepted_versions:
            raise InvalidVersionValue("The explicitly specified accepted versions cannot be empty.")
        if not all(_is_positive_int(version) for version in accepted_versions):
            raise InvalidVersionValue(
                "The explicitly specified accepted versions must all be positive integers."
            )
    if starting_version is not None and not _is_positive_int(starting_version):
        raise InvalidVersionValue("The 'starting_version' must be a positive integer.")
