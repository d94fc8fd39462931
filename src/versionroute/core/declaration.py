"""Route declaration value object.

A ``RouteDeclaration`` is what a handler states about itself: the resource
template it serves and which API versions it answers for. It is built once
when the handler is registered and never changes afterwards.

Fields
------
- ``template``: path fragment appended after ``api/v{version}/``. Validated on
  construction; stored unchanged.
- ``accepted_versions``: explicit versions, kept literally as a tuple (order
  and duplicates preserved). ``None`` means unset.
- ``starting_version``: first served version, ``None`` means unset.
- ``name`` / ``order`` / ``methods``: passthrough metadata for the host.

Only the template is checked here. The version constraints are checked by the
resolver so a bad pair surfaces when the host resolves routes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

from .validation import validate_template

__all__ = ["RouteDeclaration", "DEFAULT_METHODS"]

DEFAULT_METHODS: Tuple[str, ...] = ("GET",)


@dataclass(frozen=True)
class RouteDeclaration:
    """Versioning intent of a single handler route."""

    template: str
    accepted_versions: Optional[Tuple[int, ...]] = None
    starting_version: Optional[int] = None
    name: Optional[str] = None
    order: int = 0
    methods: Tuple[str, ...] = field(default=DEFAULT_METHODS)

    def __post_init__(self) -> None:
        validate_template(self.template)
        if self.accepted_versions is not None:
            object.__setattr__(self, "accepted_versions", tuple(self.accepted_versions))
        object.__setattr__(self, "methods", _normalize_methods(self.methods))

    @property
    def is_explicit(self) -> bool:
        """True when the declaration lists its versions explicitly."""
        return self.accepted_versions is not None


def _normalize_methods(methods: Iterable[str]) -> Tuple[str, ...]:
    if isinstance(methods, str):
        methods = methods.split(",")
    cleaned = tuple(str(method).strip().upper() for method in methods if str(method).strip())
    if not cleaned:
        raise ValueError("A route needs at least one HTTP method")
    return cleaned
