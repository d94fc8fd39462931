"""Current API version lookup (configuration capability).

The resolver never reads configuration storage itself. Callers hand it a
*version source*: any object exposing ``current_api_version()`` that returns
the raw setting (``str``, ``int`` or ``None``). Three sources ship with the
package:

- ``AppSettings``: reads ``currentApiVersion`` from an application settings
  mapping.
- ``EnvironSettings``: reads ``CURRENT_API_VERSION`` from the process
  environment (or an injected mapping).
- ``StaticVersion``: returns a fixed value.

``read_current_version`` turns the raw value into a positive ``int``. Strings
must be plain integer text (surrounding blanks and a sign allowed); the number
is then checked with Pydantic strict mode, so floats and numeric strings such
as ``"3.0"`` or ``"1_0"`` are rejected. Failures raise ``InvalidConfiguration``.
"""

from __future__ import annotations

import os
from typing import Annotated, Any, Mapping, Optional, Protocol, Union, runtime_checkable

from pydantic import PositiveInt, StringConstraints, TypeAdapter, ValidationError

from .errors import InvalidConfiguration

__all__ = [
    "APP_KEY_CURRENT_API_VERSION",
    "ENV_CURRENT_API_VERSION",
    "VersionSource",
    "AppSettings",
    "EnvironSettings",
    "StaticVersion",
    "read_current_version",
]

APP_KEY_CURRENT_API_VERSION = "currentApiVersion"
ENV_CURRENT_API_VERSION = "CURRENT_API_VERSION"

RawVersion = Union[str, int, None]

_POSITIVE_INT = TypeAdapter(PositiveInt)
_INTEGER_TEXT = TypeAdapter(Annotated[str, StringConstraints(pattern=r"^\s*[+-]?[0-9]+\s*$")])


@runtime_checkable
class VersionSource(Protocol):
    def current_api_version(self) -> RawVersion:  # pragma: no cover - protocol
        ...


class AppSettings:
    """Application settings mapping (e.g. parsed ``appSettings`` section)."""

    __slots__ = ("_settings", "key")

    def __init__(self, settings: Mapping[str, Any], key: str = APP_KEY_CURRENT_API_VERSION):
        self._settings = settings
        self.key = key

    def current_api_version(self) -> RawVersion:
        return self._settings.get(self.key)


class EnvironSettings:
    """Environment variable lookup; ``environ`` defaults to ``os.environ``."""

    __slots__ = ("variable", "_environ")

    def __init__(
        self,
        variable: str = ENV_CURRENT_API_VERSION,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.variable = variable
        self._environ = environ

    def current_api_version(self) -> RawVersion:
        environ = os.environ if self._environ is None else self._environ
        return environ.get(self.variable)


class StaticVersion:
    """Fixed current version."""

    __slots__ = ("value",)

    def __init__(self, value: RawVersion):
        self.value = value

    def current_api_version(self) -> RawVersion:
        return self.value


def read_current_version(source: VersionSource) -> int:
    """Fetch and parse the current API version from ``source``.

    Raises:
        InvalidConfiguration: value missing, non-numeric or lower than 1.
    """
    raw = source.current_api_version()
    if raw is None or isinstance(raw, bool):
        raise InvalidConfiguration(_config_message())
    try:
        if isinstance(raw, str):
            raw = int(_INTEGER_TEXT.validate_python(raw))
        return _POSITIVE_INT.validate_python(raw, strict=True)
    except ValidationError as exc:
        raise InvalidConfiguration(_config_message()) from exc


def _config_message() -> str:
    return f"The '{APP_KEY_CURRENT_API_VERSION}' app setting must be a positive integer."
