"""Parsing of plugin parameters.

Parameters of selectors and filters come from YAML/JSON configs or from
statistics files, so they arrive as ints, bools or strings alike.
"""

from __future__ import annotations

from oligotile.core.errors import ConfigurationError

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


def parse_int(name: str, value: object, *, optional: bool = False) -> int | None:
    if value is None:
        if optional:
            return None
        msg = f"Missing parameter: {name}"
        raise ConfigurationError(msg)
    if isinstance(value, bool):
        msg = f"Invalid value for {name}: {value!r}"
        raise ConfigurationError(msg)
    try:
        return int(str(value).strip())
    except ValueError as exc:
        msg = f"Invalid value for {name}: {value!r}"
        raise ConfigurationError(msg) from exc


def parse_flag(name: str, value: object) -> bool:
    """``True``/``False`` from a bool, a number or a yes/no style string."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    msg = f"Invalid value for {name}: {value!r}"
    raise ConfigurationError(msg)


__all__ = ["parse_int", "parse_flag"]
