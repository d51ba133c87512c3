"""Filters applied to candidates before their measurements are computed."""

from __future__ import annotations

from typing import ClassVar, Final, Protocol

from oligotile.core.candidate import Oligo
from oligotile.core.errors import ConfigurationError

_ACGT: Final = frozenset("ACGTacgt")
_UNKNOWN: Final = frozenset("NnXx")


class SequenceFilter(Protocol):
    name: ClassVar[str]

    def accept(self, oligo: Oligo) -> bool:
        """Return ``True`` to keep the candidate."""


class UnknownBaseFilter:
    """Reject oligos holding unknown (``N``) or hard-masked (``X``) bases."""

    name: ClassVar[str] = "xn"

    def accept(self, oligo: Oligo) -> bool:
        return not any(base in _UNKNOWN for base in oligo.tokens)


class NotACGTFilter:
    """Reject oligos holding anything else than ``A``, ``C``, ``G`` or ``T``."""

    name: ClassVar[str] = "notacgt"

    def accept(self, oligo: Oligo) -> bool:
        return all(base in _ACGT for base in oligo.tokens)


_REGISTRY: Final[dict[str, type]] = {
    "xn": UnknownBaseFilter,
    "notacgt": NotACGTFilter,
}


def sequence_filter_from_name(name: str, **params: object) -> SequenceFilter:
    key = name.lower()
    if key not in _REGISTRY:
        msg = f"Unknown sequence filter: {name}. Available: {list(_REGISTRY.keys())}"
        raise ConfigurationError(msg)
    try:
        return _REGISTRY[key](**params)
    except TypeError as exc:
        msg = f"Invalid parameters for sequence filter {name}: {exc}"
        raise ConfigurationError(msg) from exc


__all__ = ["SequenceFilter", "UnknownBaseFilter", "NotACGTFilter", "sequence_filter_from_name"]
