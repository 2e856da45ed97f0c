"""
Identifier sets used to address torrents in RPC requests.

The wire form is deliberately asymmetric: a single id is a bare integer, a
sequence is always a JSON array (even with one element) and the sentinel is
the string "recently-active".
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Union

Identifier = Union[int, str]

RECENTLY_ACTIVE = "recently-active"


class IdsKind(Enum):
    """Variants of an identifier set."""

    SINGLE = "single"
    SEQUENCE = "sequence"
    RECENTLY_ACTIVE = "recently_active"


def _check_identifier(value: object) -> Identifier:
    # bool is a subclass of int and must not leak onto the wire as an id
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise TypeError(
            f"Identifier must be an int id or a hash string, got {value!r}"
        )
    return value


def _is_torrent_id(text: str) -> bool:
    # str.isdigit() also accepts superscripts and non-ASCII digits
    return text.isascii() and text.isdigit()


@dataclass(frozen=True)
class Ids:
    """An identifier set: one id, an ordered sequence of ids, or recently-active."""

    kind: IdsKind = IdsKind.RECENTLY_ACTIVE
    value: Union[int, tuple[Identifier, ...], None] = None

    def __post_init__(self):
        if self.kind is IdsKind.SINGLE:
            if isinstance(self.value, bool) or not isinstance(self.value, int):
                raise TypeError(f"A single id must be an int, got {self.value!r}")
        elif self.kind is IdsKind.SEQUENCE:
            if not isinstance(self.value, tuple):
                raise TypeError("A sequence of ids must be stored as a tuple.")
            for item in self.value:
                _check_identifier(item)
        elif self.value is not None:
            raise TypeError("The recently-active sentinel carries no value.")

    @classmethod
    def single(cls, torrent_id: int) -> "Ids":
        return cls(IdsKind.SINGLE, torrent_id)

    @classmethod
    def of(cls, identifiers: Iterable[Identifier]) -> "Ids":
        return cls(IdsKind.SEQUENCE, tuple(identifiers))

    @classmethod
    def recently_active(cls) -> "Ids":
        return cls()

    @classmethod
    def coerce(cls, ids: "Ids | Identifier | Iterable[Identifier]") -> "Ids":
        """Accepts an Ids, a single int id, a hash string or an iterable of ids."""
        if isinstance(ids, Ids):
            return ids
        if isinstance(ids, int) and not isinstance(ids, bool):
            return cls.single(ids)
        if isinstance(ids, str):
            return cls.of([ids])
        return cls.of(ids)

    @classmethod
    def parse(cls, text: str) -> "Ids":
        """
        Builds an identifier set from command-line text.

        "recent" or "recently-active" selects the sentinel, a lone integer a
        single id, and a comma separated list a sequence in which integers stay
        integers and anything else is treated as a hash string.
        """
        text = text.strip()
        if text.lower() in ("recent", RECENTLY_ACTIVE):
            return cls.recently_active()

        parts = [part.strip() for part in text.split(",") if part.strip()]
        if not parts:
            raise ValueError("No torrent ids given.")

        if len(parts) == 1 and "," not in text and _is_torrent_id(parts[0]):
            return cls.single(int(parts[0]))

        return cls.of(int(part) if _is_torrent_id(part) else part for part in parts)

    def to_wire(self) -> Union[int, list[Identifier], str]:
        """Returns the JSON-ready value for the `ids` request argument."""
        if self.kind is IdsKind.SINGLE:
            return self.value
        if self.kind is IdsKind.SEQUENCE:
            return list(self.value)
        return RECENTLY_ACTIVE
