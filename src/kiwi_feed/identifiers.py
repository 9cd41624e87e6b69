"""Item identifier codec.

Every stored row (submission, upvote, comment) is keyed by one id drawn from a
single global sequence: ``<namespace>:0x<sequence>``. The sequence is the hex
``index`` carried by the inbound message and doubles as the human-facing
"derived index" exposed by feed views.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from kiwi_feed.errors import InvalidItemId

DEFAULT_NAMESPACE = "kiwi"
_MARKER = ":0x"
_SEQUENCE_RE = re.compile(r"[0-9a-fA-F]+")


@dataclass(slots=True, frozen=True)
class ItemId:
    """Structured ``{namespace, sequence}`` item identifier."""

    namespace: str
    sequence: str

    def __post_init__(self) -> None:
        if not self.namespace or ":" in self.namespace:
            raise InvalidItemId(f"Invalid item id namespace: {self.namespace!r}")
        if not _SEQUENCE_RE.fullmatch(self.sequence):
            raise InvalidItemId(f"Invalid item id sequence: {self.sequence!r}")

    def encode(self) -> str:
        return f"{self.namespace}{_MARKER}{self.sequence}"

    def __str__(self) -> str:
        return self.encode()

    @classmethod
    def parse(cls, value: str) -> ItemId:
        namespace, marker, sequence = value.partition(_MARKER)
        if not marker:
            raise InvalidItemId(f"Item id has no {_MARKER!r} marker: {value!r}")
        return cls(namespace=namespace, sequence=sequence)

    @classmethod
    def for_index(cls, namespace: str, index: str | int) -> ItemId:
        """Build an id from a message or lookup index (hex string or integer)."""

        if isinstance(index, bool):
            raise InvalidItemId(f"Invalid item index: {index!r}")
        if isinstance(index, int):
            if index < 0:
                raise InvalidItemId(f"Invalid item index: {index!r}")
            sequence = str(index)
        else:
            sequence = index.strip()
            if sequence[:2].lower() == "0x":
                sequence = sequence[2:]
        return cls(namespace=namespace, sequence=sequence)


def derived_index(item_id: str) -> str:
    """Return the sequence part of a stored item id."""

    return ItemId.parse(item_id).sequence
