"""Domain models for inbound signed messages."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from kiwi_feed.errors import InvalidMessage, UnsupportedMessageType


class MessageType(str, Enum):
    """Message types accepted by the classifier."""

    AMPLIFY = "amplify"
    COMMENT = "comment"


class IngestAction(str, Enum):
    """Relation a message was written to."""

    SUBMISSION = "submission"
    UPVOTE = "upvote"
    COMMENT = "comment"


_TEXT_FIELDS = ("href", "title", "signer", "identity")


@dataclass(slots=True, frozen=True)
class Message:
    """Signed message whose signature was verified upstream."""

    type: MessageType
    href: str
    index: str | int
    title: str
    timestamp: int
    signer: str
    identity: str
    signature: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, object]) -> Message:
        """Validate a raw message mapping.

        The type is checked first so unknown types fail with
        ``UnsupportedMessageType`` whatever else the payload holds.
        """

        raw_type = payload.get("type")
        try:
            message_type = MessageType(raw_type)
        except ValueError as error:
            raise UnsupportedMessageType(raw_type) from error

        text_values: dict[str, str] = {}
        for name in _TEXT_FIELDS:
            value = payload.get(name)
            if not isinstance(value, str):
                raise InvalidMessage(f"Message field {name!r} must be a string, got {value!r}")
            text_values[name] = value

        index = payload.get("index")
        if isinstance(index, bool) or not isinstance(index, str | int):
            raise InvalidMessage(f"Message field 'index' must be a hex string, got {index!r}")

        timestamp = payload.get("timestamp")
        if isinstance(timestamp, bool) or not isinstance(timestamp, int):
            raise InvalidMessage(
                f"Message field 'timestamp' must be an integer, got {timestamp!r}",
            )

        signature = payload.get("signature")
        if signature is not None and not isinstance(signature, str):
            raise InvalidMessage("Message field 'signature' must be a string when present")

        return cls(
            type=message_type,
            index=index,
            timestamp=timestamp,
            signature=signature,
            **text_values,
        )
