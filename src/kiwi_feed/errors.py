"""kiwi-feed exception hierarchy."""

from __future__ import annotations


class KiwiFeedError(Exception):
    """Base exception for all kiwi-feed errors."""


class InvalidItemId(KiwiFeedError, ValueError):
    """Raised when an item id does not follow the ``<namespace>:0x<hex>`` form."""


class InvalidMessage(KiwiFeedError, ValueError):
    """Raised when an inbound message payload is missing fields or has wrong types."""


class UnsupportedMessageType(KiwiFeedError, ValueError):
    """Raised for message types other than ``amplify`` and ``comment``."""

    def __init__(self, message_type: object) -> None:
        super().__init__(f"Unsupported message type: {message_type!r}")
        self.message_type = message_type


class SubmissionNotFound(KiwiFeedError, LookupError):
    """Raised when no submission matches the requested index."""

    def __init__(self, index: object) -> None:
        super().__init__(f"Couldn't find submission with index: {index}")
        self.index = index


class ConstraintViolation(KiwiFeedError):
    """Raised when the store rejects an insert on an integrity constraint."""


class DuplicateRecord(ConstraintViolation):
    """Raised when an id or href uniqueness invariant would be violated."""


class MissingReference(ConstraintViolation):
    """Raised when an insert references a submission that does not exist."""


class SchemaConflict(KiwiFeedError):
    """Raised when the database holds only part of the feed schema."""


class CacheFull(KiwiFeedError):
    """Raised when a bounded cache cannot accept another key."""
