"""Ingestion classifier: one verified message in, exactly one row out."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from kiwi_feed.errors import (
    ConstraintViolation,
    DuplicateRecord,
    InvalidItemId,
    InvalidMessage,
    MissingReference,
    UnsupportedMessageType,
)
from kiwi_feed.identifiers import DEFAULT_NAMESPACE, ItemId
from kiwi_feed.ingestion.models import IngestAction, Message, MessageType
from kiwi_feed.ingestion.normalization import normalize_href
from kiwi_feed.storage.sqlmodel_models import Comment, Submission, Upvote
from kiwi_feed.storage.store import KiwiStore

logger = logging.getLogger(__name__)


class MessageClassifier:
    """Routes amplify and comment messages to their relation.

    An amplify becomes a submission the first time its normalized href is
    seen and an upvote on that submission afterwards. The href check and the
    submission insert are one conditional statement, so concurrent first
    amplifies for the same href yield one submission and upvotes for the rest.
    """

    def __init__(self, store: KiwiStore, *, namespace: str = DEFAULT_NAMESPACE) -> None:
        self.store = store
        self.namespace = namespace

    def insert_message(self, message: Message | Mapping[str, object]) -> None:
        if not isinstance(message, Message):
            try:
                message = Message.from_payload(message)
            except UnsupportedMessageType as error:
                logger.warning("Rejected message with unsupported type %r.", error.message_type)
                raise
        if message.type not in (MessageType.AMPLIFY, MessageType.COMMENT):
            logger.warning("Rejected message with unsupported type %r.", message.type)
            raise UnsupportedMessageType(message.type)

        try:
            item_id = ItemId.for_index(self.namespace, message.index).encode()
        except InvalidItemId as error:
            raise InvalidMessage(str(error)) from error
        href = message.href
        if message.type == MessageType.AMPLIFY:
            href = normalize_href(href)

        with self.store.session() as session:
            try:
                _ensure_unused_id(session, item_id)
                if message.type == MessageType.AMPLIFY:
                    action = _insert_amplify(session, item_id=item_id, href=href, message=message)
                else:
                    action = _insert_comment(session, item_id=item_id, message=message)
                session.commit()
            except IntegrityError as error:
                session.rollback()
                violation = _constraint_violation(error, item_id=item_id)
                logger.warning("Rejected %s: %s", item_id, violation)
                raise violation from error
            except DuplicateRecord as error:
                logger.warning("Rejected %s: %s", item_id, error)
                raise

        logger.debug(
            "Stored %s as %s (href=%s identity=%s).",
            item_id,
            action.value,
            href,
            message.identity,
        )


def _ensure_unused_id(session: Session, item_id: str) -> None:
    for model in (Submission, Upvote, Comment):
        if session.get(model, item_id) is not None:
            raise DuplicateRecord(f"Item {item_id} already exists in {model.__tablename__}")


def _insert_amplify(
    session: Session,
    *,
    item_id: str,
    href: str,
    message: Message,
) -> IngestAction:
    statement = (
        sqlite_insert(Submission.__table__)  # type: ignore[attr-defined]
        .values(
            id=item_id,
            href=href,
            title=message.title,
            timestamp=message.timestamp,
            signer=message.signer,
            identity=message.identity,
        )
        .on_conflict_do_nothing(index_elements=["href"])
    )
    result = session.exec(statement)
    if result.rowcount == 1:
        return IngestAction.SUBMISSION

    session.add(
        Upvote(
            id=item_id,
            href=href,
            timestamp=message.timestamp,
            title=message.title,
            signer=message.signer,
            identity=message.identity,
        ),
    )
    session.flush()
    return IngestAction.UPVOTE


def _insert_comment(session: Session, *, item_id: str, message: Message) -> IngestAction:
    session.add(
        Comment(
            id=item_id,
            submission_id=message.href,
            timestamp=message.timestamp,
            title=message.title,
            signer=message.signer,
            identity=message.identity,
        ),
    )
    session.flush()
    return IngestAction.COMMENT


def _constraint_violation(error: IntegrityError, *, item_id: str) -> ConstraintViolation:
    detail = str(error.orig)
    if "FOREIGN KEY" in detail.upper():
        return MissingReference(f"Item {item_id} references a missing submission ({detail})")
    return DuplicateRecord(f"Item {item_id} violates a uniqueness constraint ({detail})")
