"""Message - entity whose author lives in another boundary.

Invariants:
    - body is non-blank and at most BODY_HARD_LIMIT characters
    - author referenced by Identifier only; a Message never holds a User
    - sent_at is fixed at composition; edited_at, once set, is not before sent_at
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from domainguard.core.clock import Clock
from domainguard.core.domain_types import (
    EntityKind, IdGenerator, Identifier, RawState, random_identifier,
)
from domainguard.core.entity import ValidatedEntity
from domainguard.core.errors import ValidationError
from domainguard.core.invariants import Invariant
from domainguard.core.named_constructor import validate_input
from domainguard.schemas.message import MessageDraft, MessagePolicy, StoredMessage

BODY_HARD_LIMIT = 20_000


@dataclass(frozen=True)
class MessageState:
    author_id: Identifier
    body: str
    sent_at: datetime
    edited_at: datetime | None = None


_STORED_STATE_POLICY = MessagePolicy(body_max_length=BODY_HARD_LIMIT)


class Message(ValidatedEntity[MessageState]):
    __slots__ = ()

    kind = EntityKind.MESSAGE
    invariants = (
        Invariant(
            "body_present", "body is a non-blank string",
            lambda s: bool(s.body.strip()),
        ),
        Invariant(
            "body_within_limit", f"body has at most {BODY_HARD_LIMIT} characters",
            lambda s: len(s.body) <= BODY_HARD_LIMIT,
        ),
        Invariant(
            "author_present", "author is an Identifier",
            lambda s: isinstance(s.author_id, Identifier),
        ),
        Invariant(
            "edited_after_sent", "an edit never predates sending",
            lambda s: s.edited_at is None or s.edited_at >= s.sent_at,
        ),
    )

    @classmethod
    def compose(
        cls,
        raw: Any,
        author_id: Identifier,
        clock: Clock,
        policy: MessagePolicy | None = None,
        new_id: IdGenerator = random_identifier,
    ) -> "Message":
        draft = validate_input(MessageDraft, raw, policy or MessagePolicy())
        return cls._construct(
            new_id(),
            MessageState(author_id=author_id, body=draft.body, sent_at=clock.now()),
        )

    @classmethod
    def from_state(cls, state: RawState) -> "Message":
        if state.get("kind") != cls.kind.value:
            raise ValidationError({"kind": [f"expected '{cls.kind.value}'"]})
        stored = validate_input(StoredMessage, state, _STORED_STATE_POLICY)
        return cls._construct(
            Identifier(stored.identifier),
            MessageState(
                author_id=Identifier(stored.author_id),
                body=stored.body,
                sent_at=stored.sent_at,
                edited_at=stored.edited_at,
            ),
        )

    def body(self) -> str:
        return self._state.body

    def is_authored_by(self, user_id: Identifier) -> bool:
        return self._state.author_id == user_id

    def was_edited(self) -> bool:
        return self._state.edited_at is not None

    def edit(self, new_body: str, clock: Clock, policy: MessagePolicy | None = None) -> None:
        draft = validate_input(MessageDraft, {"body": new_body}, policy or MessagePolicy())
        self._transition("edit", body=draft.body, edited_at=clock.now())

    def to_state(self) -> RawState:
        edited_at = self._state.edited_at
        return {
            "kind": self.kind.value,
            "identifier": str(self.identifier),
            "author_id": str(self._state.author_id),
            "body": self._state.body,
            "sent_at": self._state.sent_at.isoformat(),
            "edited_at": edited_at.isoformat() if edited_at else None,
        }
