"""Message Input Schemas - draft form and stored snapshot for Message."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from pydantic import ValidationInfo, field_validator

from domainguard.config import Settings
from domainguard.core.named_constructor import PolicyModel, ValidationPolicy


@dataclass(frozen=True)
class MessagePolicy(ValidationPolicy):
    body_max_length: int = 4000

    @classmethod
    def from_settings(cls, settings: Settings) -> "MessagePolicy":
        return cls(body_max_length=settings.message_max_length)


def normalize_body(value: str, policy: MessagePolicy) -> str:
    if not value.strip():
        raise ValueError("body cannot be empty or whitespace")
    if len(value) > policy.body_max_length:
        raise ValueError(f"body must be at most {policy.body_max_length} characters")
    return value


class MessageDraft(PolicyModel):
    body: str

    @field_validator("body")
    @classmethod
    def validate_body(cls, v: str, info: ValidationInfo) -> str:
        return normalize_body(v, cls.active_policy(info, MessagePolicy))


class StoredMessage(PolicyModel):
    identifier: UUID
    author_id: UUID
    body: str
    sent_at: datetime
    edited_at: datetime | None = None

    @field_validator("body")
    @classmethod
    def validate_body(cls, v: str, info: ValidationInfo) -> str:
        return normalize_body(v, cls.active_policy(info, MessagePolicy))
