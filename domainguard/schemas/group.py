"""Group Input Schemas - creation form and stored snapshot for Group.

Invariants:
    - name stripped, non-blank, at most name_max_length characters
    - description at most 1000 characters
    - stored snapshots list every member exactly as flushed
"""

from dataclasses import dataclass
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from domainguard.config import Settings
from domainguard.core.domain_types import Role
from domainguard.core.named_constructor import PolicyModel, ValidationPolicy


@dataclass(frozen=True)
class GroupPolicy(ValidationPolicy):
    name_max_length: int = 80
    max_members: int = 500

    @classmethod
    def from_settings(cls, settings: Settings) -> "GroupPolicy":
        return cls(
            name_max_length=settings.group_name_max_length,
            max_members=settings.group_max_members,
        )


def normalize_group_name(value: str, policy: GroupPolicy) -> str:
    value = value.strip()
    if not value:
        raise ValueError("name cannot be empty or whitespace")
    if len(value) > policy.name_max_length:
        raise ValueError(f"name must be at most {policy.name_max_length} characters")
    return value


class GroupCreationForm(PolicyModel):
    name: str
    description: str = Field("", max_length=1000)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str, info: ValidationInfo) -> str:
        return normalize_group_name(v, cls.active_policy(info, GroupPolicy))


class GroupRename(PolicyModel):
    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str, info: ValidationInfo) -> str:
        return normalize_group_name(v, cls.active_policy(info, GroupPolicy))


class StoredMembership(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    user_id: UUID
    role: Role


class StoredGroup(PolicyModel):
    identifier: UUID
    name: str
    description: str = ""
    max_members: int = Field(ge=1)
    members: list[StoredMembership]

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str, info: ValidationInfo) -> str:
        return normalize_group_name(v, cls.active_policy(info, GroupPolicy))
