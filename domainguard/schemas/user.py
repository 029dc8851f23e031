"""User Input Schemas - validation policies for every way a User comes to exist.

Invariants:
    - RegistrationForm: username stripped, bounded, [A-Za-z0-9_.-] only, not reserved;
      password at least password_min_length characters and not blank
    - ImportRecord: keeps the legacy identifier, requires an existing bcrypt hash,
      ban reason and ban time are present together or not at all
    - UsernameChange reuses the registration username rules

Design Decisions:
    - One policy dataclass per creation scenario; limits flow from Settings via
      from_settings(), never read inside validators
    - Shared normalize_username keeps username rules in one place for
      registration, import and rename
"""

import re
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from domainguard.config import Settings
from domainguard.core.named_constructor import PolicyModel, ValidationPolicy
from domainguard.core.passwords import MAX_PASSWORD_BYTES, fits_bcrypt, is_password_hash

USERNAME_CHARACTERS = re.compile(r"^[A-Za-z0-9_.-]+$")


# ─── Policies ────────────────────────────────────────────────────

@dataclass(frozen=True)
class UsernamePolicy(ValidationPolicy):
    username_min_length: int = 1
    username_max_length: int = 32
    reserved_usernames: frozenset[str] = frozenset()


@dataclass(frozen=True)
class RegistrationPolicy(UsernamePolicy):
    reserved_usernames: frozenset[str] = frozenset({"admin", "root", "system"})
    password_min_length: int = 1
    bcrypt_rounds: int = 12

    @classmethod
    def from_settings(cls, settings: Settings) -> "RegistrationPolicy":
        return cls(
            username_min_length=settings.username_min_length,
            username_max_length=settings.username_max_length,
            reserved_usernames=frozenset(
                name.lower() for name in settings.reserved_usernames
            ),
            password_min_length=settings.password_min_length,
            bcrypt_rounds=settings.bcrypt_rounds,
        )


@dataclass(frozen=True)
class ImportPolicy(UsernamePolicy):
    """Legacy records: reserved names tolerated, longer usernames allowed."""
    username_max_length: int = 64

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImportPolicy":
        return cls(
            username_min_length=settings.username_min_length,
            username_max_length=max(64, settings.username_max_length),
        )


def normalize_username(value: str, policy: UsernamePolicy) -> str:
    """Strip and check a username against policy. Raises ValueError."""
    value = value.strip()
    if not value:
        raise ValueError("username cannot be empty or whitespace")
    if len(value) < policy.username_min_length:
        raise ValueError(
            f"username must be at least {policy.username_min_length} characters",
        )
    if len(value) > policy.username_max_length:
        raise ValueError(
            f"username must be at most {policy.username_max_length} characters",
        )
    if not USERNAME_CHARACTERS.match(value):
        raise ValueError("username may contain only letters, digits, '_', '.', '-'")
    if value.lower() in policy.reserved_usernames:
        raise ValueError(f"username '{value}' is reserved")
    return value


def check_password(value: str, policy: RegistrationPolicy) -> str:
    if not value.strip():
        raise ValueError("password cannot be blank")
    if len(value) < policy.password_min_length:
        raise ValueError(
            f"password must be at least {policy.password_min_length} characters",
        )
    if not fits_bcrypt(value):
        raise ValueError(f"password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
    return value


# ─── Input Models ────────────────────────────────────────────────

class RegistrationForm(PolicyModel):
    """Self-service sign-up form."""
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str, info: ValidationInfo) -> str:
        return normalize_username(v, cls.active_policy(info, RegistrationPolicy))

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str, info: ValidationInfo) -> str:
        return check_password(v, cls.active_policy(info, RegistrationPolicy))


class UsernameChange(PolicyModel):
    username: str

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str, info: ValidationInfo) -> str:
        return normalize_username(v, cls.active_policy(info, UsernamePolicy))


class PasswordChange(PolicyModel):
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str, info: ValidationInfo) -> str:
        return check_password(v, cls.active_policy(info, RegistrationPolicy))


class BanRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    reason: str = Field(min_length=1, max_length=500)
    imposed_at: datetime

    @field_validator("imposed_at")
    @classmethod
    def require_timezone(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            raise ValueError("imposed_at must be timezone-aware")
        return v


class ImportRecord(PolicyModel):
    """Row from a legacy system or a gateway snapshot."""
    identifier: UUID
    username: str
    password_hash: str
    ban: BanRecord | None = None

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str, info: ValidationInfo) -> str:
        return normalize_username(v, cls.active_policy(info, ImportPolicy))

    @field_validator("password_hash")
    @classmethod
    def validate_hash(cls, v: str) -> str:
        if not is_password_hash(v):
            raise ValueError("password_hash is not a bcrypt hash")
        return v
