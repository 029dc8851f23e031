"""User - account entity, valid from registration to disposal.

Invariants:
    - username is non-blank and at most USERNAME_HARD_LIMIT characters
    - password is only ever held as a bcrypt hash, and only queried via authenticates()
    - a ban always carries a non-blank reason and the instant it was imposed
    - a banned user cannot be banned again; an unbanned user cannot be unbanned

Design Decisions:
    - Three named constructors, one per creation scenario: registration (untrusted
      form), import (legacy row, keeps its identifier), from_state (gateway snapshot)
    - No password getter: Law of Demeter pushes the comparison into the entity
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
from domainguard.core.passwords import hash_password, is_password_hash, verify_password
from domainguard.schemas.user import (
    ImportPolicy, ImportRecord, PasswordChange, RegistrationForm,
    RegistrationPolicy, UsernameChange, UsernamePolicy,
)

USERNAME_HARD_LIMIT = 64


@dataclass(frozen=True)
class Ban:
    reason: str
    imposed_at: datetime


@dataclass(frozen=True)
class UserState:
    username: str
    password_hash: str
    ban: Ban | None = None


NOT_ALREADY_BANNED = Invariant(
    "not_already_banned", "a ban can only be applied to an unbanned user",
    lambda s: s.ban is None,
)
CURRENTLY_BANNED = Invariant(
    "currently_banned", "only an active ban can be lifted",
    lambda s: s.ban is not None,
)

# Snapshots were valid when flushed; only structural rules apply on the way back.
_STORED_STATE_POLICY = ImportPolicy(username_max_length=USERNAME_HARD_LIMIT)


class User(ValidatedEntity[UserState]):
    """Registered account."""

    __slots__ = ()

    kind = EntityKind.USER
    invariants = (
        Invariant(
            "username_present", "username is a non-blank string",
            lambda s: isinstance(s.username, str) and bool(s.username.strip()),
        ),
        Invariant(
            "username_within_bounds",
            f"username has at most {USERNAME_HARD_LIMIT} characters",
            lambda s: len(s.username) <= USERNAME_HARD_LIMIT,
        ),
        Invariant(
            "password_hash_present", "password is stored as a bcrypt hash",
            lambda s: is_password_hash(s.password_hash),
        ),
        Invariant(
            "ban_has_reason", "a ban carries a non-blank reason and a timestamp",
            lambda s: s.ban is None or (
                bool(s.ban.reason.strip()) and s.ban.imposed_at.tzinfo is not None
            ),
        ),
    )

    # --- Named constructors ------------------------------------------------

    @classmethod
    def from_registration_form(
        cls,
        raw: Any,
        policy: RegistrationPolicy | None = None,
        new_id: IdGenerator = random_identifier,
    ) -> "User":
        """Self-service sign-up. Mints a new identity."""
        policy = policy or RegistrationPolicy()
        form = validate_input(RegistrationForm, raw, policy)
        return cls._construct(
            new_id(),
            UserState(
                username=form.username,
                password_hash=hash_password(form.password, policy.bcrypt_rounds),
            ),
        )

    @classmethod
    def from_import_record(
        cls, raw: Any, policy: ImportPolicy | None = None,
    ) -> "User":
        """Migration from another system. Keeps the record's identity."""
        record = validate_input(ImportRecord, raw, policy or ImportPolicy())
        ban = Ban(record.ban.reason, record.ban.imposed_at) if record.ban else None
        return cls._construct(
            Identifier(record.identifier),
            UserState(
                username=record.username,
                password_hash=record.password_hash,
                ban=ban,
            ),
        )

    @classmethod
    def from_state(cls, state: RawState) -> "User":
        """Rehydrate a gateway snapshot produced by to_state()."""
        if state.get("kind") != cls.kind.value:
            raise ValidationError({"kind": [f"expected '{cls.kind.value}'"]})
        return cls.from_import_record(state, _STORED_STATE_POLICY)

    # --- Queries -----------------------------------------------------------

    def to_nickname(self) -> str:
        return self._state.username

    def authenticates(self, password: str) -> bool:
        return verify_password(password, self._state.password_hash)

    def is_banned(self) -> bool:
        return self._state.ban is not None

    def ban_reason(self) -> str | None:
        return self._state.ban.reason if self._state.ban else None

    # --- Behaviors ---------------------------------------------------------

    def rename(self, new_username: str, policy: UsernamePolicy | None = None) -> None:
        change = validate_input(
            UsernameChange, {"username": new_username}, policy or RegistrationPolicy(),
        )
        self._transition("rename", username=change.username)

    def change_password(
        self, current: str, new: str, policy: RegistrationPolicy | None = None,
    ) -> None:
        policy = policy or RegistrationPolicy()
        if not self.authenticates(current):
            self._reject("change_password", "current_password_matches")
        change = validate_input(PasswordChange, {"password": new}, policy)
        self._transition(
            "change_password",
            password_hash=hash_password(change.password, policy.bcrypt_rounds),
        )

    def apply_ban(self, reason: str, clock: Clock) -> None:
        self._transition(
            "apply_ban",
            guards=(NOT_ALREADY_BANNED,),
            ban=Ban(reason=reason, imposed_at=clock.now()),
        )

    def lift_ban(self) -> None:
        self._transition("lift_ban", guards=(CURRENTLY_BANNED,), ban=None)

    # --- Persistence snapshot ----------------------------------------------

    def to_state(self) -> RawState:
        ban = self._state.ban
        return {
            "kind": self.kind.value,
            "identifier": str(self.identifier),
            "username": self._state.username,
            "password_hash": self._state.password_hash,
            "ban": (
                {"reason": ban.reason, "imposed_at": ban.imposed_at.isoformat()}
                if ban else None
            ),
        }
