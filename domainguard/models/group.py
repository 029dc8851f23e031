"""Group - entity owning an encapsulated membership collection.

Invariants:
    - a group always has at least one administrator
    - member count never exceeds the max_members fixed at creation
    - each user appears at most once
    - members are referenced by Identifier only: users live in another boundary
    - Memberships exposes derived answers (allows, is_member, counts), never members

Design Decisions:
    - Membership filtering lives in Memberships, next to the entity that owns it
    - Removing or demoting the last administrator is rejected by the
      has_administrator invariant on the candidate state, not by a special case
"""

from dataclasses import dataclass
from typing import Any

from domainguard.core.collection import EncapsulatedCollection
from domainguard.core.domain_types import (
    ROLE_CAPABILITIES, Capability, EntityKind, IdGenerator, Identifier,
    RawState, Role, random_identifier,
)
from domainguard.core.entity import ValidatedEntity
from domainguard.core.errors import ValidationError
from domainguard.core.invariants import Invariant
from domainguard.core.named_constructor import validate_input
from domainguard.schemas.group import (
    GroupCreationForm, GroupPolicy, GroupRename, StoredGroup,
)

GROUP_NAME_HARD_LIMIT = 200


@dataclass(frozen=True)
class Membership:
    user_id: Identifier
    role: Role


@dataclass(frozen=True)
class CapabilityRequest:
    """Question asked of a group: may actor_id do capability?"""
    actor_id: Identifier
    capability: Capability


class Memberships(EncapsulatedCollection[Membership]):
    """Who belongs to a group, answerable only through queries."""

    __slots__ = ()

    def allows(self, request: CapabilityRequest) -> bool:
        membership = self._find(lambda m: m.user_id == request.actor_id)
        if membership is None:
            return False
        return request.capability in ROLE_CAPABILITIES[membership.role]

    def is_member(self, user_id: Identifier) -> bool:
        return self._any(lambda m: m.user_id == user_id)

    def holds_role(self, user_id: Identifier, role: Role) -> bool:
        return self._any(lambda m: m.user_id == user_id and m.role == role)

    def administrator_count(self) -> int:
        return self._count_where(lambda m: m.role == Role.ADMINISTRATOR)

    def has_duplicates(self) -> bool:
        ids = self._map(lambda m: m.user_id)
        return len(ids) != len(set(ids))

    def references_identifiers_only(self) -> bool:
        return self._count_where(lambda m: not isinstance(m.user_id, Identifier)) == 0


@dataclass(frozen=True)
class GroupState:
    name: str
    description: str
    max_members: int
    memberships: Memberships


def _is_member(user_id: Identifier) -> Invariant:
    return Invariant(
        "is_member", "the user must already belong to the group",
        lambda s: s.memberships.is_member(user_id),
    )


def _not_member(user_id: Identifier) -> Invariant:
    return Invariant(
        "not_already_member", "the user must not already belong to the group",
        lambda s: not s.memberships.is_member(user_id),
    )


_STORED_STATE_POLICY = GroupPolicy(name_max_length=GROUP_NAME_HARD_LIMIT)


class Group(ValidatedEntity[GroupState]):
    """Set of users with roles and capabilities."""

    __slots__ = ()

    kind = EntityKind.GROUP
    invariants = (
        Invariant(
            "name_present", "name is a non-blank string",
            lambda s: bool(s.name.strip()) and len(s.name) <= GROUP_NAME_HARD_LIMIT,
        ),
        Invariant(
            "members_are_identifiers", "every member is referenced by an Identifier",
            lambda s: s.memberships.references_identifiers_only(),
        ),
        Invariant(
            "has_administrator", "at least one member is an administrator",
            lambda s: s.memberships.administrator_count() >= 1,
        ),
        Invariant(
            "within_member_limit", "member count does not exceed max_members",
            lambda s: s.memberships.count() <= s.max_members,
        ),
        Invariant(
            "unique_members", "no user holds two memberships",
            lambda s: not s.memberships.has_duplicates(),
        ),
    )

    # --- Named constructors ------------------------------------------------

    @classmethod
    def from_creation_form(
        cls,
        raw: Any,
        founder_id: Identifier,
        policy: GroupPolicy | None = None,
        new_id: IdGenerator = random_identifier,
    ) -> "Group":
        """Create a group whose founder is its first administrator."""
        policy = policy or GroupPolicy()
        form = validate_input(GroupCreationForm, raw, policy)
        return cls._construct(
            new_id(),
            GroupState(
                name=form.name,
                description=form.description,
                max_members=policy.max_members,
                memberships=Memberships(
                    [Membership(founder_id, Role.ADMINISTRATOR)],
                ),
            ),
        )

    @classmethod
    def from_state(cls, state: RawState) -> "Group":
        if state.get("kind") != cls.kind.value:
            raise ValidationError({"kind": [f"expected '{cls.kind.value}'"]})
        stored = validate_input(StoredGroup, state, _STORED_STATE_POLICY)
        return cls._construct(
            Identifier(stored.identifier),
            GroupState(
                name=stored.name,
                description=stored.description,
                max_members=stored.max_members,
                memberships=Memberships(
                    Membership(Identifier(m.user_id), m.role)
                    for m in stored.members
                ),
            ),
        )

    # --- Queries -----------------------------------------------------------

    def name(self) -> str:
        return self._state.name

    def allows(self, request: CapabilityRequest) -> bool:
        return self._state.memberships.allows(request)

    def is_member(self, user_id: Identifier) -> bool:
        return self._state.memberships.is_member(user_id)

    def is_administrator(self, user_id: Identifier) -> bool:
        return self._state.memberships.holds_role(user_id, Role.ADMINISTRATOR)

    def member_count(self) -> int:
        return self._state.memberships.count()

    def administrator_count(self) -> int:
        return self._state.memberships.administrator_count()

    # --- Behaviors ---------------------------------------------------------

    def add_member(self, user_id: Identifier, role: Role = Role.MEMBER) -> None:
        self._transition(
            "add_member",
            guards=(_not_member(user_id),),
            memberships=self._state.memberships._with(Membership(user_id, role)),
        )

    def remove_member(self, user_id: Identifier) -> None:
        self._transition(
            "remove_member",
            guards=(_is_member(user_id),),
            memberships=self._state.memberships._without(
                lambda m: m.user_id == user_id,
            ),
        )

    def change_role(self, user_id: Identifier, role: Role) -> None:
        self._transition(
            "change_role",
            guards=(_is_member(user_id),),
            memberships=self._state.memberships._replace(
                lambda m: m.user_id == user_id,
                lambda m: Membership(m.user_id, role),
            ),
        )

    def promote(self, user_id: Identifier) -> None:
        self.change_role(user_id, Role.ADMINISTRATOR)

    def demote(self, user_id: Identifier) -> None:
        self.change_role(user_id, Role.MEMBER)

    def rename(self, new_name: str, policy: GroupPolicy | None = None) -> None:
        change = validate_input(GroupRename, {"name": new_name}, policy or GroupPolicy())
        self._transition("rename", name=change.name)

    # --- Persistence snapshot ----------------------------------------------

    def to_state(self) -> RawState:
        return {
            "kind": self.kind.value,
            "identifier": str(self.identifier),
            "name": self._state.name,
            "description": self._state.description,
            "max_members": self._state.max_members,
            "members": list(self._state.memberships._map(
                lambda m: {"user_id": str(m.user_id), "role": m.role.value},
            )),
        }
