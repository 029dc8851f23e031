"""Domain Types - identity values and enums shared by every boundary.

Invariants:
    - Identifier wraps exactly one 128-bit UUID and is immutable
    - Identifiers compare by value and have no ordering
    - Identity is minted by an injected IdGenerator, never inside entity code
    - All valid roles and capabilities encoded as Enums, no raw string matching

Design Decisions:
    - Frozen dataclass over NewType: Identifier must be opaque at runtime so a
      bare UUID or str cannot be passed where an identity is expected
    - str Enums: states serialize to JSON without custom encoders
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable
from uuid import UUID, uuid4

from domainguard.core.errors import ValidationError


# ─── Identity ────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True, order=False)
class Identifier:
    """Opaque, globally unique identity value."""

    value: UUID

    def __post_init__(self) -> None:
        if not isinstance(self.value, UUID):
            raise TypeError(
                f"Identifier wraps uuid.UUID, got {type(self.value).__name__}",
            )

    def __str__(self) -> str:
        return str(self.value)

    def __lt__(self, other: object) -> bool:
        raise TypeError("Identifiers have no ordering")

    __le__ = __gt__ = __ge__ = __lt__

    @classmethod
    def parse(cls, text: str) -> "Identifier":
        """Parse the canonical string form. Raises ValidationError on garbage."""
        try:
            return cls(UUID(str(text)))
        except (ValueError, AttributeError, TypeError):
            raise ValidationError(
                {"identifier": [f"'{text}' is not a valid identifier"]},
            )

    @classmethod
    def from_int(cls, number: int) -> "Identifier":
        """Deterministic identifier for fixtures and replays."""
        return cls(UUID(int=number))


IdGenerator = Callable[[], Identifier]


def random_identifier() -> Identifier:
    """Default IdGenerator: delegates to uuid4."""
    return Identifier(uuid4())


class SequentialIdGenerator:
    """Deterministic IdGenerator yielding from_int(start), from_int(start + 1), ..."""

    def __init__(self, start: int = 1):
        self._next = start

    def __call__(self) -> Identifier:
        identifier = Identifier.from_int(self._next)
        self._next += 1
        return identifier


# ─── Raw State ───────────────────────────────────────────────────

# JSON-safe snapshot handed to and received from a PersistenceGateway.
RawState = dict[str, Any]


# ─── Enums ───────────────────────────────────────────────────────

class EntityKind(str, Enum):
    """Discriminator stored in RawState, used to pick a hydrator."""
    USER = "user"
    GROUP = "group"
    MESSAGE = "message"


class Role(str, Enum):
    """Membership role inside a group."""
    MEMBER = "member"
    MODERATOR = "moderator"
    ADMINISTRATOR = "administrator"


class Capability(str, Enum):
    """What a group member may ask to do."""
    READ = "read"
    POST = "post"
    MODERATE = "moderate"
    MANAGE_MEMBERS = "manage_members"


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.MEMBER: frozenset({Capability.READ, Capability.POST}),
    Role.MODERATOR: frozenset(
        {Capability.READ, Capability.POST, Capability.MODERATE},
    ),
    Role.ADMINISTRATOR: frozenset(Capability),
}
