"""Boundary Protocols - contracts between core and the persistence collaborator.

Invariants:
    - Core NEVER imports from services/ or infrastructure/; arrows point inward only
    - Entities and collections never reference a gateway
    - Gateway IO happens only at resolve (load) and flush points

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: gateway methods are async because implementations do IO,
      but the entity logic that produces flushed state is never async itself
"""

from dataclasses import dataclass, field
from typing import Callable, Protocol, Sequence

from domainguard.core.domain_types import Identifier, RawState


class ScopeLike(Protocol):
    """Structural contract for the unit-of-work handle passed to gateways."""
    scope_id: Identifier

    @property
    def is_open(self) -> bool: ...


class StatefulEntity(Protocol):
    """What a gateway may ask of an entity at flush time."""

    @property
    def identifier(self) -> Identifier: ...

    def to_state(self) -> RawState: ...


@dataclass(frozen=True)
class FlushResult:
    """Outcome reported by PersistenceGateway.flush."""
    scope_id: Identifier
    written: tuple[Identifier, ...] = field(default_factory=tuple)

    @property
    def written_count(self) -> int:
        return len(self.written)


class PersistenceGateway(Protocol):
    """Contract for storage access - implemented outside the core."""

    async def load(
        self, identifier: Identifier, scope: ScopeLike,
    ) -> RawState | None: ...

    async def flush(
        self, scope: ScopeLike, entities: Sequence[StatefulEntity],
    ) -> FlushResult: ...


# Rebuilds an entity from a gateway snapshot (e.g. User.from_state).
Hydrator = Callable[[RawState], StatefulEntity]
