"""Scope - unit-of-work handle bounding where resolved references are valid.

Invariants:
    - Each scope owns a private identity map: one instance per Identifier per scope
    - close() clears the identity map and expires the scope permanently
    - Any lookup, registration or flush on a closed scope raises ScopeExpiredError
    - A scope is used by one task at a time; it holds no lock

Design Decisions:
    - close() is the only end-of-life operation: clearing without expiring would
      let stale references be mistaken for fresh ones
    - Entities keep working after close (they own their validity); only the
      scope's ability to resolve and flush ends
"""

from domainguard.core.domain_types import Identifier
from domainguard.core.errors import ForeignScopeError, ScopeExpiredError
from domainguard.core.repository_protocols import StatefulEntity


class Scope:
    """Consistency boundary for one unit of work."""

    def __init__(self, scope_id: Identifier):
        self.scope_id = scope_id
        self._identity_map: dict[Identifier, StatefulEntity] = {}
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    def ensure_open(self) -> None:
        if not self._open:
            raise ScopeExpiredError(str(self.scope_id))

    def lookup(self, identifier: Identifier) -> StatefulEntity | None:
        self.ensure_open()
        return self._identity_map.get(identifier)

    def register(self, entity: StatefulEntity) -> None:
        """Track entity for flushing. Same instance twice is a no-op."""
        self.ensure_open()
        existing = self._identity_map.get(entity.identifier)
        if existing is not None and existing is not entity:
            raise ForeignScopeError(str(self.scope_id), str(entity.identifier))
        self._identity_map[entity.identifier] = entity

    def tracks(self, entity: StatefulEntity) -> bool:
        return self._identity_map.get(entity.identifier) is entity

    def tracked_count(self) -> int:
        return len(self._identity_map)

    def tracked(self) -> tuple[StatefulEntity, ...]:
        self.ensure_open()
        return tuple(self._identity_map.values())

    def close(self) -> None:
        self._identity_map.clear()
        self._open = False

    def __repr__(self) -> str:
        state = "open" if self._open else "closed"
        return f"<Scope {self.scope_id} {state} tracked={len(self._identity_map)}>"
