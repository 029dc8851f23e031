"""In-Memory Gateway - dict-backed PersistenceGateway for tests, scripts and demos.

Invariants:
    - Snapshots are deep-copied on the way in and out: no caller shares storage
    - load() on a closed scope raises ScopeExpiredError
    - flush() writes every entity's to_state() or none of them

Design Decisions:
    - Stands in for a real storage adapter; it implements the Protocol without
      inheriting from it
"""

import copy
import logging
from typing import Sequence

from domainguard.core.domain_types import Identifier, RawState
from domainguard.core.errors import ScopeExpiredError
from domainguard.core.repository_protocols import FlushResult, ScopeLike, StatefulEntity

logger = logging.getLogger(__name__)


class InMemoryGateway:
    """Stores RawState snapshots keyed by Identifier."""

    def __init__(self, snapshots: dict[Identifier, RawState] | None = None):
        self._snapshots: dict[Identifier, RawState] = {
            identifier: copy.deepcopy(state)
            for identifier, state in (snapshots or {}).items()
        }
        self.load_calls = 0
        self.flush_calls = 0

    async def load(self, identifier: Identifier, scope: ScopeLike) -> RawState | None:
        if not scope.is_open:
            raise ScopeExpiredError(str(scope.scope_id))
        self.load_calls += 1
        state = self._snapshots.get(identifier)
        return copy.deepcopy(state) if state is not None else None

    async def flush(
        self, scope: ScopeLike, entities: Sequence[StatefulEntity],
    ) -> FlushResult:
        if not scope.is_open:
            raise ScopeExpiredError(str(scope.scope_id))
        self.flush_calls += 1
        staged = {entity.identifier: entity.to_state() for entity in entities}
        for identifier, state in staged.items():
            self._snapshots[identifier] = copy.deepcopy(state)
        logger.debug(
            f"Stored {len(staged)} snapshots", extra={"scope_id": str(scope.scope_id)},
        )
        return FlushResult(scope_id=scope.scope_id, written=tuple(staged))

    def contains(self, identifier: Identifier) -> bool:
        return identifier in self._snapshots

    def snapshot(self, identifier: Identifier) -> RawState | None:
        state = self._snapshots.get(identifier)
        return copy.deepcopy(state) if state is not None else None
