"""Boundary Reference Resolver - turns Identifiers into entities inside one scope.

Invariants:
    - resolve() on a closed scope raises ScopeExpiredError before any IO
    - Within a scope the same Identifier always resolves to the same instance
    - No entity cache exists outside scopes: a fresh scope always asks the gateway
    - An entity tracked by one open scope cannot be tracked by another
      (ForeignScopeError)
    - Gateway failures surface as GatewayError; domain errors pass through untouched

Design Decisions:
    - Hydrators keyed by EntityKind: the gateway returns raw state, the owning
      entity's from_state named constructor decides whether it is valid
    - open_scope() is an async context manager that closes on exit, including
      on exceptions, and never flushes implicitly
    - Only open scopes are remembered; closed ones are pruned on the next
      begin_scope(), track() or active_scope_count()
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Mapping, TypeVar

from domainguard.core.domain_types import (
    EntityKind, IdGenerator, Identifier, RawState, random_identifier,
)
from domainguard.core.errors import (
    DomainGuardError, ErrorContext, ForeignScopeError, GatewayError,
    NotFoundError, ValidationError,
)
from domainguard.core.repository_protocols import (
    FlushResult, Hydrator, PersistenceGateway, StatefulEntity,
)
from domainguard.services.scope import Scope

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BoundaryReferenceResolver:
    """Resolves cross-boundary Identifiers through a PersistenceGateway."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        hydrators: Mapping[EntityKind, Hydrator],
        new_id: IdGenerator = random_identifier,
    ):
        self._gateway = gateway
        self._hydrators = {EntityKind(kind): fn for kind, fn in hydrators.items()}
        self._new_id = new_id
        self._scopes: dict[Identifier, Scope] = {}

    # --- Scope lifecycle ---------------------------------------------------

    def begin_scope(self) -> Scope:
        """Open a scope the caller must close()."""
        self._prune_closed()
        scope = Scope(self._new_id())
        self._scopes[scope.scope_id] = scope
        logger.debug(
            f"Scope opened: {scope.scope_id}", extra={"scope_id": str(scope.scope_id)},
        )
        return scope

    @asynccontextmanager
    async def open_scope(self) -> AsyncGenerator[Scope, None]:
        """Provide a scope that is closed on exit, flushed only on request."""
        scope = self.begin_scope()
        try:
            yield scope
        finally:
            self.close_scope(scope)

    def active_scope_count(self) -> int:
        """Scopes begun here and still open."""
        self._prune_closed()
        return len(self._scopes)

    def close_scope(self, scope: Scope) -> None:
        scope.close()
        self._scopes.pop(scope.scope_id, None)
        logger.debug(
            f"Scope closed: {scope.scope_id}", extra={"scope_id": str(scope.scope_id)},
        )

    # --- Resolution --------------------------------------------------------

    async def resolve(self, identifier: Identifier, scope: Scope) -> StatefulEntity:
        """Entity for identifier within scope, or NotFoundError / ScopeExpiredError."""
        known = scope.lookup(identifier)
        if known is not None:
            return known

        raw = await self._call_gateway("load", self._gateway.load(identifier, scope))
        if raw is None:
            missing = NotFoundError(str(identifier), str(scope.scope_id))
            logger.info(f"Entity not found: {identifier}", extra=missing.log_extra())
            raise missing

        entity = self._hydrate(raw)
        if entity.identifier != identifier:
            raise GatewayError(
                f"state for {entity.identifier} returned when loading {identifier}",
                "load",
                ErrorContext(entity_id=str(identifier), scope_id=str(scope.scope_id)),
            )
        scope.register(entity)
        return entity

    def track(self, entity: StatefulEntity, scope: Scope) -> None:
        """Register a newly constructed entity so the next flush writes it."""
        scope.ensure_open()
        self._prune_closed()
        for other in self._scopes.values():
            if other is not scope and other.tracks(entity):
                raise ForeignScopeError(str(scope.scope_id), str(entity.identifier))
        scope.register(entity)

    async def flush(self, scope: Scope) -> FlushResult:
        """Hand every tracked entity to the gateway. The only write point."""
        entities = scope.tracked()
        result = await self._call_gateway("flush", self._gateway.flush(scope, entities))
        logger.info(
            f"Flushed {result.written_count} entities",
            extra={"scope_id": str(scope.scope_id)},
        )
        return result

    # --- Internals ---------------------------------------------------------

    def _prune_closed(self) -> None:
        # scopes closed directly through Scope.close() never pass close_scope()
        for scope_id in [k for k, s in self._scopes.items() if not s.is_open]:
            del self._scopes[scope_id]

    def _hydrate(self, raw: RawState) -> StatefulEntity:
        try:
            kind = EntityKind(raw.get("kind"))
        except ValueError:
            raise ValidationError({"kind": [f"unknown entity kind {raw.get('kind')!r}"]})
        hydrator = self._hydrators.get(kind)
        if hydrator is None:
            raise ValidationError({"kind": [f"no hydrator registered for '{kind.value}'"]})
        return hydrator(raw)

    async def _call_gateway(self, operation: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except DomainGuardError:
            raise
        except Exception as e:
            error = GatewayError(str(e), operation)
            logger.error(error.message, extra=error.log_extra())
            raise error from e
