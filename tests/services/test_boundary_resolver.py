"""Boundary Reference Resolver - tests for scoped resolution and flushing.

Tests cover:
    - resolve loads, hydrates and tracks; same scope returns same instance
    - a fresh scope always reloads (no cross-scope cache)
    - NotFoundError for absent identifiers, ScopeExpiredError for closed scopes
    - entities keep working after their scope closes
    - track/flush write new entities; ForeignScopeError across open scopes
    - closed scopes are forgotten by the resolver
    - gateway failures surface as GatewayError
"""

from unittest.mock import AsyncMock

import pytest

from domainguard.core.domain_types import EntityKind, Identifier, SequentialIdGenerator
from domainguard.core.errors import (
    ForeignScopeError, GatewayError, NotFoundError, ScopeExpiredError, ValidationError,
)
from domainguard.infrastructure.in_memory_gateway import InMemoryGateway
from domainguard.models import HYDRATORS
from domainguard.models.group import Group
from domainguard.models.user import User
from domainguard.services.boundary_resolver import BoundaryReferenceResolver


@pytest.fixture
def user(registration_policy, ids) -> User:
    return User.from_registration_form(
        {"username": "ana", "password": "x"}, registration_policy, new_id=ids,
    )


@pytest.fixture
def gateway(user) -> InMemoryGateway:
    return InMemoryGateway({user.identifier: user.to_state()})


@pytest.fixture
def resolver(gateway) -> BoundaryReferenceResolver:
    return BoundaryReferenceResolver(
        gateway, HYDRATORS, new_id=SequentialIdGenerator(start=900),
    )


# ─── resolve ─────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_resolve_hydrates_entity(resolver, user):
    async with resolver.open_scope() as scope:
        resolved = await resolver.resolve(user.identifier, scope)
        assert isinstance(resolved, User)
        assert resolved == user
        assert resolved is not user
        assert resolved.to_nickname() == "ana"


@pytest.mark.asyncio
async def test_same_scope_returns_same_instance(resolver, gateway, user):
    async with resolver.open_scope() as scope:
        first = await resolver.resolve(user.identifier, scope)
        second = await resolver.resolve(user.identifier, scope)
        assert first is second
    assert gateway.load_calls == 1


@pytest.mark.asyncio
async def test_fresh_scope_reloads(resolver, gateway, user):
    async with resolver.open_scope() as first_scope:
        first = await resolver.resolve(user.identifier, first_scope)
    async with resolver.open_scope() as second_scope:
        second = await resolver.resolve(user.identifier, second_scope)
    assert first is not second
    assert gateway.load_calls == 2


@pytest.mark.asyncio
async def test_absent_identifier_raises_not_found(resolver):
    async with resolver.open_scope() as scope:
        with pytest.raises(NotFoundError) as exc_info:
            await resolver.resolve(Identifier.from_int(12345), scope)
    assert exc_info.value.identifier == str(Identifier.from_int(12345))
    assert exc_info.value.context.scope_id == str(scope.scope_id)


@pytest.mark.asyncio
async def test_closed_scope_behavior_methods_work_but_resolve_expires(
    resolver, gateway, user, clock,
):
    async with resolver.open_scope() as scope:
        resolved = await resolver.resolve(user.identifier, scope)

    resolved.apply_ban("spam", clock)
    assert resolved.is_banned()

    with pytest.raises(ScopeExpiredError):
        await resolver.resolve(user.identifier, scope)
    assert gateway.load_calls == 1


@pytest.mark.asyncio
async def test_unknown_kind_rejected(resolver, gateway, user):
    state = user.to_state()
    state["kind"] = "spaceship"
    bad_gateway = InMemoryGateway({user.identifier: state})
    bad_resolver = BoundaryReferenceResolver(bad_gateway, HYDRATORS)
    async with bad_resolver.open_scope() as scope:
        with pytest.raises(ValidationError) as exc_info:
            await bad_resolver.resolve(user.identifier, scope)
    assert exc_info.value.field == "kind"


@pytest.mark.asyncio
async def test_missing_hydrator_rejected(gateway, user):
    resolver = BoundaryReferenceResolver(gateway, {EntityKind.GROUP: Group.from_state})
    async with resolver.open_scope() as scope:
        with pytest.raises(ValidationError):
            await resolver.resolve(user.identifier, scope)


@pytest.mark.asyncio
async def test_mismatched_identity_from_gateway_is_gateway_error(user):
    gateway = InMemoryGateway({Identifier.from_int(77): user.to_state()})
    resolver = BoundaryReferenceResolver(gateway, HYDRATORS)
    async with resolver.open_scope() as scope:
        with pytest.raises(GatewayError):
            await resolver.resolve(Identifier.from_int(77), scope)


# ─── track / flush ───────────────────────────────────────────────

@pytest.mark.asyncio
async def test_flush_writes_tracked_entities(resolver, gateway, user, ids):
    group = Group.from_creation_form({"name": "club"}, user.identifier, new_id=ids)
    async with resolver.open_scope() as scope:
        resolved = await resolver.resolve(user.identifier, scope)
        resolved.rename("bea")
        resolver.track(group, scope)
        result = await resolver.flush(scope)
    assert set(result.written) == {user.identifier, group.identifier}
    assert result.written_count == 2
    assert gateway.snapshot(user.identifier)["username"] == "bea"
    assert gateway.contains(group.identifier)


@pytest.mark.asyncio
async def test_nothing_flushed_without_explicit_flush(resolver, gateway, user):
    async with resolver.open_scope() as scope:
        resolved = await resolver.resolve(user.identifier, scope)
        resolved.rename("bea")
    assert gateway.flush_calls == 0
    assert gateway.snapshot(user.identifier)["username"] == "ana"


@pytest.mark.asyncio
async def test_scope_closes_when_block_raises(resolver):
    with pytest.raises(RuntimeError):
        async with resolver.open_scope() as scope:
            raise RuntimeError("boom")
    assert not scope.is_open


@pytest.mark.asyncio
async def test_flush_on_closed_scope_expires(resolver):
    async with resolver.open_scope() as scope:
        pass
    with pytest.raises(ScopeExpiredError):
        await resolver.flush(scope)


@pytest.mark.asyncio
async def test_entity_cannot_be_tracked_by_two_open_scopes(resolver, user):
    async with resolver.open_scope() as first:
        resolved = await resolver.resolve(user.identifier, first)
        async with resolver.open_scope() as second:
            with pytest.raises(ForeignScopeError):
                resolver.track(resolved, second)


@pytest.mark.asyncio
async def test_entity_from_closed_scope_can_be_tracked_elsewhere(resolver, gateway, user):
    async with resolver.open_scope() as first:
        resolved = await resolver.resolve(user.identifier, first)
    async with resolver.open_scope() as second:
        resolver.track(resolved, second)
        await resolver.flush(second)
    assert gateway.flush_calls == 1


# ─── scope bookkeeping ───────────────────────────────────────────

def test_scopes_closed_directly_are_not_retained(resolver):
    for _ in range(1000):
        resolver.begin_scope().close()
    assert resolver.active_scope_count() == 0


def test_open_scopes_are_counted_until_closed(resolver):
    first = resolver.begin_scope()
    second = resolver.begin_scope()
    assert resolver.active_scope_count() == 2
    first.close()
    assert resolver.active_scope_count() == 1
    resolver.close_scope(second)
    assert resolver.active_scope_count() == 0


# ─── gateway failures ────────────────────────────────────────────

@pytest.mark.asyncio
async def test_gateway_exception_wrapped(user):
    gateway = AsyncMock()
    gateway.load.side_effect = ConnectionError("connection reset")
    resolver = BoundaryReferenceResolver(gateway, HYDRATORS)
    async with resolver.open_scope() as scope:
        with pytest.raises(GatewayError) as exc_info:
            await resolver.resolve(user.identifier, scope)
    assert exc_info.value.operation == "load"
    assert not exc_info.value.recoverable
    assert isinstance(exc_info.value.__cause__, ConnectionError)


@pytest.mark.asyncio
async def test_gateway_failure_logged_with_error_fields(user, caplog):
    gateway = AsyncMock()
    gateway.load.side_effect = ConnectionError("connection reset")
    resolver = BoundaryReferenceResolver(gateway, HYDRATORS)
    with caplog.at_level("ERROR", logger="domainguard.services.boundary_resolver"):
        async with resolver.open_scope() as scope:
            with pytest.raises(GatewayError):
                await resolver.resolve(user.identifier, scope)
    record = caplog.records[-1]
    assert record.error_code == "GATEWAY_ERROR"
    assert record.operation == "load"


@pytest.mark.asyncio
async def test_gateway_domain_errors_pass_through(user):
    gateway = AsyncMock()
    gateway.flush.side_effect = ScopeExpiredError("elsewhere")
    resolver = BoundaryReferenceResolver(gateway, HYDRATORS)
    async with resolver.open_scope() as scope:
        with pytest.raises(ScopeExpiredError):
            await resolver.flush(scope)
