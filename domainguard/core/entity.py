"""Validated Entity - base for objects that are valid from construction to disposal.

Invariants:
    - Direct instantiation raises TypeError; only named constructors create entities
    - _construct either returns a fully valid entity or raises ConstructionError
    - _transition commits a new state only if every invariant holds for it,
      otherwise raises InvariantViolation and leaves the prior state in place
    - State objects are frozen dataclasses: a rejected transition cannot leave
      half-applied changes behind
    - No public attribute assignment: every change goes through a behavior method

Design Decisions:
    - State held as one frozen dataclass swapped atomically per transition
    - Identity equality: two handles with the same class and Identifier are the same entity
    - No IO and no logging here; persistence is the gateway's concern
"""

from dataclasses import replace
from typing import Any, ClassVar, Generic, Iterable, TypeVar

from domainguard.core.domain_types import EntityKind, Identifier, RawState
from domainguard.core.errors import ConstructionError, InvariantViolation
from domainguard.core.invariants import Invariant, failed_invariants

S = TypeVar("S")
E = TypeVar("E", bound="ValidatedEntity")


class ValidatedEntity(Generic[S]):
    """Entity whose invariants hold at every externally observable point."""

    __slots__ = ("_identifier", "_state")

    kind: ClassVar[EntityKind]
    invariants: ClassVar[tuple[Invariant, ...]] = ()

    def __init__(self, *args: Any, **kwargs: Any):
        raise TypeError(
            f"{type(self).__name__} cannot be instantiated directly; "
            f"use one of its named constructors",
        )

    @classmethod
    def _construct(cls: type[E], identifier: Identifier, state: S) -> E:
        """One-shot construction: Uninitialized -> Valid, or ConstructionError."""
        if not isinstance(identifier, Identifier):
            raise ConstructionError(cls.__name__, ["identifier_present"])
        failed = failed_invariants(state, cls.invariants)
        if failed:
            raise ConstructionError(cls.__name__, failed)
        entity = object.__new__(cls)
        object.__setattr__(entity, "_identifier", identifier)
        object.__setattr__(entity, "_state", state)
        return entity

    def _transition(
        self,
        behavior: str,
        guards: Iterable[Invariant] = (),
        **changes: Any,
    ) -> None:
        """Valid -> Valid. Guards are checked against the current state,
        invariants against the candidate state."""
        failed = failed_invariants(self._state, guards)
        candidate = replace(self._state, **changes)
        failed += failed_invariants(candidate, self.invariants)
        if failed:
            raise InvariantViolation(
                type(self).__name__, behavior, failed, str(self._identifier),
            )
        object.__setattr__(self, "_state", candidate)

    def _reject(self, behavior: str, *invariant_names: str) -> None:
        raise InvariantViolation(
            type(self).__name__, behavior, list(invariant_names),
            str(self._identifier),
        )

    @property
    def identifier(self) -> Identifier:
        return self._identifier

    def to_state(self) -> RawState:
        """JSON-safe snapshot for a PersistenceGateway."""
        raise NotImplementedError

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(
            f"{type(self).__name__}.{name} cannot be assigned; "
            f"use a behavior method",
        )

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__}.{name} cannot be deleted")

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._identifier == other._identifier

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._identifier))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(identifier={self._identifier})"
