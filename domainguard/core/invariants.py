"""Invariant Enforcement - named predicates over entity state.

Invariants:
    - All functions are PURE: no IO, no side effects
    - failed_invariants reports every failure in declaration order, not just the first
    - A predicate that raises counts as a failure of that invariant

Design Decisions:
    - Pure functions over method dispatch: testable without entities
    - Return names (not exceptions): the entity base decides between
      ConstructionError and InvariantViolation depending on the lifecycle step
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable


@dataclass(frozen=True)
class Invariant:
    """A condition that must hold for a state at every observable point."""
    name: str
    description: str
    holds: Callable[[Any], bool]


def check_invariant(state: Any, invariant: Invariant) -> bool:
    """True when the invariant holds for state."""
    try:
        return bool(invariant.holds(state))
    except (TypeError, ValueError, AttributeError, KeyError):
        return False


def failed_invariants(state: Any, invariants: Iterable[Invariant]) -> list[str]:
    """Names of every invariant that does not hold, in declaration order."""
    return [inv.name for inv in invariants if not check_invariant(state, inv)]


def all_hold(state: Any, invariants: Iterable[Invariant]) -> bool:
    return not failed_invariants(state, invariants)
