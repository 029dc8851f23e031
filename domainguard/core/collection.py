"""Encapsulated Collection - owned container exposing derived queries only.

Invariants:
    - Not iterable, not subscriptable, no len(), no `in`: raw elements never leave
    - Public methods return bool / int / new values, never a container of elements
    - Immutable: _with / _without / _replace return a NEW collection, so the owning
      entity can check invariants on the candidate before committing it
    - Only the owning entity's module calls the underscore helpers

Design Decisions:
    - Storage is a name-mangled tuple in __slots__: no instance __dict__ to reach into
    - Special methods set to None so collections.abc.Iterable / Container checks fail
    - Subclasses add domain queries (e.g. Memberships.allows) next to the entity
      that owns them, keeping filtering logic inside that module
"""

from typing import Any, Callable, Generic, Iterable, TypeVar

T = TypeVar("T")
C = TypeVar("C", bound="EncapsulatedCollection")


class EncapsulatedCollection(Generic[T]):
    """Immutable, behavior-only container owned by exactly one entity."""

    __slots__ = ("__items",)

    __iter__ = None
    __contains__ = None
    __reversed__ = None

    def __init__(self, items: Iterable[T] = ()):
        object.__setattr__(self, "_EncapsulatedCollection__items", tuple(items))

    # --- Public queries ----------------------------------------------------

    def count(self) -> int:
        return len(self.__items)

    def is_empty(self) -> bool:
        return not self.__items

    # --- Owner-module helpers ----------------------------------------------

    def _with(self: C, item: T) -> C:
        return type(self)(self.__items + (item,))

    def _without(self: C, predicate: Callable[[T], bool]) -> C:
        return type(self)(i for i in self.__items if not predicate(i))

    def _replace(
        self: C, predicate: Callable[[T], bool], transform: Callable[[T], T],
    ) -> C:
        return type(self)(
            transform(i) if predicate(i) else i for i in self.__items
        )

    def _any(self, predicate: Callable[[T], bool]) -> bool:
        return any(predicate(i) for i in self.__items)

    def _count_where(self, predicate: Callable[[T], bool]) -> int:
        return sum(1 for i in self.__items if predicate(i))

    def _find(self, predicate: Callable[[T], bool]) -> T | None:
        return next((i for i in self.__items if predicate(i)), None)

    def _map(self, transform: Callable[[T], Any]) -> tuple:
        """Projection for the owning entity's to_state(); elements stay inside."""
        return tuple(transform(i) for i in self.__items)

    # --- Protocol ----------------------------------------------------------

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.__items == other.__items

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.__items))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} count={self.count()}>"
