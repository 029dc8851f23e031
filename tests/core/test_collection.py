"""Encapsulated Collection - tests that raw elements never leave the container.

Tests cover:
    - Iteration, indexing, len() and `in` are unavailable
    - Every public method returns a scalar, never a container
    - Owner helpers return new collections and never mutate the original
    - Immutability of the container itself
"""

import inspect
from collections.abc import Container, Iterable, Sized

import pytest

from domainguard.core.collection import EncapsulatedCollection
from domainguard.core.domain_types import Capability, Identifier, Role
from domainguard.models.group import CapabilityRequest, Membership, Memberships


class Tags(EncapsulatedCollection[str]):
    __slots__ = ()

    def mentions(self, tag: str) -> bool:
        return self._any(lambda t: t == tag)


def _public_methods(cls: type) -> list[str]:
    return [
        name for name, member in inspect.getmembers(cls)
        if not name.startswith("_") and callable(member)
    ]


# ─── Access paths ────────────────────────────────────────────────

def test_collection_is_not_iterable():
    tags = Tags(["a", "b"])
    assert not isinstance(tags, Iterable)
    with pytest.raises(TypeError):
        iter(tags)
    with pytest.raises(TypeError):
        list(tags)


def test_collection_is_not_subscriptable_or_sized():
    tags = Tags(["a"])
    assert not isinstance(tags, Sized)
    with pytest.raises(TypeError):
        tags[0]
    with pytest.raises(TypeError):
        len(tags)


def test_collection_does_not_support_membership_operator():
    tags = Tags(["a"])
    assert not isinstance(tags, Container)
    with pytest.raises(TypeError):
        "a" in tags


def test_collection_has_no_instance_dict():
    tags = Tags(["a"])
    assert not hasattr(tags, "__dict__")


def test_collection_is_immutable():
    tags = Tags(["a"])
    with pytest.raises(AttributeError):
        tags.items = ("b",)


# ─── Interface enumeration ───────────────────────────────────────

def test_base_public_interface_is_exactly_count_and_is_empty():
    assert _public_methods(EncapsulatedCollection) == ["count", "is_empty"]


def test_memberships_public_methods_return_scalars_only():
    admin, member = Identifier.from_int(1), Identifier.from_int(2)
    memberships = Memberships([
        Membership(admin, Role.ADMINISTRATOR), Membership(member, Role.MEMBER),
    ])
    calls = {
        "allows": (CapabilityRequest(admin, Capability.MANAGE_MEMBERS),),
        "is_member": (member,),
        "holds_role": (admin, Role.ADMINISTRATOR),
        "administrator_count": (),
        "has_duplicates": (),
        "references_identifiers_only": (),
        "count": (),
        "is_empty": (),
    }
    assert sorted(_public_methods(Memberships)) == sorted(calls)
    for name, args in calls.items():
        result = getattr(memberships, name)(*args)
        assert isinstance(result, (bool, int)), name


# ─── Queries & owner helpers ─────────────────────────────────────

def test_count_and_is_empty():
    assert Tags().is_empty()
    assert Tags().count() == 0
    assert Tags(["a", "b"]).count() == 2


def test_with_returns_new_collection_and_leaves_original():
    original = Tags(["a"])
    extended = original._with("b")
    assert original.count() == 1
    assert extended.count() == 2
    assert extended.mentions("b")
    assert not original.mentions("b")


def test_without_and_replace_return_new_collections():
    original = Tags(["a", "b", "c"])
    assert original._without(lambda t: t == "b").count() == 2
    replaced = original._replace(lambda t: t == "c", lambda t: t.upper())
    assert replaced.mentions("C")
    assert original.mentions("c")
    assert original.count() == 3


def test_find_and_count_where():
    tags = Tags(["ab", "ac", "b"])
    assert tags._find(lambda t: t.startswith("a")) == "ab"
    assert tags._find(lambda t: t == "zz") is None
    assert tags._count_where(lambda t: t.startswith("a")) == 2


def test_map_projects_without_handing_out_storage():
    tags = Tags(["a", "b"])
    projected = tags._map(str.upper)
    assert projected == ("A", "B")
    assert isinstance(projected, tuple)
    assert tags.mentions("a")


def test_equality_by_content_and_repr_hides_elements():
    assert Tags(["a"]) == Tags(["a"])
    assert Tags(["a"]) != Tags(["b"])
    assert repr(Tags(["secret"])) == "<Tags count=1>"
