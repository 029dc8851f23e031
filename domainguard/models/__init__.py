"""Domain Models - entities and append-only records built on core/.

Invariants:
    - Every entity is created through named constructors only
    - Cross-boundary references (group members, message authors, readers) are Identifiers

Design Decisions:
    - One file per entity for locality
    - HYDRATORS maps each EntityKind to its from_state constructor for the resolver
"""

from domainguard.core.domain_types import EntityKind
from domainguard.models.group import Group
from domainguard.models.message import Message
from domainguard.models.user import User

HYDRATORS = {
    EntityKind.USER: User.from_state,
    EntityKind.GROUP: Group.from_state,
    EntityKind.MESSAGE: Message.from_state,
}
