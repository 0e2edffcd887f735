from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

Tags = dict[str, str]


@dataclass(frozen=True, order=True)
class Id:
    """Element identifier, unique only within one element kind."""

    value: int

    def __int__(self) -> int:
        return self.value


class MemberType(Enum):
    NODE = "Node"
    WAY = "Way"
    RELATION = "Relation"


@dataclass(frozen=True)
class Info:
    """Revision metadata of an element.

    ``visible`` keeps three states: ``None`` (not asserted, assume visible),
    ``True`` and ``False`` (deleted, returned by a history query).
    """

    version: int
    timestamp: datetime | None = None
    changeset: int | None = None
    uid: int | None = None
    user: str | None = None
    visible: bool | None = None

    def is_visible(self) -> bool:
        return self.visible is not False

    def is_deleted(self) -> bool:
        return self.visible is False


@dataclass(frozen=True)
class Member:
    id: Id
    ty: MemberType
    role: str | None = None


@dataclass
class Node:
    id: Id
    tags: Tags
    info: Info | None
    lat: Decimal
    lon: Decimal

    def strip_info(self) -> None:
        self.info = None


@dataclass
class Way:
    id: Id
    tags: Tags
    info: Info | None
    refs: list[Id]

    def strip_info(self) -> None:
        self.info = None

    def is_closed(self) -> bool:
        return len(self.refs) >= 1 and self.refs[0] == self.refs[-1]

    def is_open(self) -> bool:
        # an empty way is neither open nor closed
        return len(self.refs) >= 1 and self.refs[0] != self.refs[-1]


@dataclass
class Relation:
    id: Id
    tags: Tags
    info: Info | None
    members: list[Member]

    def strip_info(self) -> None:
        self.info = None


OsmRecord = Node | Way | Relation

_RECORD_KINDS: dict[type, MemberType] = {
    Node: MemberType.NODE,
    Way: MemberType.WAY,
    Relation: MemberType.RELATION,
}


@dataclass
class Element:
    """One of the three element kinds.

    Shared fields are read through ``id()``, ``tags()`` and ``info()``;
    kind-specific code narrows with ``as_node()``, ``as_way()`` and
    ``as_relation()`` or matches on ``element.value``.
    """

    value: OsmRecord

    def __post_init__(self) -> None:
        if type(self.value) not in _RECORD_KINDS:
            raise TypeError(f"Element must wrap a Node, Way or Relation, got {type(self.value).__name__}")

    @property
    def kind(self) -> MemberType:
        return _RECORD_KINDS[type(self.value)]

    def id(self) -> Id:
        return self.value.id

    def tags(self) -> Tags:
        return self.value.tags

    def info(self) -> Info | None:
        return self.value.info

    def strip_info(self) -> None:
        self.value.strip_info()

    def as_node(self) -> Node | None:
        return self.value if isinstance(self.value, Node) else None

    def as_way(self) -> Way | None:
        return self.value if isinstance(self.value, Way) else None

    def as_relation(self) -> Relation | None:
        return self.value if isinstance(self.value, Relation) else None

    def is_visible(self) -> bool:
        info = self.value.info
        return info is None or info.is_visible()

    def to_member(self, role: str | None = None) -> Member:
        return Member(id=self.value.id, ty=self.kind, role=role)

    def copy(self) -> Element:
        return deepcopy(self)
