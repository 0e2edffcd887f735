from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from osmmodel.osm.types import Element
from osmmodel.osm.types import Id
from osmmodel.osm.types import Info
from osmmodel.osm.types import Member
from osmmodel.osm.types import MemberType
from osmmodel.osm.types import Node
from osmmodel.osm.types import Relation
from osmmodel.osm.types import Way


@pytest.fixture
def info():
    return Info(
        version=3,
        timestamp=datetime(2021, 5, 4, 12, 30, 15),
        changeset=104_000_123,
        uid=4711,
        user="mapper",
    )


@pytest.fixture
def node(info):
    return Node(
        id=Id(1),
        tags={"amenity": "cafe", "name": "Kaffeehaus"},
        info=info,
        lat=Decimal("52.5200066"),
        lon=Decimal("13.4049540"),
    )


@pytest.fixture
def way():
    return Way(
        id=Id(10),
        tags={"highway": "residential"},
        info=Info(version=1, visible=True),
        refs=[Id(5), Id(9), Id(5)],
    )


@pytest.fixture
def relation():
    return Relation(
        id=Id(100),
        tags={"type": "multipolygon"},
        info=None,
        members=[
            Member(id=Id(1), ty=MemberType.NODE, role="outer"),
            Member(id=Id(2), ty=MemberType.WAY),
        ],
    )


@pytest.fixture
def deleted_node():
    return Node(
        id=Id(2),
        tags={},
        info=Info(version=4, changeset=7, visible=False),
        lat=Decimal("-33.8688000"),
        lon=Decimal("151.2093000"),
    )


@pytest.fixture
def elements(node, way, relation, deleted_node):
    return [Element(node), Element(way), Element(relation), Element(deleted_node)]
