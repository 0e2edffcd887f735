from __future__ import annotations

import logging
from collections.abc import Generator
from collections.abc import Iterable
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import pyarrow as pa
from more_itertools import batched

from osmmodel.osm.types import Element
from osmmodel.osm.types import Id
from osmmodel.osm.types import Info
from osmmodel.osm.types import Member
from osmmodel.osm.types import MemberType
from osmmodel.osm.types import Node
from osmmodel.osm.types import Relation
from osmmodel.osm.types import Way

logger = logging.getLogger(__name__)

# decimal text keeps every digit and the exponent of the source value
COORDINATE_TYPE = pa.string()

ARROW_TAGS_TYPE = pa.map_(pa.string(), pa.string())

ARROW_MEMBER_TYPE = pa.struct(
    [
        pa.field("id", pa.int64()),
        pa.field("ty", pa.string()),
        pa.field("role", pa.string()),
    ]
)

ARROW_INFO_FIELDS = [
    pa.field("has_info", pa.bool_()),
    pa.field("version", pa.int32()),
    pa.field("timestamp", pa.timestamp("us")),
    pa.field("changeset", pa.int64()),
    pa.field("uid", pa.int32()),
    pa.field("user", pa.string()),
    pa.field("visible", pa.bool_()),
]

ARROW_NODE_FIELDS = [
    pa.field("id", pa.int64()),
    pa.field("tags", ARROW_TAGS_TYPE),
    pa.field("lat", COORDINATE_TYPE),
    pa.field("lon", COORDINATE_TYPE),
    *ARROW_INFO_FIELDS,
]

ARROW_NODE_SCHEMA = pa.schema(ARROW_NODE_FIELDS)


ARROW_WAY_FIELDS = [
    pa.field("id", pa.int64()),
    pa.field("tags", ARROW_TAGS_TYPE),
    pa.field("refs", pa.list_(pa.int64())),
    *ARROW_INFO_FIELDS,
]

ARROW_WAY_SCHEMA = pa.schema(ARROW_WAY_FIELDS)


ARROW_RELATION_FIELDS = [
    pa.field("id", pa.int64()),
    pa.field("tags", ARROW_TAGS_TYPE),
    pa.field("members", pa.list_(ARROW_MEMBER_TYPE)),
    *ARROW_INFO_FIELDS,
]

ARROW_RELATION_SCHEMA = pa.schema(ARROW_RELATION_FIELDS)


def _info_arrays(records: Sequence[Node | Way | Relation]) -> list[pa.Array]:
    infos = [record.info for record in records]

    def column(name: str) -> list[Any]:
        return [getattr(info, name) if info is not None else None for info in infos]

    return [
        pa.array([info is not None for info in infos], type=pa.bool_()),
        pa.array(column("version"), type=pa.int32()),
        pa.array(column("timestamp"), type=pa.timestamp("us")),
        pa.array(column("changeset"), type=pa.int64()),
        pa.array(column("uid"), type=pa.int32()),
        pa.array(column("user"), type=pa.string()),
        pa.array(column("visible"), type=pa.bool_()),
    ]


def _common_arrays(records: Sequence[Node | Way | Relation]) -> list[pa.Array]:
    return [
        pa.array([record.id.value for record in records], type=pa.int64()),
        pa.array([list(record.tags.items()) for record in records], type=ARROW_TAGS_TYPE),
    ]


def record_batch_for_nodes(nodes: Sequence[Node]) -> pa.RecordBatch | None:
    if not nodes:
        return None

    arrays = [
        *_common_arrays(nodes),
        pa.array([str(node.lat) for node in nodes], type=COORDINATE_TYPE),
        pa.array([str(node.lon) for node in nodes], type=COORDINATE_TYPE),
        *_info_arrays(nodes),
    ]

    return pa.RecordBatch.from_arrays(arrays, schema=ARROW_NODE_SCHEMA)


def record_batch_for_ways(ways: Sequence[Way]) -> pa.RecordBatch | None:
    if not ways:
        return None

    arrays = [
        *_common_arrays(ways),
        pa.array([[ref.value for ref in way.refs] for way in ways], type=pa.list_(pa.int64())),
        *_info_arrays(ways),
    ]

    return pa.RecordBatch.from_arrays(arrays, schema=ARROW_WAY_SCHEMA)


def record_batch_for_relations(relations: Sequence[Relation]) -> pa.RecordBatch | None:
    if not relations:
        return None

    members = []
    for relation in relations:
        members.append([{"id": m.id.value, "ty": m.ty.value, "role": m.role} for m in relation.members])

    arrays = [
        *_common_arrays(relations),
        pa.array(members, type=pa.list_(ARROW_MEMBER_TYPE)),
        *_info_arrays(relations),
    ]

    return pa.RecordBatch.from_arrays(arrays, schema=ARROW_RELATION_SCHEMA)


def _info_from_row(row: dict[str, Any]) -> Info | None:
    if not row["has_info"]:
        return None

    return Info(
        version=row["version"],
        timestamp=row["timestamp"],
        changeset=row["changeset"],
        uid=row["uid"],
        user=row["user"],
        visible=row["visible"],
    )


def nodes_from_record_batch(batch: pa.RecordBatch) -> list[Node]:
    return [
        Node(
            id=Id(row["id"]),
            tags=dict(row["tags"]),
            info=_info_from_row(row),
            lat=Decimal(row["lat"]),
            lon=Decimal(row["lon"]),
        )
        for row in batch.to_pylist()
    ]


def ways_from_record_batch(batch: pa.RecordBatch) -> list[Way]:
    return [
        Way(
            id=Id(row["id"]),
            tags=dict(row["tags"]),
            info=_info_from_row(row),
            refs=[Id(ref) for ref in row["refs"]],
        )
        for row in batch.to_pylist()
    ]


def relations_from_record_batch(batch: pa.RecordBatch) -> list[Relation]:
    return [
        Relation(
            id=Id(row["id"]),
            tags=dict(row["tags"]),
            info=_info_from_row(row),
            members=[Member(id=Id(m["id"]), ty=MemberType(m["ty"]), role=m["role"]) for m in row["members"]],
        )
        for row in batch.to_pylist()
    ]


@dataclass
class BatchConfig:
    batch_size: int = 10_000


def record_batches(
    elements: Iterable[Element], config: BatchConfig
) -> Generator[tuple[MemberType, pa.RecordBatch], None, None]:
    for chunk in batched(elements, config.batch_size):
        nodes = [node for element in chunk if (node := element.as_node()) is not None]
        ways = [way for element in chunk if (way := element.as_way()) is not None]
        relations = [relation for element in chunk if (relation := element.as_relation()) is not None]
        logger.debug("Batching %d nodes, %d ways, %d relations", len(nodes), len(ways), len(relations))

        for kind, batch in (
            (MemberType.NODE, record_batch_for_nodes(nodes)),
            (MemberType.WAY, record_batch_for_ways(ways)),
            (MemberType.RELATION, record_batch_for_relations(relations)),
        ):
            if batch is not None:
                yield kind, batch
