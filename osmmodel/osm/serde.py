from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from decimal import InvalidOperation
from typing import Any

from osmmodel.osm.types import Element
from osmmodel.osm.types import Id
from osmmodel.osm.types import Info
from osmmodel.osm.types import Member
from osmmodel.osm.types import MemberType
from osmmodel.osm.types import Node
from osmmodel.osm.types import Relation
from osmmodel.osm.types import Tags
from osmmodel.osm.types import Way


class SerializationError(ValueError):
    pass


INT32_RANGE = (-(2**31), 2**31 - 1)
INT64_RANGE = (-(2**63), 2**63 - 1)


def _put(data: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        data[key] = value


def info_to_dict(info: Info) -> dict[str, Any]:
    data: dict[str, Any] = {"version": info.version}
    _put(data, "timestamp", info.timestamp.isoformat() if info.timestamp is not None else None)
    _put(data, "changeset", info.changeset)
    _put(data, "uid", info.uid)
    _put(data, "user", info.user)
    _put(data, "visible", info.visible)
    return data


def member_to_dict(member: Member) -> dict[str, Any]:
    data: dict[str, Any] = {"id": member.id.value, "ty": member.ty.value}
    _put(data, "role", member.role)
    return data


def _common_to_dict(record: Node | Way | Relation) -> dict[str, Any]:
    data: dict[str, Any] = {"id": record.id.value, "tags": dict(record.tags)}
    if record.info is not None:
        data["info"] = info_to_dict(record.info)
    return data


def element_to_dict(element: Element) -> dict[str, Any]:
    data = _common_to_dict(element.value)
    match element.value:
        case Node(lat=lat, lon=lon):
            data["lat"] = str(lat)
            data["lon"] = str(lon)
        case Way(refs=refs):
            data["refs"] = [ref.value for ref in refs]
        case Relation(members=members):
            data["members"] = [member_to_dict(member) for member in members]
    return {element.kind.value: data}


def _field(data: dict[str, Any], key: str, kind: type | tuple[type, ...], optional: bool = False) -> Any:
    value = data.get(key)
    if value is None:
        if optional:
            return None
        raise SerializationError(f"Missing field: {key}")
    if not isinstance(value, kind):
        raise SerializationError(f"Invalid value for {key}: {value!r}")
    return value


def _int(value: Any, key: str, bounds: tuple[int, int]) -> int:
    # bool is an int subclass and never a valid integer field
    if not isinstance(value, int) or isinstance(value, bool):
        raise SerializationError(f"Invalid value for {key}: {value!r}")
    low, high = bounds
    if not low <= value <= high:
        raise SerializationError(f"Value for {key} out of range: {value!r}")
    return value


def _int_field(data: dict[str, Any], key: str, bounds: tuple[int, int], optional: bool = False) -> int | None:
    value = data.get(key)
    if value is None:
        if optional:
            return None
        raise SerializationError(f"Missing field: {key}")
    return _int(value, key, bounds)


def _decimal(data: dict[str, Any], key: str) -> Decimal:
    value = _field(data, key, (str, int, float, Decimal))
    if isinstance(value, bool):
        raise SerializationError(f"Invalid value for {key}: {value!r}")
    try:
        result = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except InvalidOperation as exc:
        raise SerializationError(f"Invalid decimal for {key}: {value!r}") from exc
    if not result.is_finite():
        raise SerializationError(f"Invalid decimal for {key}: {value!r}")
    return result


def _timestamp(value: str) -> datetime:
    try:
        timestamp = datetime.fromisoformat(value)
    except ValueError as exc:
        raise SerializationError(f"Invalid timestamp: {value!r}") from exc
    if timestamp.tzinfo is not None:
        raise SerializationError(f"Timestamp must not carry a timezone: {value!r}")
    return timestamp


def info_from_dict(data: dict[str, Any]) -> Info:
    if not isinstance(data, dict):
        raise SerializationError(f"Invalid value for info: {data!r}")
    timestamp = _field(data, "timestamp", str, optional=True)
    return Info(
        version=_int_field(data, "version", INT32_RANGE),
        timestamp=_timestamp(timestamp) if timestamp is not None else None,
        changeset=_int_field(data, "changeset", INT64_RANGE, optional=True),
        uid=_int_field(data, "uid", INT32_RANGE, optional=True),
        user=_field(data, "user", str, optional=True),
        visible=_field(data, "visible", bool, optional=True),
    )


def member_from_dict(data: dict[str, Any]) -> Member:
    if not isinstance(data, dict):
        raise SerializationError(f"Invalid member: {data!r}")
    ty = _field(data, "ty", str)
    try:
        member_type = MemberType(ty)
    except ValueError as exc:
        raise SerializationError(f"Unknown member type: {ty!r}") from exc
    return Member(
        id=Id(_int_field(data, "id", INT64_RANGE)),
        ty=member_type,
        role=_field(data, "role", str, optional=True),
    )


def _tags_from_dict(data: dict[str, Any]) -> Tags:
    tags = data.get("tags")
    if tags is None:
        return {}
    if not isinstance(tags, dict) or not all(isinstance(k, str) and isinstance(v, str) for k, v in tags.items()):
        raise SerializationError(f"Invalid tags: {tags!r}")
    return dict(tags)


def element_from_dict(data: dict[str, Any]) -> Element:
    if not isinstance(data, dict) or len(data) != 1:
        raise SerializationError("Element must be an object with exactly one kind key")

    tag, body = next(iter(data.items()))
    if not isinstance(body, dict):
        raise SerializationError(f"Invalid {tag} body: {body!r}")

    id = Id(_int_field(body, "id", INT64_RANGE))
    tags = _tags_from_dict(body)
    raw_info = body.get("info")
    info = info_from_dict(raw_info) if raw_info is not None else None

    match tag:
        case MemberType.NODE.value:
            record = Node(id=id, tags=tags, info=info, lat=_decimal(body, "lat"), lon=_decimal(body, "lon"))
        case MemberType.WAY.value:
            refs = _field(body, "refs", list)
            record = Way(id=id, tags=tags, info=info, refs=[Id(_int(ref, "refs", INT64_RANGE)) for ref in refs])
        case MemberType.RELATION.value:
            members = _field(body, "members", list)
            record = Relation(id=id, tags=tags, info=info, members=[member_from_dict(m) for m in members])
        case _:
            raise SerializationError(f"Unknown element kind: {tag!r}")

    return Element(record)


def dumps(element: Element) -> str:
    return json.dumps(element_to_dict(element), ensure_ascii=False)


def loads(text: str | bytes) -> Element:
    try:
        data = json.loads(text, parse_float=Decimal)
    except json.JSONDecodeError as exc:
        raise SerializationError(f"Invalid JSON: {exc}") from exc
    return element_from_dict(data)
