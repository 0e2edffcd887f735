from __future__ import annotations

import logging
from collections.abc import Generator
from collections.abc import Iterable
from typing import TextIO

from osmmodel.osm.serde import SerializationError
from osmmodel.osm.serde import dumps
from osmmodel.osm.serde import loads
from osmmodel.osm.types import Element

logger = logging.getLogger(__name__)


def read_element(line: str, line_number: int) -> Element | None:
    line = line.strip()
    if not line:
        return None

    try:
        return loads(line)
    except SerializationError as exc:
        raise SerializationError(f"line {line_number}: {exc}") from exc


def read_elements(source: TextIO) -> Generator[Element, None, None]:
    count = 0
    for line_number, line in enumerate(source, start=1):
        element = read_element(line, line_number)
        if element is None:
            continue
        count += 1
        yield element

    logger.debug("Read %d elements", count)


def write_elements(sink: TextIO, elements: Iterable[Element]) -> int:
    count = 0
    for element in elements:
        sink.write(dumps(element))
        sink.write("\n")
        count += 1

    logger.debug("Wrote %d elements", count)
    return count
