from __future__ import annotations

import argparse
import logging
from collections.abc import Generator
from collections.abc import Iterable
from dataclasses import dataclass

import fsspec
from tqdm import tqdm

from osmmodel.osm.lines import read_elements
from osmmodel.osm.lines import write_elements
from osmmodel.osm.serde import SerializationError
from osmmodel.osm.types import Element
from osmmodel.osm.types import MemberType

logger = logging.getLogger(__name__)


@dataclass
class Stats:
    nodes: int = 0
    ways: int = 0
    relations: int = 0
    deleted: int = 0

    def update(self, element: Element) -> None:
        match element.kind:
            case MemberType.NODE:
                self.nodes += 1
            case MemberType.WAY:
                self.ways += 1
            case MemberType.RELATION:
                self.relations += 1

        if not element.is_visible():
            self.deleted += 1


def counted(elements: Iterable[Element], stats: Stats, strip_info: bool) -> Generator[Element, None, None]:
    for element in elements:
        stats.update(element)
        if strip_info:
            element.strip_info()
        yield element


def process(input_path: str, output_path: str | None, strip_info: bool) -> Stats:
    stats = Stats()
    with fsspec.open(input_path, "rt", encoding="utf-8") as fin:
        elements = tqdm(read_elements(fin), desc="Reading elements", unit_scale=True)
        elements = counted(elements, stats, strip_info)
        if output_path is None:
            for _ in elements:
                pass
        else:
            with fsspec.open(output_path, "wt", encoding="utf-8") as fout:
                written = write_elements(fout, elements)
            logger.info("Wrote %d elements to %s", written, output_path)

    return stats


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Count OSM elements in a JSON Lines element stream")
    parser.add_argument("input_path", type=str, help="Path or URI of the JSON Lines input")
    parser.add_argument("--output", dest="output_path", type=str, default=None, help="Write the elements back out")
    parser.add_argument("--strip-info", action="store_true", help="Drop revision metadata from written elements")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    try:
        stats = process(args.input_path, args.output_path, args.strip_info)
    except SerializationError as exc:
        logger.error("Malformed input %s: %s", args.input_path, exc)
        return 1

    print(stats)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
