from __future__ import annotations

from osmmodel.main import Stats
from osmmodel.main import main
from osmmodel.osm.lines import write_elements


def write_input(path, elements):
    with open(path, "w", encoding="utf-8") as fout:
        write_elements(fout, elements)


def test_stats(elements):
    stats = Stats()
    for element in elements:
        stats.update(element)
    assert stats == Stats(nodes=2, ways=1, relations=1, deleted=1)


def test_main_counts_elements(tmp_path, elements, capsys):
    input_path = tmp_path / "elements.jsonl"
    write_input(input_path, elements)

    assert main([str(input_path)]) == 0
    assert "Stats(nodes=2, ways=1, relations=1, deleted=1)" in capsys.readouterr().out


def test_main_strips_info(tmp_path, elements):
    input_path = tmp_path / "elements.jsonl"
    output_path = tmp_path / "stripped.jsonl"
    write_input(input_path, elements)

    assert main([str(input_path), "--output", str(output_path), "--strip-info"]) == 0

    text = output_path.read_text(encoding="utf-8")
    assert len(text.splitlines()) == 4
    assert '"info"' not in text


def test_main_malformed_input(tmp_path):
    input_path = tmp_path / "broken.jsonl"
    input_path.write_text('{"Node": {"id": 1}}\n', encoding="utf-8")

    assert main([str(input_path)]) == 1
