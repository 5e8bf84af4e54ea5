from __future__ import annotations

import pytest

from randomkarma.data.loader import ItemLoadError, ItemPoolLoader


def test_load_csv_skips_bad_rows(tmp_path):
    csv_path = tmp_path / "items.csv"
    csv_path.write_text(
        "id,time\n"
        "a,01:00.000\n"
        "b,00:30.500\n"
        "short\n"
        "a,00:10.000\n"
        "c,bad\n"
        ",00:20.000\n"
        "d,00:45.1\n",
        encoding="utf-8",
    )

    pool = ItemPoolLoader().load_csv(csv_path)

    assert [item.id for item in pool] == ["a", "b", "d"]
    assert [item.duration for item in pool] == [60_000, 30_500, 45_100]


def test_duplicate_check_only_counts_loaded_ids():
    content = "id,time\ne,bad\ne,00:05.000\n"

    pool = ItemPoolLoader().parse_text(content)

    assert pool.to_records() == [{"id": "e", "duration": 5_000}]


def test_custom_columns_and_start_line():
    content = "00:01.000,first,extra\n00:02.500,second,extra\n"

    pool = ItemPoolLoader(id_column=1, time_column=0, start_line=0).parse_text(content)

    assert [item.id for item in pool] == ["first", "second"]
    assert pool.durations.tolist() == [1_000, 2_500]


def test_empty_and_header_only_content():
    loader = ItemPoolLoader()

    assert len(loader.parse_text("")) == 0
    assert len(loader.parse_text("id,time\n")) == 0


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        ItemPoolLoader().load_csv(tmp_path / "missing.csv")


def test_invalid_loader_configuration():
    with pytest.raises(ItemLoadError):
        ItemPoolLoader(id_column=1, time_column=1)
    with pytest.raises(ItemLoadError):
        ItemPoolLoader(start_line=-1)


def test_pool_frame_round_trip(tmp_path):
    pool = ItemPoolLoader().parse_text("id,time\nx,00:01.000\n")

    frame = pool.to_frame()

    assert frame.columns.tolist() == ["id", "duration"]
    assert frame.iloc[0]["id"] == "x"


def test_undecodable_file_raises_item_load_error(tmp_path):
    csv_path = tmp_path / "latin.csv"
    csv_path.write_bytes("id,time\ncafé,00:01.000\n".encode("latin-1"))

    with pytest.raises(ItemLoadError, match="Cannot decode"):
        ItemPoolLoader().load_csv(csv_path)

    pool = ItemPoolLoader().load_csv(csv_path, encoding="latin-1")
    assert [item.id for item in pool] == ["café"]
