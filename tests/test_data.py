from __future__ import annotations

import pytest

from econdash.data import (
    Dataset,
    DatasetLoadError,
    convert_cell,
    load_dataset,
    parse_csv_text,
    read_dataset,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2000", 2000),
        ("-12", -12),
        ("3.5", 3.5),
        (".5", 0.5),
        ("1e3", 1000.0),
        ("", None),
        ("true", True),
        ("FALSE", False),
        ("+5", "+5"),
        ("Brazil", "Brazil"),
        ("12abc", "12abc"),
        ("9007199254740991", 9007199254740991),
        ("9007199254740992", "9007199254740992"),
        ("9007199254740993", "9007199254740993"),
        ("-9007199254740992", "-9007199254740992"),
        ("1e16", "1e16"),
    ],
)
def test_convert_cell(raw, expected):
    out = convert_cell(raw)
    assert out == expected
    assert type(out) is type(expected)


def test_parse_csv_text_types_cells_individually():
    ds = parse_csv_text("Country,Year,GDP\nA,2000,100\nB,2000,n/a\n\nC,2001,\n")
    assert ds.columns == ("Country", "Year", "GDP")
    assert len(ds) == 3
    assert ds.rows[0] == {"Country": "A", "Year": 2000, "GDP": 100}
    assert ds.rows[1]["GDP"] == "n/a"
    assert ds.rows[2]["GDP"] is None


def test_rows_are_read_only():
    ds = parse_csv_text("a,b\n1,2\n")
    with pytest.raises(TypeError):
        ds.rows[0]["a"] = 5  # type: ignore[index]


def test_read_dataset_from_bytes():
    ds = read_dataset(b"Nation,Value\nX,1.5\n")
    assert ds.rows[0]["Value"] == 1.5


def test_empty_source_gives_empty_dataset():
    ds = parse_csv_text("")
    assert ds.empty
    assert ds.columns == ()


def test_load_dataset_from_path(csv_path):
    ds = load_dataset(csv_path)
    assert len(ds) == 5
    assert ds.columns[0] == "Country"
    assert load_dataset(csv_path) is ds


def test_load_dataset_missing_file(tmp_path):
    with pytest.raises(DatasetLoadError):
        load_dataset(tmp_path / "missing.csv")


def test_malformed_csv_raises_load_error():
    with pytest.raises(DatasetLoadError):
        parse_csv_text('a,b\n"unterminated,1\n')


def test_from_records_collects_columns_in_order():
    ds = Dataset.from_records([{"a": 1}, {"b": 2, "a": 3}])
    assert ds.columns == ("a", "b")


def test_to_frame_keeps_python_values(sample_dataset):
    frame = sample_dataset.to_frame()
    assert list(frame.columns) == ["Country", "Year", "GDP"]
    assert frame["Year"].dtype == object
    assert frame.loc[0, "Year"] == 2000


def test_large_integers_stay_strings():
    ds = parse_csv_text("Country,Code\nA,12345678901234567890\nB,42\n")
    assert ds.rows[0]["Code"] == "12345678901234567890"
    assert ds.rows[1]["Code"] == 42
