import json

import pytest

from mlforge.loading import (
    CsvDataLoader,
    DataLoadError,
    JsonDataLoader,
    LoadedData,
    available_formats,
    create_loader,
    create_loader_auto,
    format_description,
)

HEADER = ["a", "b", "target"]
ROWS = [[1.5, 2.0, 0.0], [3.0, 4.25, 1.0], [5.0, 6.0, 1.0]]


def _csv_text(header=HEADER, rows=ROWS):
    lines = [",".join(header)] + [",".join(str(v) for v in row) for row in rows]
    return "\n".join(lines) + "\n"


def test_csv_load_splits_features_and_target():
    loaded = CsvDataLoader().load_from_string(_csv_text(), "target")
    assert isinstance(loaded, LoadedData)
    assert loaded.headers == ["a", "b"]
    assert loaded.x_data.tolist() == [row[:2] for row in ROWS]
    assert loaded.y_data.tolist() == [row[2] for row in ROWS]
    assert loaded.num_samples() == len(ROWS)
    assert loaded.num_features() == len(HEADER) - 1


def test_csv_target_in_middle_column():
    loaded = CsvDataLoader().load_from_string(_csv_text(), "a")
    assert loaded.headers == ["b", "target"]
    assert loaded.y_data.tolist() == [row[0] for row in ROWS]


def test_csv_trims_headers_and_values():
    loaded = CsvDataLoader().load_from_string(" x , y \n 1 , 2 \n", "y")
    assert loaded.headers == ["x"]
    assert loaded.x_data.tolist() == [[1.0]]
    assert loaded.raw_records == [{"x": "1", "y": "2"}]


def test_csv_missing_target_column():
    with pytest.raises(DataLoadError, match="nope"):
        CsvDataLoader().load_from_string(_csv_text(), "nope")


def test_csv_non_numeric_value_names_column():
    with pytest.raises(DataLoadError, match="'b'"):
        CsvDataLoader().load_from_string("a,b,target\n1,abc,0\n", "target")


def test_csv_ragged_row_rejected():
    with pytest.raises(DataLoadError):
        CsvDataLoader().load_from_string("a,b\n1,2\n3\n", "b")


@pytest.mark.parametrize("text", ["", "   \n  ", "a,b"])
def test_csv_validate_format_rejects(text):
    with pytest.raises(DataLoadError):
        CsvDataLoader().validate_format(text)


def test_csv_only_target_column_has_no_features():
    with pytest.raises(DataLoadError):
        CsvDataLoader().load_from_string("target\n1\n2\n", "target")


def test_csv_available_columns_includes_target():
    assert CsvDataLoader().get_available_columns(_csv_text()) == HEADER


def test_json_load_sorts_keys_and_converts_values():
    items = [
        {"b": 2, "a": True, "target": "1.5"},
        {"b": 4.5, "a": False, "target": 0},
    ]
    loaded = JsonDataLoader().load_from_string(json.dumps(items), "target")
    assert loaded.headers == sorted(["a", "b"])
    assert loaded.raw_records[0]["a"] == "1"
    assert loaded.raw_records[1]["a"] == "0"
    assert loaded.x_data.tolist() == [[1.0, 2.0], [0.0, 4.5]]
    assert loaded.y_data.tolist() == [1.5, 0.0]


def test_json_available_columns():
    text = json.dumps([{"z": 1, "m": 2}])
    assert JsonDataLoader().get_available_columns(text) == sorted(["z", "m"])


@pytest.mark.parametrize(
    "text",
    [
        "[]",
        "[1, 2]",
        '[{"a": 1, "t": 0}, 5]',
        '[{"a": 1, "t": 0}, {"a": 2}]',
        '[{"a": null, "t": 0}]',
        '[{"a": NaN, "t": 0}]',
        '[{"a": "x", "t": 0}]',
        "[{broken",
    ],
)
def test_json_invalid_inputs(text):
    with pytest.raises(DataLoadError):
        JsonDataLoader().load_from_string(text, "t")


@pytest.mark.parametrize("text", ["", '{"a": 1}'])
def test_json_validate_format_rejects(text):
    with pytest.raises(DataLoadError):
        JsonDataLoader().validate_format(text)


def test_json_missing_target():
    with pytest.raises(DataLoadError, match="missing_col"):
        JsonDataLoader().load_from_string('[{"a": 1}]', "missing_col")


def test_create_loader_is_case_insensitive():
    assert create_loader("CSV").name == "CSV Data Loader"
    assert create_loader("Json").name == "JSON Data Loader"


def test_create_loader_unknown():
    with pytest.raises(DataLoadError):
        create_loader("xml")


def test_create_loader_auto_detects():
    assert create_loader_auto('  [{"a": 1}]').name == "JSON Data Loader"
    assert create_loader_auto("a,b\n1,2").name == "CSV Data Loader"
    with pytest.raises(DataLoadError):
        create_loader_auto("plain")


def test_formats_have_descriptions():
    formats = available_formats()
    assert formats == ["csv", "json"]
    assert all(format_description(f.upper()) for f in formats)
    assert format_description("xml") is None