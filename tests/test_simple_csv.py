import pytest

from mlforge.loading import DataLoadError
from mlforge.simple_csv import CsvLoader


def test_empty_before_loading():
    loader = CsvLoader()
    assert len(loader) == 0
    assert loader.headers == []
    assert loader.get_training_data("y") == ([], [])


def test_load_and_training_data():
    loader = CsvLoader()
    loader.load_csv("x1,x2,y\n1,2,3\n4,5,6\n")
    assert loader.headers == ["x1", "x2", "y"]
    assert len(loader) == 2
    assert loader.get_training_data("y") == ([[1.0, 2.0], [4.0, 5.0]], [3.0, 6.0])


def test_unparsable_values_become_zero():
    loader = CsvLoader()
    loader.load_csv("a,y\nfoo,1\n 2,bar\n")
    x_data, y_data = loader.get_training_data("y")
    assert x_data == [[0.0], [0.0]]
    assert y_data == [1.0, 0.0]


def test_headers_are_not_trimmed():
    loader = CsvLoader()
    loader.load_csv("a, b\n1,2\n")
    assert loader.headers == ["a", " b"]
    x_data, y_data = loader.get_training_data(" b")
    assert x_data == [[1.0]]
    assert y_data == [2.0]


def test_unknown_target_keeps_all_columns():
    loader = CsvLoader()
    loader.load_csv("a,b\n1,2\n")
    assert loader.get_training_data("missing") == ([[1.0, 2.0]], [])


def test_blank_lines_are_skipped():
    loader = CsvLoader()
    loader.load_csv("a,b\n\n1,2\n\n3,4\n")
    assert len(loader) == 2


def test_ragged_record_raises():
    loader = CsvLoader()
    with pytest.raises(DataLoadError, match="CSV Error"):
        loader.load_csv("a,b\n1,2,3\n")


def test_reload_replaces_previous_data():
    loader = CsvLoader()
    loader.load_csv("a,b\n1,2\n3,4\n")
    loader.load_csv("c\n7\n")
    assert loader.headers == ["c"]
    assert loader.get_training_data("c") == ([[]], [7.0])