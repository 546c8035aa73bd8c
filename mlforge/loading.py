"""Loading tabular training data from CSV and JSON text."""

from __future__ import annotations

import csv
import io
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import numpy as np

Record = dict[str, str]


class DataLoadError(ValueError):
    """Raised when data cannot be parsed or turned into training data."""


@dataclass(eq=False)
class LoadedData:
    """Feature matrix, target vector and the raw records they came from."""

    headers: list[str]
    x_data: np.ndarray
    y_data: np.ndarray
    raw_records: list[Record] = field(default_factory=list)

    def num_features(self) -> int:
        return int(self.x_data.shape[1])

    def num_samples(self) -> int:
        return int(self.x_data.shape[0])


def _strict_float(text: str) -> float:
    """Parse a float without tolerating surrounding whitespace or underscores."""
    if not text or text != text.strip() or "_" in text:
        raise ValueError(text)
    return float(text)


def _split_target(
    headers: list[str],
    records: list[Record],
    target_column: str,
    describe,
) -> tuple[list[list[float]], list[float]]:
    """Split records into feature rows and target values."""
    if target_column not in headers:
        raise DataLoadError(
            f"Target column '{target_column}' is not in the data. "
            f"Available columns: {headers}"
        )
    x_rows: list[list[float]] = []
    y_values: list[float] = []
    for row_number, record in enumerate(records, start=1):
        row: list[float] = []
        for header in headers:
            if header not in record:
                raise DataLoadError(f"Missing value for column '{header}'")
            text = record[header]
            try:
                value = _strict_float(text)
            except ValueError:
                raise DataLoadError(describe(text, header, row_number)) from None
            if header == target_column:
                y_values.append(value)
            else:
                row.append(value)
        if row:
            x_rows.append(row)
    if not x_rows or not y_values:
        raise DataLoadError("Could not extract training data")
    return x_rows, y_values


def _build(
    headers: list[str],
    records: list[Record],
    x_rows: list[list[float]],
    y_values: list[float],
    target_column: str,
) -> LoadedData:
    return LoadedData(
        headers=[h for h in headers if h != target_column],
        x_data=np.array(x_rows, dtype=float),
        y_data=np.array(y_values, dtype=float),
        raw_records=records,
    )


class DataLoader(ABC):
    """A strategy for turning text in some format into training data."""

    name: str = "Data Loader"

    @abstractmethod
    def load_from_string(self, data: str, target_column: str) -> LoadedData:
        """Parse ``data`` and split it into features and ``target_column``."""

    @abstractmethod
    def get_available_columns(self, data: str) -> list[str]:
        """Return every column name found in ``data``."""

    @abstractmethod
    def validate_format(self, data: str) -> None:
        """Raise DataLoadError if ``data`` is plainly not in this format."""


class CsvDataLoader(DataLoader):
    """Loads comma-separated text with a header row; all fields are trimmed."""

    name = "CSV Data Loader"

    def _parse(self, text: str) -> tuple[list[str], list[Record]]:
        reader = csv.reader(io.StringIO(text, newline=""))
        rows = (row for row in reader if row)
        try:
            headers = [cell.strip() for cell in next(rows, [])]
            if not headers:
                raise DataLoadError("CSV has no columns")
            records: list[Record] = []
            for row_number, row in enumerate(rows, start=1):
                if len(row) != len(headers):
                    raise DataLoadError(
                        f"Row {row_number} has {len(row)} columns, "
                        f"expected {len(headers)}"
                    )
                records.append(
                    {header: cell.strip() for header, cell in zip(headers, row)}
                )
        except csv.Error as exc:
            raise DataLoadError(f"Error reading CSV: {exc}") from exc
        if not records:
            raise DataLoadError("CSV contains no data")
        return headers, records

    def load_from_string(self, data: str, target_column: str) -> LoadedData:
        self.validate_format(data)
        headers, records = self._parse(data)
        x_rows, y_values = _split_target(
            headers,
            records,
            target_column,
            lambda text, column, row: (
                f"Value '{text}' in column '{column}' (row {row}) is not a number"
            ),
        )
        if len(x_rows) != len(y_values):
            raise DataLoadError(
                f"Sample count mismatch: X has {len(x_rows)}, y has {len(y_values)}"
            )
        return _build(headers, records, x_rows, y_values, target_column)

    def get_available_columns(self, data: str) -> list[str]:
        headers, _ = self._parse(data)
        return headers

    def validate_format(self, data: str) -> None:
        if not data.strip():
            raise DataLoadError("CSV data is empty")
        line_count = data.count("\n") + (0 if data.endswith("\n") else 1)
        if line_count < 2:
            raise DataLoadError("CSV must contain a header and at least one data row")


def _reject_constant(name: str) -> float:
    raise ValueError(f"invalid JSON constant {name}")


def _json_value_text(value: object, key: str) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, str):
        return value
    raise DataLoadError(f"Unsupported value type for key '{key}'")


class JsonDataLoader(DataLoader):
    """Loads a JSON array of flat objects; columns come from the first object."""

    name = "JSON Data Loader"

    def _parse(self, text: str) -> tuple[list[str], list[Record]]:
        try:
            parsed = json.loads(text, parse_constant=_reject_constant)
        except ValueError as exc:
            raise DataLoadError(f"Error parsing JSON: {exc}") from exc
        if not isinstance(parsed, list):
            raise DataLoadError("JSON must be an array of objects")
        if not parsed:
            raise DataLoadError("JSON array is empty")
        first = parsed[0]
        if not isinstance(first, dict):
            raise DataLoadError("First element must be an object")
        headers = sorted(first)
        records: list[Record] = []
        for index, item in enumerate(parsed):
            if not isinstance(item, dict):
                raise DataLoadError(f"Element {index} is not an object")
            record: Record = {}
            for header in headers:
                if header not in item:
                    raise DataLoadError(f"Key '{header}' missing in element {index}")
                record[header] = _json_value_text(item[header], header)
            records.append(record)
        return headers, records

    def load_from_string(self, data: str, target_column: str) -> LoadedData:
        self.validate_format(data)
        headers, records = self._parse(data)
        x_rows, y_values = _split_target(
            headers,
            records,
            target_column,
            lambda text, key, row: (
                f"Value '{text}' for key '{key}' (row {row}) is not a number"
            ),
        )
        return _build(headers, records, x_rows, y_values, target_column)

    def get_available_columns(self, data: str) -> list[str]:
        headers, _ = self._parse(data)
        return headers

    def validate_format(self, data: str) -> None:
        trimmed = data.strip()
        if not trimmed:
            raise DataLoadError("JSON data is empty")
        if not (trimmed.startswith("[") and trimmed.endswith("]")):
            raise DataLoadError("JSON must be an array (start with '[' and end with ']')")


_LOADERS: dict[str, type[DataLoader]] = {
    "csv": CsvDataLoader,
    "json": JsonDataLoader,
}

_DESCRIPTIONS = {
    "csv": "CSV (Comma-Separated Values) - standard format for tabular data",
    "json": "JSON (JavaScript Object Notation) - array of objects format",
}


def create_loader(loader_type: str) -> DataLoader:
    """Create a loader for ``loader_type`` (case-insensitive)."""
    try:
        return _LOADERS[loader_type.lower()]()
    except KeyError:
        raise DataLoadError(f"Unknown loader type: {loader_type}") from None


def create_loader_auto(data: str) -> DataLoader:
    """Pick a loader by looking at the content of ``data``."""
    trimmed = data.strip()
    if trimmed.startswith("[") and "{" in trimmed:
        return JsonDataLoader()
    if "," in trimmed or "\n" in trimmed:
        return CsvDataLoader()
    raise DataLoadError("Could not detect the data format automatically")


def available_formats() -> list[str]:
    return list(_LOADERS)


def format_description(fmt: str) -> str | None:
    return _DESCRIPTIONS.get(fmt.lower())