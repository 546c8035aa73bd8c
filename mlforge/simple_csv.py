"""A minimal CSV reader that keeps values as text until asked for numbers."""

from __future__ import annotations

import csv
import io

from mlforge.loading import DataLoadError


def _lenient_float(text: str) -> float:
    """Parse a number, treating anything unparsable as 0.0."""
    if not text or text != text.strip() or "_" in text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return 0.0


class CsvLoader:
    """Holds the header and records of the last CSV text loaded."""

    def __init__(self) -> None:
        self._headers: list[str] = []
        self._records: list[dict[str, str]] = []

    def load_csv(self, csv_text: str) -> None:
        """Parse ``csv_text``; fields are kept exactly as written."""
        reader = csv.reader(io.StringIO(csv_text, newline=""))
        rows = (row for row in reader if row)
        try:
            self._headers = list(next(rows, []))
            records = []
            for row in rows:
                if len(row) != len(self._headers):
                    raise DataLoadError(
                        f"CSV Error: found record with {len(row)} fields, "
                        f"but the header has {len(self._headers)} fields"
                    )
                records.append(dict(zip(self._headers, row)))
        except csv.Error as exc:
            raise DataLoadError(f"CSV Error: {exc}") from exc
        self._records = records

    def get_training_data(
        self, target_header: str
    ) -> tuple[list[list[float]], list[float]]:
        """Return feature rows and target values; bad numbers become 0.0."""
        x_data: list[list[float]] = []
        y_data: list[float] = []
        for record in self._records:
            row: list[float] = []
            for header in self._headers:
                value = _lenient_float(record[header])
                if header == target_header:
                    y_data.append(value)
                else:
                    row.append(value)
            x_data.append(row)
        return x_data, y_data

    @property
    def headers(self) -> list[str]:
        return list(self._headers)

    def __len__(self) -> int:
        return len(self._records)