"""Column-wise transformations applied to feature matrices."""

from __future__ import annotations

import struct
from abc import ABC, abstractmethod

import numpy as np


def _as_matrix(data) -> np.ndarray:
    matrix = np.array(data, dtype=float)
    if matrix.ndim != 2:
        raise ValueError(f"Expected a 2-D matrix, got {matrix.ndim} dimension(s)")
    return matrix


class DataProcessor(ABC):
    """Transforms a feature matrix into a new one."""

    name: str = "Data Processor"

    @abstractmethod
    def process(self, data) -> np.ndarray:
        """Return a transformed copy of ``data``."""


class StandardScaler(DataProcessor):
    """Scales each column to zero mean and unit (population) deviation."""

    name = "Standard Scaler"

    def process(self, data) -> np.ndarray:
        result = _as_matrix(data)
        if result.shape[0] == 0:
            return result
        mean = result.mean(axis=0)
        std = np.sqrt(((result - mean) ** 2).mean(axis=0))
        scalable = std > 0
        result[:, scalable] = (result[:, scalable] - mean[scalable]) / std[scalable]
        return result


class Binner(DataProcessor):
    """Replaces each value by the index of its equal-width bin within the column."""

    name = "Equal-width Binner"

    def __init__(self, bins: int = 10) -> None:
        if bins < 1:
            raise ValueError("bins must be at least 1")
        self.bins = bins

    def process(self, data) -> np.ndarray:
        result = _as_matrix(data)
        if result.shape[0] == 0:
            return result
        for j, column in enumerate(result.T.copy()):
            low, high = column.min(), column.max()
            span = high - low
            if span > 0:
                binned = np.floor((column - low) / span * self.bins)
                result[:, j] = np.minimum(binned, self.bins - 1)
        return result


def _bits(value: float) -> bytes:
    return struct.pack("<d", value)


class OneHotEncoder(DataProcessor):
    """Expands each column into one indicator column per distinct value."""

    name = "One-Hot Encoder"

    def process(self, data) -> np.ndarray:
        matrix = _as_matrix(data)
        rows = matrix.shape[0]
        column_maps: list[dict[bytes, int]] = []
        for column in matrix.T:
            mapping: dict[bytes, int] = {}
            for value in column:
                mapping.setdefault(_bits(value), len(mapping))
            column_maps.append(mapping)

        encoded = np.zeros((rows, sum(len(m) for m in column_maps)))
        offset = 0
        for column, mapping in zip(matrix.T, column_maps):
            for i, value in enumerate(column):
                encoded[i, offset + mapping[_bits(value)]] = 1.0
            offset += len(mapping)
        return encoded


_FACTORIES = {
    "scaler": StandardScaler,
    "standard_scaler": StandardScaler,
    "binner": lambda: Binner(10),
    "onehot": OneHotEncoder,
    "one_hot_encoder": OneHotEncoder,
}

_DESCRIPTIONS = {
    "scaler": "Standard Scaler - normalises data (mean=0, std=1)",
    "binner": "Binner - discretises continuous values into bins",
    "onehot": "One-Hot Encoder - encodes categorical variables",
}


def create_processor(processor_type: str) -> DataProcessor:
    """Create a processor by name; the binner gets 10 bins."""
    try:
        factory = _FACTORIES[processor_type]
    except KeyError:
        raise ValueError(f"Unknown processor: {processor_type}") from None
    return factory()


def available_processors() -> list[str]:
    return list(_DESCRIPTIONS)


def processor_description(processor_type: str) -> str | None:
    return _DESCRIPTIONS.get(processor_type)