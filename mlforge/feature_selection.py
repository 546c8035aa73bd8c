"""Strategies that pick the most useful columns of a feature matrix."""

from __future__ import annotations

import functools
import math
import re
import struct
from abc import ABC, abstractmethod
from collections import Counter, defaultdict
from typing import Sequence

import numpy as np
from scipy.special import digamma

_UINT = re.compile(r"\+?[0-9]+")
_USIZE_MAX = 2**64 - 1


class SelectorError(ValueError):
    """Raised for bad selector names or parameters."""


def _parse_uint(value, message: str) -> int:
    text = str(value)
    if not _UINT.fullmatch(text):
        raise SelectorError(message)
    number = int(text)
    if number > _USIZE_MAX:
        raise SelectorError(message)
    return number


def _parse_float(value, message: str) -> float:
    text = str(value)
    if not text or text != text.strip() or "_" in text:
        raise SelectorError(message)
    try:
        return float(text)
    except ValueError:
        raise SelectorError(message) from None


def _as_matrix(x) -> np.ndarray:
    matrix = np.array(x, dtype=float)
    if matrix.ndim != 2:
        raise SelectorError(f"Expected a 2-D matrix, got {matrix.ndim} dimension(s)")
    return matrix


def _as_target(y) -> np.ndarray:
    return np.array(y, dtype=float).ravel()


def _bits(value: float) -> bytes:
    return struct.pack("<d", float(value))


def _descending(a: tuple[int, float], b: tuple[int, float]) -> int:
    """Order by score, highest first; incomparable scores count as equal."""
    sa, sb = a[1], b[1]
    if math.isnan(sa) or math.isnan(sb) or sa == sb:
        return 0
    return -1 if sa > sb else 1


def _top_k(scores: list[tuple[int, float]], k: int) -> list[int]:
    ranked = sorted(scores, key=functools.cmp_to_key(_descending))
    return [index for index, _ in ranked[:k]]


class FeatureSelector(ABC):
    """Chooses a subset of columns from a feature matrix."""

    name: str = "Feature Selector"
    supported_params: tuple[str, ...] = ()

    @abstractmethod
    def selected_indices(self, x, y: Sequence[float]) -> list[int]:
        """Return the indices of the columns to keep, in selection order."""

    def select_features(self, x, y: Sequence[float]) -> np.ndarray:
        """Return a new matrix holding only the selected columns."""
        matrix = _as_matrix(x)
        indices = self.selected_indices(matrix, y)
        return matrix[:, indices].copy()

    @abstractmethod
    def set_param(self, key: str, value) -> None:
        """Set a parameter from its text form."""


class VarianceSelector(FeatureSelector):
    """Keeps columns whose population variance exceeds a threshold."""

    name = "Variance Threshold Selector"
    supported_params = ("threshold",)

    def __init__(self) -> None:
        self.threshold = 0.0

    def set_param(self, key: str, value) -> None:
        if key != "threshold":
            raise SelectorError("Unknown parameter")
        self.threshold = _parse_float(value, "Invalid threshold")

    def selected_indices(self, x, y: Sequence[float] = ()) -> list[int]:
        matrix = _as_matrix(x)
        if matrix.shape[0] == 0:
            return []
        variances = ((matrix - matrix.mean(axis=0)) ** 2).mean(axis=0)
        return [j for j, variance in enumerate(variances) if variance > self.threshold]


def _pearson_abs(a: np.ndarray, b: np.ndarray) -> float:
    da = a - a.mean()
    db = b - b.mean()
    denominator = math.sqrt(float(da @ da) * float(db @ db))
    if denominator == 0.0:
        return 0.0
    return abs(float(da @ db) / denominator)


class CorrelationSelector(FeatureSelector):
    """Drops every column highly correlated with an earlier kept column."""

    name = "Correlation Filter"
    supported_params = ("threshold",)

    def __init__(self) -> None:
        self.threshold = 0.95

    def set_param(self, key: str, value) -> None:
        if key != "threshold":
            raise SelectorError("Param not found")
        self.threshold = _parse_float(value, "Invalid threshold")

    def selected_indices(self, x, y: Sequence[float] = ()) -> list[int]:
        matrix = _as_matrix(x)
        columns = list(matrix.T)
        dropped: set[int] = set()
        selected: list[int] = []
        for i, column in enumerate(columns):
            if i in dropped:
                continue
            selected.append(i)
            for j in range(i + 1, len(columns)):
                if j in dropped:
                    continue
                if _pearson_abs(column, columns[j]) > self.threshold:
                    dropped.add(j)
        return selected


class _TopKSelector(FeatureSelector):
    """Shared machinery for selectors that keep the ``top_k`` best-scored columns."""

    supported_params = ("top_k",)

    def __init__(self) -> None:
        self.top_k = 10

    @abstractmethod
    def _score(self, column: np.ndarray, target: np.ndarray) -> float:
        """Score how strongly ``column`` relates to ``target``."""

    def _rank(self, x, y: Sequence[float]) -> list[int]:
        matrix = _as_matrix(x)
        target = _as_target(y)
        scores = [(j, self._score(column, target)) for j, column in enumerate(matrix.T)]
        return _top_k(scores, self.top_k)


class ChiSquareSelector(_TopKSelector):
    """Ranks columns by the chi-square statistic of their contingency table."""

    name = "Chi-Square Selector"

    def set_param(self, key: str, value) -> None:
        if key != "top_k":
            raise SelectorError("Unknown parameter")
        self.top_k = _parse_uint(value, "Invalid top_k")

    def selected_indices(self, x, y: Sequence[float]) -> list[int]:
        return self._rank(x, y)

    def _score(self, column: np.ndarray, target: np.ndarray) -> float:
        pairs = [(_bits(f), _bits(t)) for f, t in zip(column, target)]
        n = float(len(pairs))
        observed = Counter(pairs)
        row_totals = Counter(f for f, _ in pairs)
        col_totals = Counter(t for _, t in pairs)
        chi_square = 0.0
        for (f, t), count in observed.items():
            expected = row_totals[f] * col_totals[t] / n
            if expected > 0.0:
                chi_square += (count - expected) ** 2 / expected
        return chi_square


def _entropy(labels: Sequence[float]) -> float:
    if len(labels) == 0:
        return 0.0
    n = float(len(labels))
    counts = Counter(_bits(label) for label in labels)
    return -sum((c / n) * math.log2(c / n) for c in counts.values())


class InformationGainSelector(_TopKSelector):
    """Ranks columns by the reduction in target entropy they give."""

    name = "Information Gain (Discrete Estimate)"

    def set_param(self, key: str, value) -> None:
        if key != "top_k":
            raise SelectorError("Parameter not found")
        self.top_k = _parse_uint(value, "top_k must be an integer")

    def selected_indices(self, x, y: Sequence[float]) -> list[int]:
        self._base_entropy = _entropy(_as_target(y))
        return self._rank(x, y)

    def _score(self, column: np.ndarray, target: np.ndarray) -> float:
        groups: dict[bytes, list[float]] = defaultdict(list)
        for value, label in zip(column, target):
            groups[_bits(value)].append(float(label))
        total = float(target.size)
        conditional = sum(len(g) / total * _entropy(g) for g in groups.values())
        return self._base_entropy - conditional


class MutualInformationSelector(_TopKSelector):
    """Ranks columns by the Kraskov–Stögbauer–Grassberger mutual information estimate."""

    name = "Mutual Information (KSG Estimator)"
    supported_params = ("top_k", "k_neighbors")

    def __init__(self) -> None:
        super().__init__()
        self.k_neighbors = 3

    def set_param(self, key: str, value) -> None:
        if key == "top_k":
            self.top_k = _parse_uint(value, "Invalid top_k")
        elif key == "k_neighbors":
            self.k_neighbors = _parse_uint(value, "Invalid k")
        else:
            raise SelectorError("Param not found")

    def selected_indices(self, x, y: Sequence[float]) -> list[int]:
        return self._rank(x, y)

    def _score(self, column: np.ndarray, target: np.ndarray) -> float:
        n = column.size
        k = self.k_neighbors
        if n <= k:
            return 0.0
        if k == 0:
            raise SelectorError("k_neighbors must be at least 1")
        dx = np.abs(column[:, None] - column[None, :])
        dy = np.abs(target[:, None] - target[None, :])
        joint = np.maximum(dx, dy)
        off_diagonal = ~np.eye(n, dtype=bool)
        total = 0.0
        for i in range(n):
            mask = off_diagonal[i]
            epsilon = np.sort(joint[i][mask])[k - 1]
            nx = int(np.count_nonzero(dx[i][mask] < epsilon))
            ny = int(np.count_nonzero(dy[i][mask] < epsilon))
            total += digamma(nx + 1) + digamma(ny + 1)
        mi = digamma(k) - total / n + digamma(n)
        return max(float(mi), 0.0)


_SELECTORS: dict[str, type[FeatureSelector]] = {
    "variance": VarianceSelector,
    "correlation": CorrelationSelector,
    "chi_square": ChiSquareSelector,
    "chi2": ChiSquareSelector,
    "information_gain": InformationGainSelector,
    "infogain": InformationGainSelector,
    "mutual_information": MutualInformationSelector,
    "mi": MutualInformationSelector,
}

_DESCRIPTIONS = {
    "variance": "Variance Threshold - removes features with low variance",
    "correlation": "Correlation - removes highly correlated features",
    "chi_square": "Chi-Square Test - for categorical features",
    "information_gain": "Information Gain - measures entropy reduction",
    "mutual_information": "Mutual Information - measures dependencies",
}

_SUPPORTED_TYPES = {
    "variance": ("regression", "classification"),
    "correlation": ("regression", "classification"),
    "chi_square": ("classification",),
    "information_gain": ("classification",),
    "mutual_information": ("regression", "classification"),
}


def create_selector(selector_type: str) -> FeatureSelector:
    """Create a feature selector by name or alias."""
    try:
        return _SELECTORS[selector_type]()
    except KeyError:
        raise SelectorError(f"Unknown feature selector: {selector_type}") from None


def available_selectors() -> list[str]:
    return list(_DESCRIPTIONS)


def selector_description(selector_type: str) -> str | None:
    return _DESCRIPTIONS.get(selector_type)


def selector_supported_types(selector_type: str) -> list[str]:
    """Return the problem types a selector suits; empty for unknown names."""
    return list(_SUPPORTED_TYPES.get(selector_type, ()))