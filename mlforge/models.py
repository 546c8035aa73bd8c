"""Trainable regression and classification models behind one interface."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from scipy.linalg import solve_triangular
from scipy.optimize import minimize
from scipy.special import expit, logsumexp, softmax

_UINT = re.compile(r"\+?[0-9]+")
_U16_MAX = 2**16 - 1
_USIZE_MAX = 2**64 - 1


class ModelError(ValueError):
    """Raised for bad parameters or when a model cannot be trained or used."""


def _parse_uint(value, limit: int, message: str) -> int:
    text = str(value)
    if not _UINT.fullmatch(text):
        raise ModelError(message)
    number = int(text)
    if number > limit:
        raise ModelError(message)
    return number


def _parse_float(value, message: str) -> float:
    text = str(value)
    if not text or text != text.strip() or "_" in text:
        raise ModelError(message)
    try:
        return float(text)
    except ValueError:
        raise ModelError(message) from None


def _training_arrays(x, y) -> tuple[np.ndarray, np.ndarray]:
    matrix = np.array(x, dtype=float)
    target = np.array(y, dtype=float).ravel()
    if matrix.ndim != 2:
        raise ModelError(f"Expected a 2-D feature matrix, got {matrix.ndim} dimension(s)")
    if matrix.shape[0] == 0 or matrix.shape[1] == 0:
        raise ModelError("Training data is empty")
    if matrix.shape[0] != target.size:
        raise ModelError(
            f"X has {matrix.shape[0]} rows but y has {target.size} values"
        )
    return matrix, target


class Model(ABC):
    """A model trained on a feature matrix and queried one row at a time."""

    name: str = "Model"
    supported_params: tuple[str, ...] = ()

    def __init__(self) -> None:
        self._n_features: int | None = None

    @property
    def is_trained(self) -> bool:
        return self._n_features is not None

    def _row(self, input: Sequence[float]) -> np.ndarray:
        row = np.array(input, dtype=float).ravel()
        if row.size != self._n_features:
            raise ModelError(
                f"Input has {row.size} features, the model expects {self._n_features}"
            )
        return row

    @abstractmethod
    def train(self, x, y) -> None:
        """Fit the model to feature matrix ``x`` and targets ``y``."""

    @abstractmethod
    def predict(self, input: Sequence[float]) -> list[float]:
        """Predict for one row; an untrained model returns an empty list."""

    @abstractmethod
    def set_param(self, key: str, value) -> None:
        """Set a hyper-parameter from its text form."""


class LinearRegressionModel(Model):
    """Ordinary least squares with an intercept, solved by QR or SVD."""

    name = "Linear Regression"
    supported_params = ("solver",)

    def __init__(self) -> None:
        super().__init__()
        self.solver = "qr"
        self._coefficients: np.ndarray | None = None
        self._intercept = 0.0

    def set_param(self, key: str, value) -> None:
        if key != "solver":
            raise ModelError("Parameter does not exist")
        if value not in ("qr", "svd"):
            raise ModelError("Supported solvers are: qr, svd")
        self.solver = value

    def train(self, x, y) -> None:
        matrix, target = _training_arrays(x, y)
        rows, cols = matrix.shape
        if rows < cols:
            raise ModelError(
                f"Number of rows of X ({rows}) should be >= number of columns ({cols})"
            )
        design = np.hstack([matrix, np.ones((rows, 1))])
        if self.solver == "svd":
            weights, *_ = np.linalg.lstsq(design, target, rcond=None)
        else:
            q, r = np.linalg.qr(design)
            diagonal = np.abs(np.diag(r))
            if diagonal.size == 0 or diagonal.min() <= 1e-12 * max(diagonal.max(), 1.0):
                raise ModelError("X is rank deficient; QR solver cannot proceed")
            weights = solve_triangular(r, q.T @ target)
        self._coefficients = weights[:-1]
        self._intercept = float(weights[-1])
        self._n_features = cols

    def predict(self, input: Sequence[float]) -> list[float]:
        if self._coefficients is None:
            return []
        row = self._row(input)
        return [float(row @ self._coefficients + self._intercept)]


class LogisticRegressionModel(Model):
    """L2-regularised logistic regression; targets are rounded to class labels."""

    name = "Logistic Regression (Classification)"
    supported_params = ("alpha",)

    def __init__(self) -> None:
        super().__init__()
        self.alpha = 0.0
        self._classes: np.ndarray | None = None
        self._weights: np.ndarray | None = None
        self._bias: np.ndarray | None = None

    def set_param(self, key: str, value) -> None:
        if key != "alpha":
            raise ModelError("Parameter does not exist")
        self.alpha = _parse_float(value, "Alpha must be a decimal number")

    @staticmethod
    def _labels(target: np.ndarray) -> np.ndarray:
        # Half rounds away from zero; negative values saturate at 0.
        return np.maximum(np.floor(target + 0.5), 0.0)

    def _fit_binary(self, matrix: np.ndarray, positive: np.ndarray) -> None:
        cols = matrix.shape[1]
        alpha = self.alpha

        def objective(params: np.ndarray) -> tuple[float, np.ndarray]:
            w, b = params[:cols], params[cols]
            z = matrix @ w + b
            loss = float(np.sum(np.logaddexp(0.0, z) - positive * z))
            loss += 0.5 * alpha * float(w @ w)
            residual = expit(z) - positive
            grad = np.empty_like(params)
            grad[:cols] = matrix.T @ residual + alpha * w
            grad[cols] = residual.sum()
            return loss, grad

        result = minimize(objective, np.zeros(cols + 1), jac=True, method="L-BFGS-B")
        self._weights = result.x[:cols].reshape(cols, 1)
        self._bias = result.x[cols:]

    def _fit_multiclass(self, matrix: np.ndarray, indices: np.ndarray) -> None:
        rows, cols = matrix.shape
        k = self._classes.size
        one_hot = np.zeros((rows, k))
        one_hot[np.arange(rows), indices] = 1.0
        alpha = self.alpha

        def objective(params: np.ndarray) -> tuple[float, np.ndarray]:
            w = params[: cols * k].reshape(cols, k)
            b = params[cols * k :]
            z = matrix @ w + b
            loss = float(np.sum(logsumexp(z, axis=1) - np.sum(z * one_hot, axis=1)))
            loss += 0.5 * alpha * float(np.sum(w * w))
            residual = softmax(z, axis=1) - one_hot
            grad_w = matrix.T @ residual + alpha * w
            grad_b = residual.sum(axis=0)
            return loss, np.concatenate([grad_w.ravel(), grad_b])

        start = np.zeros(cols * k + k)
        result = minimize(objective, start, jac=True, method="L-BFGS-B")
        self._weights = result.x[: cols * k].reshape(cols, k)
        self._bias = result.x[cols * k :]

    def train(self, x, y) -> None:
        matrix, target = _training_arrays(x, y)
        if not np.all(np.isfinite(target)):
            raise ModelError("Class labels must be finite")
        labels = self._labels(target)
        classes, indices = np.unique(labels, return_inverse=True)
        if classes.size < 2:
            raise ModelError(
                f"Incorrect number of classes: {classes.size}; at least 2 are required"
            )
        self._classes = classes
        if classes.size == 2:
            self._fit_binary(matrix, indices.astype(float))
        else:
            self._fit_multiclass(matrix, indices)
        self._n_features = matrix.shape[1]

    def predict(self, input: Sequence[float]) -> list[float]:
        if self._weights is None:
            return []
        row = self._row(input)
        scores = row @ self._weights + self._bias
        if self._classes.size == 2:
            index = 1 if expit(scores[0]) > 0.5 else 0
        else:
            index = int(np.argmax(scores))
        return [float(self._classes[index])]


class KnnModel(Model):
    """k-nearest-neighbours regression: the mean target of the k closest rows."""

    name = "K-Nearest Neighbors"
    supported_params = ("k",)

    def __init__(self) -> None:
        super().__init__()
        self.k = 5
        self._x: np.ndarray | None = None
        self._y: np.ndarray | None = None

    def set_param(self, key: str, value) -> None:
        if key != "k":
            raise ModelError(f"Unknown parameter {key} for KNN")
        self.k = _parse_uint(value, _USIZE_MAX, "K must be a number")

    def train(self, x, y) -> None:
        matrix, target = _training_arrays(x, y)
        if self.k <= 1:
            raise ModelError(f"k should be > 1, k = {self.k}")
        if self.k > matrix.shape[0]:
            raise ModelError(
                f"k ({self.k}) is larger than the number of samples ({matrix.shape[0]})"
            )
        self._x = matrix
        self._y = target
        self._n_features = matrix.shape[1]

    def predict(self, input: Sequence[float]) -> list[float]:
        if self._x is None:
            return []
        row = self._row(input)
        distances = np.linalg.norm(self._x - row, axis=1)
        nearest = np.argsort(distances, kind="stable")[: self.k]
        return [float(self._y[nearest].mean())]


@dataclass
class _Node:
    value: float
    feature: int = -1
    threshold: float = 0.0
    left: "_Node | None" = None
    right: "_Node | None" = None


def _best_split(
    matrix: np.ndarray, target: np.ndarray
) -> tuple[int, float, float] | None:
    """Return (feature, threshold, sse) of the split with the lowest squared error."""
    n = target.size
    best: tuple[int, float, float] | None = None
    for feature, column in enumerate(matrix.T):
        order = np.argsort(column, kind="stable")
        xs = column[order]
        ys = target[order]
        cumsum = np.cumsum(ys)
        cumsq = np.cumsum(ys * ys)
        total, total_sq = cumsum[-1], cumsq[-1]
        left_n = np.arange(1, n)
        right_n = n - left_n
        left_sum = cumsum[:-1]
        left_sq = cumsq[:-1]
        sse = (
            left_sq - left_sum**2 / left_n
            + (total_sq - left_sq) - (total - left_sum) ** 2 / right_n
        )
        valid = xs[:-1] < xs[1:]
        if not valid.any():
            continue
        candidates = np.where(valid, sse, np.inf)
        i = int(np.argmin(candidates))
        if best is None or candidates[i] < best[2]:
            threshold = (xs[i] + xs[i + 1]) / 2.0
            best = (feature, float(threshold), float(candidates[i]))
    return best


class DecisionTreeModel(Model):
    """A regression tree grown by minimising squared error at each split."""

    name = "Decision Tree"
    supported_params = ("max_depth", "min_samples_split")

    def __init__(self) -> None:
        super().__init__()
        self.max_depth = 10
        self.min_samples_split = 2
        self._root: _Node | None = None

    def set_param(self, key: str, value) -> None:
        if key == "max_depth":
            self.max_depth = _parse_uint(value, _U16_MAX, "Invalid depth")
        elif key == "min_samples_split":
            self.min_samples_split = _parse_uint(value, _U16_MAX, "Invalid split value")
        else:
            raise ModelError("Param not found")

    def train(self, x, y) -> None:
        matrix, target = _training_arrays(x, y)
        root = _Node(value=float(target.mean()))
        pending = [(root, np.arange(target.size), 0)]
        while pending:
            node, rows, depth = pending.pop()
            if depth >= self.max_depth or rows.size < max(self.min_samples_split, 2):
                continue
            sub_x, sub_y = matrix[rows], target[rows]
            parent_sse = float(np.sum((sub_y - sub_y.mean()) ** 2))
            split = _best_split(sub_x, sub_y)
            if split is None:
                continue
            feature, threshold, sse = split
            if not sse < parent_sse - 1e-12 * max(parent_sse, 1.0):
                continue
            goes_left = sub_x[:, feature] <= threshold
            left_rows, right_rows = rows[goes_left], rows[~goes_left]
            node.feature = feature
            node.threshold = threshold
            node.left = _Node(value=float(target[left_rows].mean()))
            node.right = _Node(value=float(target[right_rows].mean()))
            pending.append((node.left, left_rows, depth + 1))
            pending.append((node.right, right_rows, depth + 1))
        self._root = root
        self._n_features = matrix.shape[1]

    def predict(self, input: Sequence[float]) -> list[float]:
        if self._root is None:
            return []
        row = self._row(input)
        node = self._root
        while node.left is not None and node.right is not None:
            node = node.left if row[node.feature] <= node.threshold else node.right
        return [node.value]


_MODELS: dict[str, type[Model]] = {
    "linreg": LinearRegressionModel,
    "linear_regression": LinearRegressionModel,
    "logreg": LogisticRegressionModel,
    "logistic_regression": LogisticRegressionModel,
    "knn": KnnModel,
    "tree": DecisionTreeModel,
    "decision_tree": DecisionTreeModel,
}

_DESCRIPTIONS = {
    "linreg": "Linear Regression - predicts continuous values",
    "logreg": "Logistic Regression - binary classification",
    "knn": "K-Nearest Neighbors - classification or regression",
    "tree": "Decision Tree - classification or regression",
}

_KINDS = {
    "linreg": "regression",
    "logreg": "classification",
    "knn": "both",
    "tree": "both",
}


def create_model(model_type: str) -> Model:
    """Create an untrained model by name or alias."""
    try:
        return _MODELS[model_type]()
    except KeyError:
        raise ModelError(f"Unknown model: {model_type}") from None


def available_models() -> list[str]:
    return list(_DESCRIPTIONS)


def model_description(model_type: str) -> str | None:
    return _DESCRIPTIONS.get(model_type)


def model_kind(model_type: str) -> str | None:
    """Return ``regression``, ``classification`` or ``both`` for a model name."""
    return _KINDS.get(model_type)