"""Evaluation metrics for classification and regression models."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np


class EvaluationError(ValueError):
    """Raised when predictions cannot be evaluated."""


@dataclass
class EvaluationReport:
    """Named metrics computed for one model."""

    model_name: str
    evaluation_type: str
    metrics: dict[str, float] = field(default_factory=dict)

    def add_metric(self, name: str, value: float) -> None:
        self.metrics[name] = float(value)

    def get_metric(self, name: str) -> float | None:
        return self.metrics.get(name)


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return math.nan
    return numerator / denominator


def _as_pair(
    y_true: Sequence[float], y_pred: Sequence[float]
) -> tuple[np.ndarray, np.ndarray]:
    true = np.asarray(y_true, dtype=float).ravel()
    pred = np.asarray(y_pred, dtype=float).ravel()
    if true.shape != pred.shape:
        raise EvaluationError(
            f"y_true has {true.size} values but y_pred has {pred.size}"
        )
    return true, pred


def _precision(true: np.ndarray, pred: np.ndarray) -> float:
    predicted_positive = pred == 1.0
    true_positive = np.count_nonzero(predicted_positive & (true == 1.0))
    return _ratio(true_positive, np.count_nonzero(predicted_positive))


def _recall(true: np.ndarray, pred: np.ndarray) -> float:
    actual_positive = true == 1.0
    true_positive = np.count_nonzero(actual_positive & (pred == 1.0))
    return _ratio(true_positive, np.count_nonzero(actual_positive))


def _f_score(precision: float, recall: float, beta: float = 1.0) -> float:
    beta2 = beta * beta
    return _ratio((1.0 + beta2) * precision * recall, beta2 * precision + recall)


def _r2(true: np.ndarray, pred: np.ndarray) -> float:
    if true.size == 0:
        return math.nan
    ss_res = float(np.sum((true - pred) ** 2))
    ss_tot = float(np.sum((true - true.mean()) ** 2))
    if ss_tot == 0:
        return math.nan if ss_res == 0 else -math.inf
    return 1.0 - ss_res / ss_tot


def evaluate_classification(
    y_true: Sequence[float], y_pred: Sequence[float], model_name: str
) -> EvaluationReport:
    """Accuracy (on rounded labels), precision, recall and F1 for class 1."""
    true, pred = _as_pair(y_true, y_pred)
    report = EvaluationReport(model_name, "classification")
    correct = np.count_nonzero(np.abs(np.round(true) - np.round(pred)) < 0.1)
    precision = _precision(true, pred)
    recall = _recall(true, pred)
    report.add_metric("accuracy", _ratio(correct, true.size))
    report.add_metric("precision", precision)
    report.add_metric("recall", recall)
    report.add_metric("f1_score", _f_score(precision, recall))
    return report


def evaluate_regression(
    y_true: Sequence[float], y_pred: Sequence[float], model_name: str
) -> EvaluationReport:
    """Mean squared error, mean absolute error and the R² score."""
    true, pred = _as_pair(y_true, y_pred)
    report = EvaluationReport(model_name, "regression")
    diff = true - pred
    count = true.size
    report.add_metric("mse", _ratio(float(np.sum(diff**2)), count))
    report.add_metric("mae", _ratio(float(np.sum(np.abs(diff))), count))
    report.add_metric("r2_score", _r2(true, pred))
    return report


def evaluate_auto(
    y_true: Sequence[float],
    y_pred: Sequence[float],
    model_name: str,
    model_type: str,
) -> EvaluationReport:
    """Evaluate as ``classification`` or ``regression`` depending on ``model_type``."""
    if model_type == "classification":
        return evaluate_classification(y_true, y_pred, model_name)
    if model_type == "regression":
        return evaluate_regression(y_true, y_pred, model_name)
    raise EvaluationError(f"Unknown model type: {model_type}")