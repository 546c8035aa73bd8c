"""Ready-made pipeline recipes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from mlforge.pipeline import MLPipeline, MLPipelineBuilder


@dataclass(frozen=True)
class PresetInfo:
    """Description of one prepared pipeline configuration."""

    name: str
    description: str
    model_type: str


def _number_text(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(float(value))


def _assemble(
    model: str,
    mode: str,
    *,
    processor: str | None = None,
    selector: str | None = None,
    model_params: Mapping[str, str] | None = None,
    selector_params: Mapping[str, str] | None = None,
) -> MLPipeline:
    """Configure a builder from the given parts and build it."""
    builder = MLPipelineBuilder().model(model)
    for key, value in (model_params or {}).items():
        builder.model_param(key, value)
    if processor is not None:
        builder.processor(processor)
    if selector is not None:
        builder.feature_selector(selector)
    for key, value in (selector_params or {}).items():
        builder.selector_param(key, value)
    builder.evaluation_mode(mode)
    return builder.build()


def build_basic_classification(model: str) -> MLPipeline:
    """Scaler and variance selection, evaluated as classification."""
    return _assemble(
        model,
        "classification",
        processor="scaler",
        selector="variance",
        selector_params={"threshold": "0.01"},
    )


def build_basic_regression(model: str) -> MLPipeline:
    """Scaler and correlation filtering, evaluated as regression."""
    return _assemble(model, "regression", processor="scaler", selector="correlation")


def build_advanced_classification(model: str, k_features: int) -> MLPipeline:
    """Scaler and chi-square selection, evaluated as classification."""
    return _assemble(
        model,
        "classification",
        processor="scaler",
        selector="chi_square",
        selector_params={"k": str(k_features)},
    )


def build_advanced_regression(model: str, alpha: float) -> MLPipeline:
    """Regularised model with scaler and mutual information selection."""
    return _assemble(
        model,
        "regression",
        processor="scaler",
        selector="mutual_information",
        model_params={"alpha": _number_text(alpha)},
    )


def build_minimal(model: str, eval_mode: str) -> MLPipeline:
    """Just the model, with no processing or feature selection."""
    return _assemble(model, eval_mode)


def build_knn_classifier(k: int) -> MLPipeline:
    """Nearest-neighbour classifier on scaled, variance-filtered features."""
    return _assemble(
        "knn",
        "classification",
        processor="scaler",
        selector="variance",
        model_params={"k": str(k)},
        selector_params={"threshold": "0.05"},
    )


def build_knn_regressor(k: int) -> MLPipeline:
    """Nearest-neighbour regressor on scaled, decorrelated features."""
    return _assemble(
        "knn",
        "regression",
        processor="scaler",
        selector="correlation",
        model_params={"k": str(k)},
    )


def build_decision_tree_classifier() -> MLPipeline:
    """Decision tree on features ranked by information gain."""
    return _assemble("tree", "classification", selector="information_gain")


def build_custom() -> MLPipelineBuilder:
    """Return an empty builder for free-form configuration."""
    return MLPipelineBuilder()


def build_from_config(
    model: str, processor: str | None, selector: str | None, eval_mode: str
) -> MLPipeline:
    """Build from plain names; ``None`` leaves a part out."""
    return _assemble(model, eval_mode, processor=processor, selector=selector)


_PRESET_TABLE = {
    "basic_classification": (
        "classification",
        "Basic classification pipeline (LogReg + Scaler + Variance)",
    ),
    "basic_regression": (
        "regression",
        "Basic regression pipeline (LinReg + Scaler + Correlation)",
    ),
    "advanced_classification": (
        "classification",
        "Advanced classification pipeline (Model + Scaler + Chi-Square)",
    ),
    "advanced_regression": (
        "regression",
        "Advanced regression pipeline (Model + Scaler + MI)",
    ),
    "knn_classifier": ("classification", "KNN classifier with tuned settings"),
    "knn_regressor": ("regression", "KNN regressor with tuned settings"),
    "decision_tree": ("classification", "Decision Tree with Information Gain selection"),
    "minimal": ("both", "Minimal pipeline without preprocessing"),
}


def available_presets() -> list[PresetInfo]:
    """List every prepared configuration, in a fixed order."""
    return [
        PresetInfo(name=name, description=description, model_type=kind)
        for name, (kind, description) in _PRESET_TABLE.items()
    ]