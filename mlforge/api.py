"""Session-style front end over loaders, factories and pipelines."""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

import numpy as np

from mlforge import director
from mlforge.compatibility import CompatibilityRegistry
from mlforge.evaluation import EvaluationReport
from mlforge.feature_selection import (
    available_selectors,
    selector_description,
    selector_supported_types,
)
from mlforge.loading import (
    DataLoader,
    available_formats,
    create_loader,
    create_loader_auto,
    format_description,
)
from mlforge.models import available_models, model_description, model_kind
from mlforge.pipeline import MLPipeline, MLPipelineBuilder, PipelineInfo
from mlforge.processing import available_processors, processor_description


class ApiError(ValueError):
    """Raised when a session request cannot be carried out."""


@dataclass(frozen=True)
class ModelOption:
    name: str
    description: str
    model_type: str


@dataclass(frozen=True)
class ProcessorOption:
    name: str
    description: str


@dataclass(frozen=True)
class SelectorOption:
    name: str
    description: str
    supported_types: list[str]


@dataclass(frozen=True)
class FormatOption:
    name: str
    description: str


@dataclass(frozen=True)
class AvailableOptions:
    """Everything a front end can offer to choose from."""

    models: list[ModelOption]
    processors: list[ProcessorOption]
    selectors: list[SelectorOption]
    data_formats: list[FormatOption]
    presets: list[director.PresetInfo]


@dataclass(frozen=True)
class LoadedDataInfo:
    num_samples: int
    num_features: int
    feature_names: list[str]
    target_column: str


@dataclass(frozen=True)
class LoadResult:
    success: bool
    samples: int
    message: str


@dataclass(frozen=True)
class TrainingResult:
    success: bool
    message: str
    samples_trained: int


def _pairs(params: Any) -> list[tuple[str, str]]:
    if params is None:
        return []
    items: Iterable = params.items() if isinstance(params, Mapping) else params
    pairs = []
    for item in items:
        key, value = item
        pairs.append((str(key), str(value)))
    return pairs


@dataclass
class PipelineConfig:
    """Plain description of a pipeline to build."""

    model: str
    processor: str | None = None
    selector: str | None = None
    evaluation_mode: str | None = None
    model_params: list[tuple[str, str]] = field(default_factory=list)
    selector_params: list[tuple[str, str]] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> PipelineConfig:
        if not isinstance(config, Mapping):
            raise ApiError("Config parse error: expected a mapping")
        model = config.get("model")
        if not isinstance(model, str):
            raise ApiError("Config parse error: missing field 'model'")
        try:
            return cls(
                model=model,
                processor=config.get("processor"),
                selector=config.get("selector"),
                evaluation_mode=config.get("evaluation_mode"),
                model_params=_pairs(config.get("model_params")),
                selector_params=_pairs(config.get("selector_params")),
            )
        except (TypeError, ValueError) as exc:
            raise ApiError(f"Config parse error: {exc}") from exc


_PRESET_BUILDERS = {
    "basic_classification": director.build_basic_classification,
    "basic_regression": director.build_basic_regression,
    "knn_classifier": lambda model: director.build_knn_classifier(5),
    "decision_tree": lambda model: director.build_decision_tree_classifier(),
}

_NO_PIPELINE = "Pipeline has not been built"
_NO_DATA = "Data has not been loaded"


class PipelineSession:
    """Holds one pipeline and the data loaded for it."""

    def __init__(self) -> None:
        self._pipeline: MLPipeline | None = None
        self._data: tuple[np.ndarray, np.ndarray] | None = None

    def _require_pipeline(self) -> MLPipeline:
        if self._pipeline is None:
            raise ApiError(_NO_PIPELINE)
        return self._pipeline

    def _require_data(self) -> tuple[np.ndarray, np.ndarray]:
        if self._data is None:
            raise ApiError(_NO_DATA)
        return self._data

    def build_from_config(self, config: Mapping[str, Any] | PipelineConfig) -> PipelineInfo:
        """Build a pipeline from a configuration and make it the current one."""
        if not isinstance(config, PipelineConfig):
            config = PipelineConfig.from_mapping(config)
        builder = MLPipelineBuilder().model(config.model)
        if config.processor is not None:
            builder.processor(config.processor)
        if config.selector is not None:
            builder.feature_selector(config.selector)
        if config.evaluation_mode is not None:
            builder.evaluation_mode(config.evaluation_mode)
        for key, value in config.model_params:
            builder.model_param(key, value)
        for key, value in config.selector_params:
            builder.selector_param(key, value)
        try:
            pipeline = builder.build()
        except ValueError as exc:
            raise ApiError(str(exc)) from exc
        self._pipeline = pipeline
        return pipeline.info()

    def build_from_preset(self, preset_name: str, model: str) -> PipelineInfo:
        """Build one of the prepared pipelines and make it the current one."""
        try:
            build = _PRESET_BUILDERS[preset_name]
        except KeyError:
            raise ApiError(f"Unknown preset: {preset_name}") from None
        try:
            pipeline = build(model)
        except ValueError as exc:
            raise ApiError(str(exc)) from exc
        self._pipeline = pipeline
        return pipeline.info()

    def load_data(self, data: str, target_column: str, format: str) -> LoadResult:
        """Parse ``data`` in ``format`` and keep its features and targets."""
        try:
            loaded = create_loader(format).load_from_string(data, target_column)
        except ValueError as exc:
            raise ApiError(str(exc)) from exc
        samples = loaded.num_samples()
        self._data = (loaded.x_data, loaded.y_data)
        return LoadResult(True, samples, f"Loaded {samples} samples")

    def train(self) -> TrainingResult:
        """Train the current pipeline on all loaded data."""
        pipeline = self._require_pipeline()
        x_data, y_data = self._require_data()
        samples = int(x_data.shape[0])
        try:
            pipeline.train(x_data.copy(), y_data.copy())
        except ValueError as exc:
            raise ApiError(str(exc)) from exc
        return TrainingResult(
            True, f"Model trained successfully on {samples} samples", samples
        )

    def predict(self, input: Sequence[float]) -> list[float]:
        """Predict for one row of features."""
        pipeline = self._require_pipeline()
        try:
            row = [float(value) for value in input]
        except (TypeError, ValueError) as exc:
            raise ApiError(f"Input parse error: {exc}") from exc
        try:
            return pipeline.predict(row)
        except ValueError as exc:
            raise ApiError(str(exc)) from exc

    def evaluate(self, train_ratio: float) -> EvaluationReport:
        """Train a copy of the pipeline on the leading share of the data and
        evaluate it on the rest; the current pipeline is left untouched."""
        pipeline = self._require_pipeline()
        x_data, y_data = self._require_data()
        total = int(x_data.shape[0])
        scaled = total * float(train_ratio)
        train_size = 0 if math.isnan(scaled) else min(max(int(scaled), 0), total)
        trial = copy.deepcopy(pipeline)
        try:
            return trial.train_and_evaluate(
                x_data[:train_size],
                y_data[:train_size],
                x_data[train_size:],
                y_data[train_size:],
            )
        except ValueError as exc:
            raise ApiError(str(exc)) from exc

    def info(self) -> PipelineInfo:
        return self._require_pipeline().info()


class DataLoaderSession:
    """Wraps one data loader chosen by format name or by content."""

    def __init__(self, format: str) -> None:
        try:
            self._loader: DataLoader = create_loader(format)
        except ValueError as exc:
            raise ApiError(str(exc)) from exc
        self.format = format

    @classmethod
    def create_auto(cls, data: str) -> DataLoaderSession:
        """Pick the loader by looking at ``data``; the format is the loader's name."""
        try:
            loader = create_loader_auto(data)
        except ValueError as exc:
            raise ApiError(str(exc)) from exc
        session = cls.__new__(cls)
        session._loader = loader
        session.format = loader.name
        return session

    def available_columns(self, data: str) -> list[str]:
        try:
            return self._loader.get_available_columns(data)
        except ValueError as exc:
            raise ApiError(str(exc)) from exc

    def validate_format(self, data: str) -> None:
        try:
            self._loader.validate_format(data)
        except ValueError as exc:
            raise ApiError(str(exc)) from exc

    def load_data(self, data: str, target_column: str) -> LoadedDataInfo:
        try:
            loaded = self._loader.load_from_string(data, target_column)
        except ValueError as exc:
            raise ApiError(str(exc)) from exc
        return LoadedDataInfo(
            num_samples=loaded.num_samples(),
            num_features=loaded.num_features(),
            feature_names=list(loaded.headers),
            target_column=target_column,
        )


def available_options() -> AvailableOptions:
    """List every model, processor, selector, data format and preset."""
    return AvailableOptions(
        models=[
            ModelOption(
                name,
                model_description(name) or "",
                model_kind(name) or "unknown",
            )
            for name in available_models()
        ],
        processors=[
            ProcessorOption(name, processor_description(name) or "")
            for name in available_processors()
        ],
        selectors=[
            SelectorOption(
                name,
                selector_description(name) or "",
                selector_supported_types(name),
            )
            for name in available_selectors()
        ],
        data_formats=[
            FormatOption(name, format_description(name) or "")
            for name in available_formats()
        ],
        presets=director.available_presets(),
    )


def compatible_processors(model_name: str) -> list[str]:
    return CompatibilityRegistry.instance().compatible_processors(model_name)


def compatible_selectors(model_name: str) -> list[str]:
    return CompatibilityRegistry.instance().compatible_selectors(model_name)