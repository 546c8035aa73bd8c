"""A facade chaining preprocessing, feature selection, training and evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from mlforge.compatibility import CompatibilityRegistry
from mlforge.evaluation import EvaluationReport, evaluate_auto
from mlforge.feature_selection import FeatureSelector, create_selector
from mlforge.models import Model, create_model
from mlforge.processing import DataProcessor, create_processor


class PipelineError(ValueError):
    """Raised when a pipeline cannot be configured."""


@dataclass(frozen=True)
class PipelineInfo:
    """A summary of a configured pipeline."""

    model_name: str
    model_type: str
    processor: str | None
    selector: str | None
    evaluation_mode: str

    def render(self) -> str:
        """Return a multi-line, human readable description."""
        return "\n".join(
            [
                "=== ML Pipeline Info ===",
                f"Model: {self.model_name} ({self.model_type})",
                f"Processor: {self.processor or 'None'}",
                f"Feature Selector: {self.selector or 'None'}",
                f"Evaluation Mode: {self.evaluation_mode}",
                "=======================",
            ]
        )


@dataclass
class MLPipeline:
    """A model with an optional processor and feature selector in front of it."""

    model: Model
    processor: DataProcessor | None
    selector: FeatureSelector | None
    model_name: str
    evaluation_mode: str

    @staticmethod
    def builder() -> MLPipelineBuilder:
        return MLPipelineBuilder()

    def preprocess(self, data) -> np.ndarray:
        if self.processor is not None:
            return self.processor.process(data)
        return np.array(data, dtype=float)

    def select_features(self, x, y: Sequence[float]) -> np.ndarray:
        if self.selector is not None:
            return self.selector.select_features(x, y)
        return np.array(x, dtype=float)

    def prepare_data(self, x, y: Sequence[float]) -> np.ndarray:
        return self.select_features(self.preprocess(x), y)

    def train(self, x, y: Sequence[float]) -> None:
        """Preprocess and select features, then fit the model."""
        self.model.train(self.prepare_data(x, y), y)

    def predict(self, input: Sequence[float]) -> list[float]:
        """Predict for one row, passed to the model as given."""
        return self.model.predict(input)

    def evaluate(
        self, y_true: Sequence[float], y_pred: Sequence[float]
    ) -> EvaluationReport:
        return evaluate_auto(y_true, y_pred, self.model_name, self.evaluation_mode)

    def train_and_evaluate(
        self, x_train, y_train: Sequence[float], x_test, y_test: Sequence[float]
    ) -> EvaluationReport:
        """Train on the training set and evaluate predictions on the test set."""
        self.train(x_train, y_train)
        predictions: list[float] = []
        for row in np.array(x_test, dtype=float):
            predictions.extend(self.predict(row))
        return self.evaluate(y_test, predictions)

    def info(self) -> PipelineInfo:
        return PipelineInfo(
            model_name=self.model.name,
            model_type=self.model_name,
            processor=self.processor.name if self.processor is not None else None,
            selector=self.selector.name if self.selector is not None else None,
            evaluation_mode=self.evaluation_mode,
        )


class MLPipelineBuilder:
    """Collects a pipeline configuration and validates it on ``build``."""

    def __init__(self) -> None:
        self._model_type: str | None = None
        self._model_params: dict[str, str] = {}
        self._processor_type: str | None = None
        self._selector_type: str | None = None
        self._selector_params: dict[str, str] = {}
        self._evaluation_mode: str | None = None

    def model(self, model_type: str) -> MLPipelineBuilder:
        self._model_type = model_type
        return self

    def model_param(self, key: str, value: str) -> MLPipelineBuilder:
        self._model_params[key] = value
        return self

    def processor(self, processor_type: str) -> MLPipelineBuilder:
        self._processor_type = processor_type
        return self

    def feature_selector(self, selector_type: str) -> MLPipelineBuilder:
        self._selector_type = selector_type
        return self

    def selector_param(self, key: str, value: str) -> MLPipelineBuilder:
        self._selector_params[key] = value
        return self

    def evaluation_mode(self, mode: str) -> MLPipelineBuilder:
        """Set the mode explicitly; otherwise it is taken from the model type."""
        self._evaluation_mode = mode
        return self

    def build(self) -> MLPipeline:
        model_type = self._model_type
        if model_type is None:
            raise PipelineError("A model must be set")

        registry = CompatibilityRegistry.instance()
        registry.check_compatibility(
            model_type, self._processor_type, self._selector_type
        )

        model = create_model(model_type)
        for key, value in self._model_params.items():
            model.set_param(key, value)

        processor = (
            create_processor(self._processor_type)
            if self._processor_type is not None
            else None
        )

        selector = None
        if self._selector_type is not None:
            selector = create_selector(self._selector_type)
            for key, value in self._selector_params.items():
                selector.set_param(key, value)

        mode = self._evaluation_mode
        if mode is None:
            detected = registry.model_type(model_type)
            if detected is None:
                raise PipelineError("Could not determine the model type")
            if detected == "both":
                raise PipelineError(
                    "The model supports both classification and regression. "
                    "Please set evaluation_mode() explicitly"
                )
            mode = detected

        return MLPipeline(
            model=model,
            processor=processor,
            selector=selector,
            model_name=model_type,
            evaluation_mode=mode,
        )