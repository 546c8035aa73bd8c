"""Registry of which processors and selectors suit which models."""

from __future__ import annotations

import threading

_ALL_PROCESSORS = ("scaler", "binner", "onehot")


class CompatibilityError(ValueError):
    """Raised when a pipeline combines parts that do not fit together."""


class CompatibilityRegistry:
    """Knows each model's problem type and the parts that may go with it."""

    _instance: CompatibilityRegistry | None = None
    _lock = threading.Lock()

    def __init__(self) -> None:
        self._model_types: dict[str, str] = {
            "linreg": "regression",
            "logreg": "classification",
            "knn": "both",
            "tree": "both",
        }
        self._compatible_processors: dict[str, tuple[str, ...]] = {
            name: _ALL_PROCESSORS for name in self._model_types
        }
        self._compatible_selectors: dict[str, tuple[str, ...]] = {
            "regression": ("variance", "correlation", "mutual_information"),
            "classification": (
                "variance",
                "correlation",
                "chi_square",
                "information_gain",
                "mutual_information",
            ),
        }

    @classmethod
    def instance(cls) -> CompatibilityRegistry:
        """Return the shared registry, creating it on first use."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    def model_type(self, model_name: str) -> str | None:
        """Return ``regression``, ``classification`` or ``both``."""
        return self._model_types.get(model_name)

    def evaluation_type(self, model_name: str) -> str | None:
        return self.model_type(model_name)

    def is_processor_compatible(self, model_name: str, processor_name: str) -> bool:
        return processor_name in self._compatible_processors.get(model_name, ())

    def _selector_fits_type(self, model_type: str, selector_name: str) -> bool:
        return selector_name in self._compatible_selectors.get(model_type, ())

    def is_selector_compatible(self, model_name: str, selector_name: str) -> bool:
        kind = self.model_type(model_name)
        if kind is None:
            return False
        if kind == "both":
            return self._selector_fits_type(
                "regression", selector_name
            ) or self._selector_fits_type("classification", selector_name)
        return self._selector_fits_type(kind, selector_name)

    def compatible_processors(self, model_name: str) -> list[str]:
        return list(self._compatible_processors.get(model_name, ()))

    def compatible_selectors(self, model_name: str) -> list[str]:
        kind = self.model_type(model_name)
        if kind is None:
            return []
        if kind != "both":
            return list(self._compatible_selectors.get(kind, ()))
        selectors = list(self._compatible_selectors.get("regression", ()))
        for name in self._compatible_selectors.get("classification", ()):
            if name not in selectors:
                selectors.append(name)
        return selectors

    def check_compatibility(
        self, model: str, processor: str | None, selector: str | None
    ) -> None:
        """Raise CompatibilityError if the processor or selector does not suit ``model``."""
        if processor is not None and not self.is_processor_compatible(model, processor):
            raise CompatibilityError(
                f"Processor '{processor}' is not compatible with model '{model}'"
            )
        if selector is not None and not self.is_selector_compatible(model, selector):
            raise CompatibilityError(
                f"Feature selector '{selector}' is not compatible with model '{model}'"
            )