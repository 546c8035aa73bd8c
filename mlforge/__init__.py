"""Configurable machine-learning pipelines: data loading, preprocessing, feature selection, models, evaluation and presets."""

__version__ = "0.1.0"