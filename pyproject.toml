[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mlforge"
version = "0.1.0"
description = "Configurable machine-learning pipelines: data loading, preprocessing, feature selection, models and evaluation"
requires-python = ">=3.10"
dependencies = [
    "numpy",
    "scipy",
]
keywords = [
    "machine-learning",
    "pipeline",
    "feature-selection",
    "regression",
    "classification",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["mlforge"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
