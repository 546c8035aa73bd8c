# mlforge

Small, configurable machine-learning pipelines built on NumPy and SciPy.

A pipeline chains an optional data processor, an optional feature
selector, a model and an evaluator. Components are created by name and
checked against a compatibility registry before the pipeline is built.

## Installation

```
pip install .
```

## Modules

| Module                      | What it holds                                                        |
|-----------------------------|----------------------------------------------------------------------|
| `mlforge.loading`           | `CsvDataLoader`, `JsonDataLoader`, `create_loader`, `create_loader_auto` |
| `mlforge.simple_csv`        | `CsvLoader`, a lenient CSV reader that turns bad numbers into `0.0` |
| `mlforge.processing`        | `StandardScaler`, `Binner`, `OneHotEncoder`, `create_processor`     |
| `mlforge.feature_selection` | variance, correlation, chi-square, information gain and mutual information selectors, `create_selector` |
| `mlforge.models`            | linear and logistic regression, k-nearest neighbours, decision tree, `create_model` |
| `mlforge.evaluation`        | `EvaluationReport`, `evaluate_classification`, `evaluate_regression`, `evaluate_auto` |
| `mlforge.compatibility`     | `CompatibilityRegistry`                                              |
| `mlforge.pipeline`          | `MLPipeline`, `MLPipelineBuilder`, `PipelineInfo`                    |
| `mlforge.director`          | ready-made pipeline recipes and `available_presets()`               |
| `mlforge.api`               | `PipelineSession`, `DataLoaderSession`, `available_options()`       |

## Component names

| Kind       | Names (aliases in brackets)                                                          |
|------------|--------------------------------------------------------------------------------------|
| Loaders    | `csv`, `json` (case-insensitive)                                                     |
| Processors | `scaler` (`standard_scaler`), `binner` (10 bins), `onehot` (`one_hot_encoder`)       |
| Selectors  | `variance`, `correlation`, `chi_square` (`chi2`), `information_gain` (`infogain`), `mutual_information` (`mi`) |
| Models     | `linreg` (`linear_regression`), `logreg` (`logistic_regression`), `knn`, `tree` (`decision_tree`) |

Parameters are passed as text through `set_param` or the builder:

| Component            | Parameters (defaults)                         |
|----------------------|-----------------------------------------------|
| `linreg`             | `solver`: `qr` or `svd` (`qr`)                |
| `logreg`             | `alpha` (`0.0`)                               |
| `knn`                | `k` (`5`)                                     |
| `tree`               | `max_depth` (`10`), `min_samples_split` (`2`) |
| `variance`           | `threshold` (`0.0`)                           |
| `correlation`        | `threshold` (`0.95`)                          |
| `chi_square`, `information_gain` | `top_k` (`10`)                    |
| `mutual_information` | `top_k` (`10`), `k_neighbors` (`3`)           |

`knn` and `tree` are used for both classification and regression (both
predict by averaging targets), so a pipeline built on them needs an
explicit evaluation mode. Only the compatibility registry's full names
(`linreg`, `logreg`, `knn`, `tree` and the selector names without
aliases) pass the compatibility check when building a pipeline.

## Loading data

```python
from mlforge.loading import create_loader

csv_text = "a,b,target\n1,5,1.0\n2,3,2.5\n4,4,3.0\n3,1,4.5\n"
loaded = create_loader("csv").load_from_string(csv_text, "target")
print(loaded.num_samples(), loaded.num_features())  # 4 2
print(loaded.headers)                               # ['a', 'b']
```

CSV fields are trimmed and must all be numbers. A JSON source is an
array of flat objects; its columns are the keys of the first object, in
sorted order, and booleans count as `1` and `0`.
`create_loader_auto(data)` picks JSON for text that starts with `[` and
contains `{`, otherwise CSV for text with a comma or a newline.

```python
from mlforge.loading import create_loader_auto

json_text = '[{"a": 1, "target": 0}, {"a": 2, "target": 1}]'
json_data = create_loader_auto(json_text).load_from_string(json_text, "target")
```

Input that cannot be loaded raises `DataLoadError`.

## Building a pipeline

```python
from mlforge.pipeline import MLPipeline

pipeline = (
    MLPipeline.builder()
    .model("knn")
    .model_param("k", "3")
    .processor("scaler")
    .feature_selector("variance")
    .selector_param("threshold", "0.01")
    .evaluation_mode("regression")
    .build()
)
pipeline.train(loaded.x_data, loaded.y_data)
print(pipeline.predict([0.5, -0.5]))
print(pipeline.info().render())
```

`train` runs the processor and the selector over the training matrix and
fits the model on the result. `predict` hands its row to the model
unchanged, so the row must already be in the processed, selected form
the model was trained on.

`train_and_evaluate(x_train, y_train, x_test, y_test)` trains the
pipeline and returns an `EvaluationReport`. Classification reports hold
`accuracy` (on rounded labels), `precision`, `recall` and `f1_score`
(for class `1`); regression reports hold `mse`, `mae` and `r2_score`.

Bad combinations raise `CompatibilityError`, bad names or parameters
raise `ModelError` or `SelectorError`, and a missing model or
undetermined evaluation mode raises `PipelineError`. All are
`ValueError` subclasses.

## Presets

`mlforge.director` has ready-made pipelines such as
`build_basic_regression("linreg")`, `build_knn_classifier(5)`,
`build_decision_tree_classifier()` and
`build_minimal("linreg", "regression")`. `build_custom()` returns an
empty builder, and `available_presets()` lists the presets as
`PresetInfo` entries.

## Session interface

`mlforge.api.PipelineSession` keeps a pipeline and loaded data together:

```python
from mlforge.api import PipelineSession

session = PipelineSession()
session.build_from_config({"model": "linreg", "processor": "scaler"})
session.load_data(csv_text, "target", "csv")
session.train()
print(session.predict([0.5, -0.5]))
report = session.evaluate(0.75)
print(report.metrics)
```

`evaluate(train_ratio)` trains a copy of the pipeline on the leading
share of the loaded rows, in their original order, and evaluates it on
the rest; the session's own pipeline is left as it was.
`build_from_preset(name, model)` accepts `basic_classification`,
`basic_regression`, `knn_classifier` and `decision_tree`.

`DataLoaderSession("csv")` (or `DataLoaderSession.create_auto(text)`)
lists columns, validates text and reports the shape of loaded data.
`available_options()` describes every model, processor, selector, data
format and preset; `compatible_processors(model)` and
`compatible_selectors(model)` ask the registry. Session errors are
raised as `ApiError`.

## What this package does not do

It is a library only: there is no command-line tool, server or user
interface. Trained models and pipelines are kept in memory and cannot be
saved or loaded. Data is never shuffled before splitting.

## Running the tests

```
pip install .[test]
pytest
```