import pytest

from mlforge.evaluation import (
    EvaluationError,
    EvaluationReport,
    evaluate_auto,
    evaluate_classification,
    evaluate_regression,
)


def test_report_add_and_get_metric():
    report = EvaluationReport("m", "regression")
    report.add_metric("mse", 2.5)
    assert report.get_metric("mse") == 2.5
    assert report.get_metric("missing") is None
    assert report.metrics == {"mse": 2.5}


def test_add_metric_overwrites():
    report = EvaluationReport("m", "regression")
    report.add_metric("mae", 1.0)
    report.add_metric("mae", 3.0)
    assert report.get_metric("mae") == 3.0
    assert len(report.metrics) == 1


def test_classification_perfect_predictions():
    y = [0.0, 1.0, 1.0, 0.0, 1.0]
    report = evaluate_classification(y, y, "logreg")
    assert report.model_name == "logreg"
    assert report.evaluation_type == "classification"
    for name in ("accuracy", "precision", "recall", "f1_score"):
        assert report.get_metric(name) == pytest.approx(1.0)


def test_classification_metric_names():
    report = evaluate_classification([0, 1], [1, 1], "x")
    assert set(report.metrics) == {"accuracy", "precision", "recall", "f1_score"}


def test_classification_accuracy_partial():
    report = evaluate_classification([0, 1, 1, 0], [0, 1, 0, 0], "x")
    assert report.get_metric("accuracy") == pytest.approx(0.75)


def test_classification_accuracy_uses_rounding():
    report = evaluate_classification([0.0, 1.0], [0.2, 0.9], "x")
    assert report.get_metric("accuracy") == pytest.approx(1.0)


def test_f1_between_precision_and_recall():
    report = evaluate_classification([1, 1, 1, 0, 0], [1, 0, 0, 1, 0], "x")
    p = report.get_metric("precision")
    r = report.get_metric("recall")
    f1 = report.get_metric("f1_score")
    assert min(p, r) <= f1 <= max(p, r)
    assert 0.0 <= report.get_metric("accuracy") <= 1.0


def test_regression_perfect_predictions():
    y = [1.0, 2.0, 3.0, 4.0]
    report = evaluate_regression(y, y, "linreg")
    assert report.evaluation_type == "regression"
    assert report.get_metric("mse") == 0.0
    assert report.get_metric("mae") == 0.0
    assert report.get_metric("r2_score") == pytest.approx(1.0)


def test_regression_constant_offset():
    y_true = [1.0, 2.0, 3.0]
    y_pred = [2.0, 3.0, 4.0]
    report = evaluate_regression(y_true, y_pred, "x")
    assert report.get_metric("mae") == pytest.approx(1.0)
    assert report.get_metric("mse") == pytest.approx(1.0)
    assert report.get_metric("r2_score") < 1.0


def test_regression_mse_at_least_mae_squared():
    report = evaluate_regression([0.0, 5.0, 2.0, 7.0], [1.0, 3.0, 2.5, 9.0], "x")
    assert report.get_metric("mse") >= report.get_metric("mae") ** 2


def test_regression_empty_gives_nan():
    report = evaluate_regression([], [], "x")
    assert report.evaluation_type == "regression"
    assert report.get_metric("mse") == pytest.approx(float("nan"), nan_ok=True)


def test_length_mismatch_raises():
    with pytest.raises(EvaluationError):
        evaluate_regression([1.0, 2.0], [1.0], "x")
    with pytest.raises(EvaluationError):
        evaluate_classification([1.0], [1.0, 0.0], "x")


def test_evaluate_auto_dispatch():
    y = [0.0, 1.0, 1.0]
    assert evaluate_auto(y, y, "m", "classification").evaluation_type == "classification"
    assert evaluate_auto(y, y, "m", "regression").evaluation_type == "regression"


def test_evaluate_auto_unknown_type():
    with pytest.raises(EvaluationError, match="both"):
        evaluate_auto([1.0], [1.0], "m", "both")