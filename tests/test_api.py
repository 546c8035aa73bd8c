import pytest

from mlforge.api import (
    ApiError,
    DataLoaderSession,
    PipelineSession,
    available_options,
    compatible_processors,
    compatible_selectors,
)
from mlforge.feature_selection import InformationGainSelector
from mlforge.loading import JsonDataLoader
from mlforge.models import LinearRegressionModel, available_models, model_description
from mlforge.processing import StandardScaler

CSV = "a,b,y\n1,2,5\n2,1,4\n3,5,13\n4,3,10\n5,6,17\n"
JSON = '[{"a": 1, "y": 0}, {"a": 2, "y": 1}]'


@pytest.fixture
def session():
    s = PipelineSession()
    s.build_from_config({"model": "linreg"})
    s.load_data(CSV, "y", "csv")
    return s


def test_build_from_config_detects_regression():
    info = PipelineSession().build_from_config({"model": "linreg"})
    assert info.model_type == "linreg"
    assert info.evaluation_mode == "regression"
    assert info.model_name == LinearRegressionModel.name
    assert info.processor is None
    assert info.selector is None


def test_build_from_config_missing_model():
    with pytest.raises(ApiError):
        PipelineSession().build_from_config({"processor": "scaler"})


def test_build_from_config_both_needs_mode():
    with pytest.raises(ApiError):
        PipelineSession().build_from_config({"model": "knn"})


def test_build_from_config_bad_model_param():
    config = {
        "model": "knn",
        "evaluation_mode": "regression",
        "model_params": [("k", "abc")],
    }
    with pytest.raises(ApiError):
        PipelineSession().build_from_config(config)


def test_build_from_preset_decision_tree():
    info = PipelineSession().build_from_preset("decision_tree", "ignored")
    assert info.model_type == "tree"
    assert info.evaluation_mode == "classification"
    assert info.selector == InformationGainSelector.name


def test_build_from_preset_basic_regression():
    info = PipelineSession().build_from_preset("basic_regression", "linreg")
    assert info.processor == StandardScaler.name
    assert info.evaluation_mode == "regression"


def test_build_from_unknown_preset():
    with pytest.raises(ApiError):
        PipelineSession().build_from_preset("advanced_regression", "linreg")


def test_load_data_reports_samples():
    result = PipelineSession().load_data(CSV, "y", "csv")
    assert result.success is True
    assert result.samples == 5


def test_load_data_unknown_format():
    with pytest.raises(ApiError):
        PipelineSession().load_data(CSV, "y", "xml")


def test_train_and_predict(session):
    result = session.train()
    assert result.samples_trained == 5
    assert session.predict([6, 1]) == [pytest.approx(8.0)]


def test_predict_untrained_returns_empty():
    s = PipelineSession()
    s.build_from_config({"model": "linreg"})
    assert s.predict([1.0, 2.0]) == []


def test_predict_bad_input(session):
    session.train()
    with pytest.raises(ApiError):
        session.predict(["x", 1])


def test_train_requires_pipeline():
    s = PipelineSession()
    s.load_data(CSV, "y", "csv")
    with pytest.raises(ApiError):
        s.train()


def test_train_requires_data():
    s = PipelineSession()
    s.build_from_config({"model": "linreg"})
    with pytest.raises(ApiError):
        s.train()


def test_info_and_predict_require_pipeline():
    s = PipelineSession()
    with pytest.raises(ApiError):
        s.info()
    with pytest.raises(ApiError):
        s.predict([1.0])


def test_evaluate_split(session):
    report = session.evaluate(0.8)
    assert report.evaluation_type == "regression"
    assert report.get_metric("mse") == pytest.approx(0.0, abs=1e-9)
    # the session's own pipeline is not trained by evaluation
    assert session.predict([6, 1]) == []


def test_evaluate_requires_data():
    s = PipelineSession()
    s.build_from_config({"model": "linreg"})
    with pytest.raises(ApiError):
        s.evaluate(0.8)


def test_data_loader_session_csv():
    loader = DataLoaderSession("csv")
    assert loader.available_columns(CSV) == ["a", "b", "y"]
    info = loader.load_data(CSV, "y")
    assert info.num_samples == 5
    assert info.num_features == 2
    assert info.feature_names == ["a", "b"]
    assert info.target_column == "y"


def test_data_loader_session_validate_empty():
    with pytest.raises(ApiError):
        DataLoaderSession("csv").validate_format("")


def test_data_loader_session_unknown_format():
    with pytest.raises(ApiError):
        DataLoaderSession("xml")


def test_data_loader_session_auto_json():
    loader = DataLoaderSession.create_auto(JSON)
    assert loader.format == JsonDataLoader.name
    assert loader.load_data(JSON, "y").num_samples == 2


def test_data_loader_session_auto_undetectable():
    with pytest.raises(ApiError):
        DataLoaderSession.create_auto("abc")


def test_available_options():
    options = available_options()
    assert [m.name for m in options.models] == available_models()
    for option in options.models:
        assert option.description == model_description(option.name)
    assert "minimal" in [p.name for p in options.presets]
    chi = next(s for s in options.selectors if s.name == "chi_square")
    assert chi.supported_types == ["classification"]
    assert [f.name for f in options.data_formats] == ["csv", "json"]


def test_compatible_lists():
    assert compatible_processors("linreg") == ["scaler", "binner", "onehot"]
    assert compatible_selectors("unknown") == []
    assert "chi_square" in compatible_selectors("knn")
    assert "chi_square" not in compatible_selectors("linreg")