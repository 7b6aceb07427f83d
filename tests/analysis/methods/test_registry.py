"""
Tests for the analysis method registry.
"""

import pytest

from src.analysis.methods import (
    METHOD_REGISTRY,
    AnalysisMethod,
    AutoencoderDetector,
    MLPForecaster,
    get_method,
    list_methods,
)


class TestMethodRegistry:
    """Tests for get_method and list_methods."""

    def test_list_methods(self):
        assert list_methods() == ["mlp_forecast", "autoencoder"]

    @pytest.mark.parametrize(
        "name,expected_class",
        [
            ("mlp_forecast", MLPForecaster),
            ("autoencoder", AutoencoderDetector),
        ],
    )
    def test_get_method(self, name, expected_class):
        """Test that registered names build the right class."""
        method = get_method(name, {})

        assert isinstance(method, expected_class)
        assert isinstance(method, AnalysisMethod)
        assert method.name == name

    def test_get_method_passes_config(self):
        method = get_method("autoencoder", {"epochs": 5, "batch_size": 2})

        assert method.epochs == 5
        assert method.get_config()["batch_size"] == 2

    def test_unknown_method(self):
        with pytest.raises(ValueError, match="Unknown method 'prophet'"):
            get_method("prophet", {})

    def test_registry_entries_are_methods(self):
        for method_class in METHOD_REGISTRY.values():
            assert issubclass(method_class, AnalysisMethod)

    def test_repr_includes_config(self):
        assert "horizon" in repr(MLPForecaster())
