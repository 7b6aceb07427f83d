"""
Analysis methods registry and factory.
"""

from .autoencoder import AutoencoderDetector
from .base import AnalysisMethod, DetectionResult, ForecastResult
from .mlp_forecast import MLPForecaster

# Registry of available methods
METHOD_REGISTRY = {
    "mlp_forecast": MLPForecaster,
    "autoencoder": AutoencoderDetector,
}


def get_method(method_name: str, config: dict) -> AnalysisMethod:
    """Factory to create an analysis method

    Args:
        method_name: Name of the method (e.g., 'mlp_forecast')
        config: Configuration dict for the method

    Returns:
        Instance of the method

    Raises:
        ValueError: If method_name is not registered
    """
    if method_name not in METHOD_REGISTRY:
        available = ", ".join(METHOD_REGISTRY.keys())
        raise ValueError(f"Unknown method '{method_name}'. Available methods: {available}")

    method_class = METHOD_REGISTRY[method_name]
    return method_class(config)


def list_methods() -> list[str]:
    """List all available analysis methods"""
    return list(METHOD_REGISTRY.keys())


__all__ = [
    "AnalysisMethod",
    "AutoencoderDetector",
    "DetectionResult",
    "ForecastResult",
    "MLPForecaster",
    "get_method",
    "list_methods",
]
