"""Shared building blocks: bounded buffers, errors and configuration."""

from .errors import ObservatoryError, ConfigurationError
from .ring_buffer import RingBuffer
from .config import (
    ObservatoryConfig,
    OrchestratorConfig,
    MetricsConfig,
    ExplainabilityConfig,
    SessionConfig,
    ComponentSpec,
    InteractionSpec,
    LawGenerationConfig,
    LoggingConfig,
    load_config,
    get_config,
    save_config,
)

__all__ = [
    "ObservatoryError",
    "ConfigurationError",
    "RingBuffer",
    "ObservatoryConfig",
    "OrchestratorConfig",
    "MetricsConfig",
    "ExplainabilityConfig",
    "SessionConfig",
    "ComponentSpec",
    "InteractionSpec",
    "LawGenerationConfig",
    "LoggingConfig",
    "load_config",
    "get_config",
    "save_config",
]
