"""Observatory Configuration - Settings for a research session.

Handles loading and accessing configuration for:
- Orchestrator allocation constants and history size
- Metrics buffer sizes
- Explainability thresholds and traversal limits
- Session components, resources and simulation seed
- Law file generation paths
- Logging
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class OrchestratorConfig:
    """Configuration for resource allocation and analysis."""

    history_size: int = 1000
    distance_floor: float = 0.01      # floor on squared health distance
    default_mass: float = 1.0
    default_health: float = 0.5


@dataclass
class MetricsConfig:
    """Configuration for the metrics collector."""

    buffer_size: int = 1000


@dataclass
class ExplainabilityConfig:
    """Configuration for pattern registration and explanation synthesis."""

    history_size: int = 1000
    confidence_thresholds: Dict[str, float] = field(default_factory=dict)
    max_chain_depth: int = 16
    max_paths: int = 32
    default_node_confidence: float = 0.5
    max_alternatives: int = 5


@dataclass
class ComponentSpec:
    """A component the session starts with."""

    id: str
    mass: float = 1.0
    health: float = 0.5
    target: float = 0.8


@dataclass
class InteractionSpec:
    """A directed influence between two components."""

    source: str
    target: str
    strength: float = 0.5


@dataclass
class SessionConfig:
    """Configuration for the research session driver."""

    domain: str = "research"
    components: List[ComponentSpec] = field(default_factory=lambda: [
        ComponentSpec("scanner", mass=1.0, health=0.6, target=0.8),
        ComponentSpec("processor", mass=2.0, health=0.4, target=0.8),
        ComponentSpec("researcher", mass=1.5, health=0.7, target=0.9),
    ])
    resources: Dict[str, float] = field(default_factory=lambda: {
        "compute": 100.0,
        "memory": 64.0,
    })
    interactions: List[InteractionSpec] = field(default_factory=lambda: [
        InteractionSpec("scanner", "processor", 0.8),
        InteractionSpec("processor", "researcher", 0.6),
        InteractionSpec("researcher", "scanner", 0.3),
    ])
    seed: Optional[int] = 42
    adaptation_rate: float = 0.1
    noise_scale: float = 0.02


@dataclass
class LawGenerationConfig:
    """Configuration for discovered law file generation."""

    base_path: str = "generated_laws"
    template_path: Optional[str] = None


@dataclass
class LoggingConfig:
    """Configuration for log output."""

    level: str = "INFO"
    format: str = "%(asctime)s %(name)s %(levelname)s %(message)s"


@dataclass
class ObservatoryConfig:
    """Complete observatory configuration."""

    orchestrator: OrchestratorConfig = field(default_factory=OrchestratorConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)
    explainability: ExplainabilityConfig = field(default_factory=ExplainabilityConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    laws: LawGenerationConfig = field(default_factory=LawGenerationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def get_law_base_path(self) -> Path:
        """Get expanded law output directory."""
        return Path(os.path.expanduser(self.laws.base_path))

    def validate(self) -> None:
        """Raise ConfigurationError on values no component can run with."""
        for name, size in (
            ("orchestrator.history_size", self.orchestrator.history_size),
            ("metrics.buffer_size", self.metrics.buffer_size),
            ("explainability.history_size", self.explainability.history_size),
        ):
            if size <= 0:
                raise ConfigurationError(f"{name} must be positive, got {size}")
        if self.orchestrator.distance_floor <= 0:
            raise ConfigurationError("orchestrator.distance_floor must be positive")
        for pool, amount in self.session.resources.items():
            if amount < 0:
                raise ConfigurationError(f"resource {pool!r} is negative: {amount}")
        for comp in self.session.components:
            if comp.mass < 0:
                raise ConfigurationError(f"component {comp.id!r} has negative mass")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "orchestrator": {
                "history_size": self.orchestrator.history_size,
                "distance_floor": self.orchestrator.distance_floor,
                "default_mass": self.orchestrator.default_mass,
                "default_health": self.orchestrator.default_health,
            },
            "metrics": {
                "buffer_size": self.metrics.buffer_size,
            },
            "explainability": {
                "history_size": self.explainability.history_size,
                "confidence_thresholds": dict(self.explainability.confidence_thresholds),
                "max_chain_depth": self.explainability.max_chain_depth,
                "max_paths": self.explainability.max_paths,
                "default_node_confidence": self.explainability.default_node_confidence,
                "max_alternatives": self.explainability.max_alternatives,
            },
            "session": {
                "domain": self.session.domain,
                "components": [
                    {"id": c.id, "mass": c.mass, "health": c.health, "target": c.target}
                    for c in self.session.components
                ],
                "resources": dict(self.session.resources),
                "interactions": [
                    {"source": i.source, "target": i.target, "strength": i.strength}
                    for i in self.session.interactions
                ],
                "seed": self.session.seed,
                "adaptation_rate": self.session.adaptation_rate,
                "noise_scale": self.session.noise_scale,
            },
            "laws": {
                "base_path": self.laws.base_path,
                "template_path": self.laws.template_path,
            },
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ObservatoryConfig":
        """Create from dictionary."""
        config = cls()

        if "orchestrator" in data:
            orch = data["orchestrator"]
            config.orchestrator = OrchestratorConfig(
                history_size=orch.get("history_size", 1000),
                distance_floor=orch.get("distance_floor", 0.01),
                default_mass=orch.get("default_mass", 1.0),
                default_health=orch.get("default_health", 0.5),
            )

        if "metrics" in data:
            config.metrics = MetricsConfig(
                buffer_size=data["metrics"].get("buffer_size", 1000),
            )

        if "explainability" in data:
            exp = data["explainability"]
            config.explainability = ExplainabilityConfig(
                history_size=exp.get("history_size", 1000),
                confidence_thresholds=dict(exp.get("confidence_thresholds") or {}),
                max_chain_depth=exp.get("max_chain_depth", 16),
                max_paths=exp.get("max_paths", 32),
                default_node_confidence=exp.get("default_node_confidence", 0.5),
                max_alternatives=exp.get("max_alternatives", 5),
            )

        if "session" in data:
            sess = data["session"]
            defaults = SessionConfig()
            components = defaults.components
            if "components" in sess:
                components = [
                    ComponentSpec(
                        id=c["id"],
                        mass=c.get("mass", 1.0),
                        health=c.get("health", 0.5),
                        target=c.get("target", 0.8),
                    )
                    for c in sess["components"]
                ]
            interactions = defaults.interactions
            if "interactions" in sess:
                interactions = [
                    InteractionSpec(
                        source=i["source"],
                        target=i["target"],
                        strength=i.get("strength", 0.5),
                    )
                    for i in sess["interactions"] or []
                ]
            config.session = SessionConfig(
                domain=sess.get("domain", defaults.domain),
                components=components,
                resources=dict(sess.get("resources", defaults.resources)),
                interactions=interactions,
                seed=sess.get("seed", defaults.seed),
                adaptation_rate=sess.get("adaptation_rate", defaults.adaptation_rate),
                noise_scale=sess.get("noise_scale", defaults.noise_scale),
            )

        if "laws" in data:
            laws = data["laws"]
            config.laws = LawGenerationConfig(
                base_path=laws.get("base_path", config.laws.base_path),
                template_path=laws.get("template_path"),
            )

        if "logging" in data:
            log_data = data["logging"]
            config.logging = LoggingConfig(
                level=log_data.get("level", "INFO"),
                format=log_data.get("format", config.logging.format),
            )

        return config


# =============================================================================
# Loading Functions
# =============================================================================

_default_config: Optional[ObservatoryConfig] = None
_config_search_paths: List[Path] = [
    Path("observatory.yaml"),
    Path("config/observatory.yaml"),
    Path.home() / ".config" / "observatory" / "observatory.yaml",
]


def load_config(path: Optional[Path] = None) -> ObservatoryConfig:
    """Load observatory configuration from file.

    Args:
        path: Explicit config path (optional)

    Returns:
        Loaded configuration, or defaults if no readable file was found
    """
    global _default_config

    config_path = path
    if not config_path:
        for search_path in _config_search_paths:
            if search_path.exists():
                config_path = search_path
                break

    if config_path and Path(config_path).exists():
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f)
            config = ObservatoryConfig.from_dict(data or {})
            logger.info(f"Loaded observatory config from {config_path}")
            _default_config = config
            return config
        except (OSError, yaml.YAMLError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")

    config = ObservatoryConfig()
    _default_config = config
    return config


def get_config() -> ObservatoryConfig:
    """Get the current configuration, loading it on first use."""
    global _default_config
    if _default_config is None:
        _default_config = load_config()
    return _default_config


def save_config(config: ObservatoryConfig, path: Optional[Path] = None) -> Path:
    """Save configuration as YAML.

    Args:
        config: Configuration to save
        path: Path to save to (defaults to ./observatory.yaml)

    Returns:
        Path written
    """
    save_path = Path(path) if path else Path("observatory.yaml")
    save_path.parent.mkdir(parents=True, exist_ok=True)

    with open(save_path, "w") as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)

    logger.info(f"Saved observatory config to {save_path}")
    return save_path
