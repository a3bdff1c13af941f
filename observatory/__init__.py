"""Universal Law Observatory - a self-adaptive research platform simulation.

A research session is a set of components whose health, resources and
interactions evolve over discrete cycles. Three cooperating parts:

- orchestrator: gravitational resource allocation and aggregate analysis
- metrics: bounded per-name time series and summary statistics
- explain: cross-domain patterns, causal graph and explanations

Around them:
- core: ring buffer, errors, YAML configuration
- cognitive: episodic memory used as a raw evidence source
- laws: source file generation for discovered laws
- session: the cycle driver and the `observatory` CLI
"""

from .core import (
    ObservatoryConfig,
    ObservatoryError,
    ConfigurationError,
    RingBuffer,
    load_config,
    get_config,
)

from .orchestrator import (
    Orchestrator,
    OrchestratorState,
    create_orchestrator,
)

from .metrics import (
    MetricsCollection,
    create_metrics_collector,
)

from .explain import (
    CrossDomainPattern,
    Explanation,
    ExplanationContext,
    ExplanationModel,
    ExplainabilitySystem,
    create_explainability_system,
)

from .session import (
    ResearchSession,
    CycleReport,
)

__version__ = "0.1.0"

__all__ = [
    "ObservatoryConfig",
    "ObservatoryError",
    "ConfigurationError",
    "RingBuffer",
    "load_config",
    "get_config",
    "Orchestrator",
    "OrchestratorState",
    "create_orchestrator",
    "MetricsCollection",
    "create_metrics_collector",
    "CrossDomainPattern",
    "Explanation",
    "ExplanationContext",
    "ExplanationModel",
    "ExplainabilitySystem",
    "create_explainability_system",
    "ResearchSession",
    "CycleReport",
]
