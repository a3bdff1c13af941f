"""
Explainability - patterns, causal graph and explanation synthesis.

Modules:
    schemas.py      - CrossDomainPattern, ExplanationContext, Explanation
    capabilities.py - detector / analyzer / estimator / rule / validator interfaces
    causal_graph.py - CausalGraph
    system.py       - ExplainabilitySystem
"""

from .schemas import (
    CrossDomainPattern,
    ExplanationContext,
    Explanation,
)

from .capabilities import (
    DetectionInput,
    PatternDetector,
    CausalAnalyzer,
    ConfidenceEstimator,
    AbstractionRule,
    Validator,
    ExplanationModel,
    InteractionCouplingDetector,
    PerformanceTrendDetector,
    MetricRegimeDetector,
    StateChangeAnalyzer,
    EvidenceConfidenceEstimator,
    PatternDomainRule,
    ChainLengthRule,
    StateBreadthRule,
    EvidenceCompletenessValidator,
    AbstractionRangeValidator,
    default_model,
)

from .causal_graph import CausalGraph

from .system import (
    ExplainabilitySystem,
    create_explainability_system,
)

__all__ = [
    "CrossDomainPattern",
    "ExplanationContext",
    "Explanation",
    "DetectionInput",
    "PatternDetector",
    "CausalAnalyzer",
    "ConfidenceEstimator",
    "AbstractionRule",
    "Validator",
    "ExplanationModel",
    "InteractionCouplingDetector",
    "PerformanceTrendDetector",
    "MetricRegimeDetector",
    "StateChangeAnalyzer",
    "EvidenceConfidenceEstimator",
    "PatternDomainRule",
    "ChainLengthRule",
    "StateBreadthRule",
    "EvidenceCompletenessValidator",
    "AbstractionRangeValidator",
    "default_model",
    "CausalGraph",
    "ExplainabilitySystem",
    "create_explainability_system",
]
