"""
Explanation Capabilities - Pluggable Pieces of an Explanation Model
===================================================================

An ExplanationModel bundles five ordered sets of capabilities:

    PatternDetector      observation   -> patterns
    CausalAnalyzer       context       -> causal chains
    ConfidenceEstimator  context, evidence -> confidence in [0, 1]
    AbstractionRule      context, level -> adjusted level
    Validator            explanation   -> pass / fail

Each set runs in registration order. Models are registered per domain on
the ExplainabilitySystem; domains without a model use default_model().
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .schemas import CrossDomainPattern, Explanation, ExplanationContext

logger = logging.getLogger(__name__)


@dataclass
class DetectionInput:
    """What detectors get to look at for one cycle."""
    domain: str
    analysis_results: Dict[str, Any] = field(default_factory=dict)
    interaction_strengths: Dict[Tuple[str, str], float] = field(default_factory=dict)
    metrics_summary: Dict[str, Dict[str, float]] = field(default_factory=dict)


# =============================================================================
# Interfaces
# =============================================================================

class PatternDetector(ABC):
    """Finds recurring characteristics in a cycle's observations."""

    name: str = "detector"
    kind: str = "generic"

    @abstractmethod
    def detect(self, observation: DetectionInput) -> List[CrossDomainPattern]:
        pass


class CausalAnalyzer(ABC):
    """Proposes cause -> effect chains for an explanation context."""

    name: str = "analyzer"

    @abstractmethod
    def analyze(self, context: ExplanationContext) -> List[List[str]]:
        pass


class ConfidenceEstimator(ABC):
    """Scores how much an explanation should be trusted."""

    name: str = "estimator"

    @abstractmethod
    def estimate(self, context: ExplanationContext, evidence: List[Dict[str, Any]]) -> float:
        pass


class AbstractionRule(ABC):
    """Adjusts the abstraction level of an explanation."""

    name: str = "rule"

    @abstractmethod
    def apply(self, context: ExplanationContext, level: int) -> int:
        pass


class Validator(ABC):
    """A named check over a finished explanation."""

    name: str = "validator"

    @abstractmethod
    def validate(self, explanation: Explanation) -> bool:
        pass


@dataclass
class ExplanationModel:
    """Ordered capability sets for one domain."""
    pattern_detectors: List[PatternDetector] = field(default_factory=list)
    causal_analyzers: List[CausalAnalyzer] = field(default_factory=list)
    confidence_estimators: List[ConfidenceEstimator] = field(default_factory=list)
    abstraction_rules: List[AbstractionRule] = field(default_factory=list)
    validation_checks: List[Validator] = field(default_factory=list)

    def add_detector(self, detector: PatternDetector) -> "ExplanationModel":
        self.pattern_detectors.append(detector)
        return self

    def add_analyzer(self, analyzer: CausalAnalyzer) -> "ExplanationModel":
        self.causal_analyzers.append(analyzer)
        return self

    def add_estimator(self, estimator: ConfidenceEstimator) -> "ExplanationModel":
        self.confidence_estimators.append(estimator)
        return self

    def add_rule(self, rule: AbstractionRule) -> "ExplanationModel":
        self.abstraction_rules.append(rule)
        return self

    def add_validator(self, validator: Validator) -> "ExplanationModel":
        self.validation_checks.append(validator)
        return self


# =============================================================================
# Detectors
# =============================================================================

class InteractionCouplingDetector(PatternDetector):
    """
    Strong directed couplings between components.

    Every pair at or above the mean interaction strength becomes a pattern;
    confidence is the strength relative to the strongest pair.
    """

    name = "interaction_coupling"
    kind = "coupling"

    def detect(self, observation: DetectionInput) -> List[CrossDomainPattern]:
        strengths = {
            pair: s for pair, s in observation.interaction_strengths.items() if math.isfinite(s)
        }
        if not strengths:
            return []

        peak = max(abs(s) for s in strengths.values())
        if peak == 0:
            return []
        mean = sum(strengths.values()) / len(strengths)

        patterns = []
        for (source, target), strength in strengths.items():
            if strength <= 0 or strength < mean:
                continue
            patterns.append(CrossDomainPattern(
                id=f"coupling:{source}->{target}",
                kind=self.kind,
                domains={observation.domain, source, target},
                characteristics={
                    "source": source,
                    "target": target,
                    "strength": strength,
                    "variables": [f"health.{source}", f"health.{target}"],
                },
                confidence=min(1.0, strength / peak),
                support={source: strength, target: strength},
            ))
        return patterns


class PerformanceTrendDetector(PatternDetector):
    """Sustained rise or fall of overall performance."""

    name = "performance_trend"
    kind = "trend"

    def __init__(self, min_trend: float = 0.01):
        self.min_trend = min_trend

    def detect(self, observation: DetectionInput) -> List[CrossDomainPattern]:
        perf = observation.analysis_results.get("performance_analysis")
        if not perf:
            return []

        trend = perf.get("trend", 0.0)
        mean = perf.get("mean_performance", 0.0)
        if not (math.isfinite(trend) and math.isfinite(mean)) or abs(trend) < self.min_trend:
            return []

        direction = "up" if trend > 0 else "down"
        confidence = min(1.0, abs(trend) / max(abs(mean), 1e-6))

        return [CrossDomainPattern(
            id=f"performance_trend:{direction}",
            kind=self.kind,
            domains={observation.domain},
            characteristics={
                "direction": direction,
                "trend": trend,
                "mean_performance": mean,
                "variables": ["performance.overall"],
            },
            confidence=confidence,
            support={observation.domain: abs(trend)},
        )]


class MetricRegimeDetector(PatternDetector):
    """
    The same quantity holding steady in several domains at once.

    Metric names follow "<quantity>.<domain>". A quantity whose coefficient
    of variation stays under cv_threshold in at least min_domains domains is
    a cross-domain stability pattern.
    """

    name = "metric_regime"
    kind = "stability"

    def __init__(self, cv_threshold: float = 0.1, min_domains: int = 2):
        self.cv_threshold = cv_threshold
        self.min_domains = min_domains

    @staticmethod
    def _split(name: str) -> Tuple[str, str]:
        quantity, _, domain = name.partition(".")
        return quantity, domain or quantity

    @staticmethod
    def _cv(stats: Dict[str, float]) -> float:
        mean, std = stats.get("mean", 0.0), stats.get("std", 0.0)
        if not (math.isfinite(mean) and math.isfinite(std)):
            return math.inf
        if mean == 0:
            return 0.0 if std == 0 else math.inf
        return std / abs(mean)

    def detect(self, observation: DetectionInput) -> List[CrossDomainPattern]:
        stable: Dict[str, Dict[str, float]] = defaultdict(dict)
        names: Dict[str, List[str]] = defaultdict(list)

        for name, stats in observation.metrics_summary.items():
            cv = self._cv(stats)
            if cv >= self.cv_threshold:
                continue
            quantity, domain = self._split(name)
            stable[quantity][domain] = 1.0 - cv / self.cv_threshold
            names[quantity].append(name)

        patterns = []
        for quantity, support in stable.items():
            if len(support) < self.min_domains:
                continue
            patterns.append(CrossDomainPattern(
                id=f"stability:{quantity}",
                kind=self.kind,
                domains=set(support) | {observation.domain},
                characteristics={
                    "quantity": quantity,
                    "cv_threshold": self.cv_threshold,
                    "variables": names[quantity],
                },
                confidence=sum(support.values()) / len(support),
                support=dict(support),
            ))
        return patterns


# =============================================================================
# Causal analyzers
# =============================================================================

class StateChangeAnalyzer(CausalAnalyzer):
    """
    Links each changed variable to the most confident pattern that explains it.

    A pattern explains a change when the variable is one of its declared
    variables, or when one of its "features" is within tolerance of the delta.
    Chains come out ordered by change magnitude, largest first.
    """

    name = "state_change"

    def __init__(self, tolerance: float = 0.1):
        self.tolerance = tolerance

    def _explains(self, pattern: CrossDomainPattern, key: str, change: float) -> bool:
        if key in pattern.variables:
            return True
        features = pattern.characteristics.get("features", [])
        return any(abs(f - change) < self.tolerance for f in features)

    def analyze(self, context: ExplanationContext) -> List[List[str]]:
        changes = context.state_changes()
        chains = []
        for key, change in sorted(changes.items(), key=lambda kv: abs(kv[1]), reverse=True):
            candidates = [p for p in context.active_patterns if self._explains(p, key, change)]
            if not candidates:
                continue
            best = max(candidates, key=lambda p: p.confidence)
            chains.append([best.id, key])
        return chains


# =============================================================================
# Confidence estimators
# =============================================================================

class EvidenceConfidenceEstimator(ConfidenceEstimator):
    """
    p · (0.5 + 0.5 · tanh(n / scale))

    p is the mean confidence of the active patterns (0 without patterns) and
    n the evidence count; non-decreasing in both.
    """

    name = "evidence"

    def __init__(self, scale: float = 10.0):
        self.scale = scale

    def estimate(self, context: ExplanationContext, evidence: List[Dict[str, Any]]) -> float:
        patterns = context.active_patterns
        if not patterns:
            return 0.0
        p = sum(pat.confidence for pat in patterns) / len(patterns)
        return p * (0.5 + 0.5 * math.tanh(len(evidence) / self.scale))


# =============================================================================
# Abstraction rules
# =============================================================================

class PatternDomainRule(AbstractionRule):
    """Each distinct domain spanned by the active patterns adds a level."""

    name = "pattern_domains"

    def apply(self, context: ExplanationContext, level: int) -> int:
        if not context.active_patterns:
            return level
        domains = set()
        for pattern in context.active_patterns:
            domains |= pattern.domains
        return level + len(domains)


class ChainLengthRule(AbstractionRule):
    name = "chain_length"

    def __init__(self, threshold: int = 5):
        self.threshold = threshold

    def apply(self, context: ExplanationContext, level: int) -> int:
        return level + 1 if len(context.causal_chain) > self.threshold else level


class StateBreadthRule(AbstractionRule):
    name = "state_breadth"

    def __init__(self, threshold: int = 10):
        self.threshold = threshold

    def apply(self, context: ExplanationContext, level: int) -> int:
        return level + 1 if len(context.state_after) > self.threshold else level


# =============================================================================
# Validators
# =============================================================================

class EvidenceCompletenessValidator(Validator):
    """Every state change must be backed by a state_change evidence entry."""

    name = "evidence_completeness"

    def validate(self, explanation: Explanation) -> bool:
        recorded = {
            e.get("variable") for e in explanation.evidence
            if e.get("type") == "state_change"
        }
        return set(explanation.context.state_changes()) <= recorded


class AbstractionRangeValidator(Validator):
    name = "abstraction_appropriate"

    def __init__(self, low: int = 0, high: int = 5):
        self.low = low
        self.high = high

    def validate(self, explanation: Explanation) -> bool:
        return self.low <= explanation.abstraction_level <= self.high


def default_model() -> ExplanationModel:
    """Model used for domains that have none registered."""
    return ExplanationModel(
        pattern_detectors=[
            InteractionCouplingDetector(),
            PerformanceTrendDetector(),
            MetricRegimeDetector(),
        ],
        causal_analyzers=[StateChangeAnalyzer()],
        confidence_estimators=[EvidenceConfidenceEstimator()],
        abstraction_rules=[PatternDomainRule(), ChainLengthRule(), StateBreadthRule()],
        validation_checks=[EvidenceCompletenessValidator(), AbstractionRangeValidator()],
    )
