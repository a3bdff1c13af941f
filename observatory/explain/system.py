"""
Explainability System - Why Did the Platform Just Do That?
==========================================================

Keeps three pieces of long-lived state for a research session:

    pattern_registry     recurring cross-domain characteristics
    causal_graph         "X contributes to Y" relations, append-only
    explanation_history  bounded ring of generated explanations

Each cycle the driver hands over the orchestrator's analysis results,
interaction strengths and the metrics summary. Detectors turn those into
patterns; generate_explanation then walks the causal graph from the
patterns and variables nearest to the observed state change, keeps the
strongest path as the causal chain and reports the rest as alternatives.

Usage:
    from observatory.explain import create_explainability_system

    system = create_explainability_system(history_size=500)
    system.detect_patterns("research", analysis, strengths, summary)
    explanation = system.generate_explanation(before, after, domain="research")
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.config import ExplainabilityConfig
from ..core.ring_buffer import RingBuffer
from .capabilities import (
    DetectionInput,
    EvidenceConfidenceEstimator,
    ExplanationModel,
    default_model,
)
from .causal_graph import CausalGraph
from .schemas import CrossDomainPattern, Explanation, ExplanationContext

logger = logging.getLogger(__name__)

MAX_ABSTRACTION_LEVEL = 5


class ExplainabilitySystem:
    """Pattern registry, causal graph and explanation synthesis."""

    def __init__(self, config: Optional[ExplainabilityConfig] = None):
        self.config = config or ExplainabilityConfig()

        self.explanation_history: RingBuffer[Explanation] = RingBuffer(self.config.history_size)
        self.active_models: Dict[str, ExplanationModel] = {}
        self.pattern_registry: Dict[str, CrossDomainPattern] = {}
        self.confidence_thresholds: Dict[str, float] = dict(self.config.confidence_thresholds)
        self.causal_graph = CausalGraph()

        self._default_model = default_model()

        logger.info(
            "ExplainabilitySystem initialized (history=%d)", self.explanation_history.capacity
        )

    # =========================================================================
    # MODELS
    # =========================================================================

    def register_model(self, domain: str, model: ExplanationModel) -> None:
        self.active_models[domain] = model
        logger.info("Registered explanation model for domain %s", domain)

    def model_for(self, domain: str) -> ExplanationModel:
        return self.active_models.get(domain, self._default_model)

    def set_confidence_threshold(self, kind: str, threshold: float) -> None:
        self.confidence_thresholds[kind] = threshold

    # =========================================================================
    # PATTERNS
    # =========================================================================

    def _passes_threshold(self, pattern: CrossDomainPattern) -> bool:
        threshold = self.confidence_thresholds.get(pattern.kind)
        return threshold is None or pattern.confidence >= threshold

    def register_pattern(self, pattern: CrossDomainPattern) -> bool:
        """
        Upsert a detected pattern.

        Patterns below their kind's threshold are dropped. A repeated id
        updates the existing entry in place.

        Returns:
            True if the pattern was stored or updated
        """
        if not self._passes_threshold(pattern):
            logger.debug(
                "Pattern %s below threshold (%.3f < %.3f)",
                pattern.id, pattern.confidence, self.confidence_thresholds[pattern.kind],
            )
            return False

        existing = self.pattern_registry.get(pattern.id)
        if existing is not None:
            existing.absorb(pattern)
        else:
            self.pattern_registry[pattern.id] = pattern.model_copy(deep=True)
            self.causal_graph.add_node(pattern.id)
            logger.info("New pattern %s (%s, confidence=%.2f)", pattern.id, pattern.kind, pattern.confidence)
        return True

    def detect_patterns(
        self,
        domain: str,
        analysis_results: Optional[Dict[str, Any]] = None,
        interaction_strengths: Optional[Dict[Tuple[str, str], float]] = None,
        metrics_summary: Optional[Dict[str, Dict[str, float]]] = None,
    ) -> List[CrossDomainPattern]:
        """
        Run the domain's detectors in order and register what they find.

        Returns:
            The registry entries for every accepted detection
        """
        observation = DetectionInput(
            domain=domain,
            analysis_results=analysis_results or {},
            interaction_strengths=interaction_strengths or {},
            metrics_summary=metrics_summary or {},
        )

        accepted = []
        for detector in self.model_for(domain).pattern_detectors:
            for pattern in detector.detect(observation):
                if self.register_pattern(pattern):
                    accepted.append(self.pattern_registry[pattern.id])
        return accepted

    def relevant_patterns(self, domain: str) -> List[CrossDomainPattern]:
        """Registered patterns touching a domain, most confident first."""
        patterns = [
            p for p in self.pattern_registry.values()
            if domain in p.domains and self._passes_threshold(p)
        ]
        return sorted(patterns, key=lambda p: p.confidence, reverse=True)

    # =========================================================================
    # CAUSAL GRAPH
    # =========================================================================

    def register_causal_chain(self, chain: Sequence[str]) -> int:
        """Record an established chain. Returns the number of new edges."""
        return self.causal_graph.add_chain(list(chain))

    def _node_confidence(self, node_id: str) -> float:
        pattern = self.pattern_registry.get(node_id)
        if pattern is not None:
            return pattern.confidence
        return self.config.default_node_confidence

    def _chain_strength(self, chain: Sequence[str]) -> float:
        return sum(self._node_confidence(n) for n in chain)

    def _start_nodes(self, context: ExplanationContext) -> List[str]:
        candidates = [p.id for p in context.active_patterns]
        changes = context.state_changes()
        candidates += sorted(changes, key=lambda k: abs(changes[k]), reverse=True)

        starts = []
        for node_id in candidates:
            if node_id in self.causal_graph and node_id not in starts:
                starts.append(node_id)
        return starts

    def trace_causes(self, context: ExplanationContext) -> Tuple[List[str], List[Tuple[List[str], float]]]:
        """
        Walk outgoing edges from the nodes nearest the observed change.

        Returns:
            (primary chain, [(alternative chain, strength), ...]) with
            alternatives ordered strongest first
        """
        candidates: List[Tuple[List[str], float]] = []
        seen = set()
        for start in self._start_nodes(context):
            for path in self.causal_graph.paths_from(
                start,
                max_depth=self.config.max_chain_depth,
                max_paths=self.config.max_paths,
            ):
                key = tuple(path)
                if key in seen:
                    continue
                seen.add(key)
                candidates.append((path, self._chain_strength(path)))

        if not candidates:
            return [], []

        # Stable sort keeps discovery order between equal strengths
        candidates.sort(key=lambda c: c[1], reverse=True)
        primary = candidates[0][0]
        return primary, candidates[1:1 + self.config.max_alternatives]

    # =========================================================================
    # EXPLANATIONS
    # =========================================================================

    def generate_explanation(
        self,
        state_before: Dict[str, Any],
        state_after: Dict[str, Any],
        domain: str = "research",
        analysis_results: Optional[Dict[str, Any]] = None,
        metrics_summary: Optional[Dict[str, Dict[str, float]]] = None,
        active_patterns: Optional[List[CrossDomainPattern]] = None,
        evidence: Optional[Iterable[Dict[str, Any]]] = None,
        timestamp: Optional[float] = None,
    ) -> Explanation:
        """
        Synthesize an explanation for a before/after state pair.

        Args:
            state_before: Variables before the change
            state_after: Variables after the change
            domain: Domain tag selecting the explanation model
            analysis_results: Latest orchestrator analysis
            metrics_summary: Latest metrics summary
            active_patterns: Patterns to use instead of the registry's
            evidence: Extra evidence entries (e.g. recalled episodes)
            timestamp: Context timestamp (defaults to now)

        Returns:
            The explanation, also appended to explanation_history
        """
        model = self.model_for(domain)
        patterns = active_patterns if active_patterns is not None else self.relevant_patterns(domain)

        context = ExplanationContext(
            timestamp=time.time() if timestamp is None else timestamp,
            domain=domain,
            state_before=dict(state_before),
            state_after=dict(state_after),
            # Snapshot so later re-detections do not rewrite history
            active_patterns=[p.model_copy(deep=True) for p in patterns],
        )

        for analyzer in model.causal_analyzers:
            for chain in analyzer.analyze(context):
                self.register_causal_chain(chain)

        primary, alternatives = self.trace_causes(context)
        context.causal_chain = primary

        collected = self._collect_evidence(context, analysis_results, metrics_summary, evidence)

        explanation = Explanation(
            context=context,
            description=self._describe(context),
            confidence=self._estimate_confidence(model, context, collected),
            evidence=collected,
            alternative_explanations=[
                f"{' -> '.join(chain)} (strength {strength:.2f})"
                for chain, strength in alternatives
            ],
            abstraction_level=self._abstraction_level(model, context),
        )

        self.explanation_history.push(explanation)
        logger.debug(
            "Explanation %s: chain=%d alternatives=%d confidence=%.3f",
            explanation.id, len(primary), len(alternatives), explanation.confidence,
        )
        return explanation

    def _collect_evidence(
        self,
        context: ExplanationContext,
        analysis_results: Optional[Dict[str, Any]],
        metrics_summary: Optional[Dict[str, Dict[str, float]]],
        extra: Optional[Iterable[Dict[str, Any]]],
    ) -> List[Dict[str, Any]]:
        evidence: List[Dict[str, Any]] = []

        for key, delta in context.state_changes().items():
            evidence.append({
                "type": "state_change",
                "variable": key,
                "before": context.state_before[key],
                "after": context.state_after[key],
                "delta": delta,
            })

        variables = set(context.state_after)
        for pattern in context.active_patterns:
            variables.update(pattern.variables)
            evidence.append({
                "type": "pattern_match",
                "pattern": pattern.id,
                "kind": pattern.kind,
                "confidence": pattern.confidence,
                "domains": sorted(pattern.domains),
            })

        for cause, effect in zip(context.causal_chain, context.causal_chain[1:]):
            evidence.append({"type": "causal_relation", "cause": cause, "effect": effect})

        for section, values in (analysis_results or {}).items():
            evidence.append({**values, "type": "analysis", "section": section})

        for name, stats in (metrics_summary or {}).items():
            if name in variables:
                evidence.append({**stats, "type": "metric", "name": name})

        for item in extra or ():
            entry = dict(item)
            entry.setdefault("type", "external")
            evidence.append(entry)

        return evidence

    def _describe(self, context: ExplanationContext) -> str:
        changes = context.state_changes()
        if not context.causal_chain and not context.active_patterns:
            if not changes:
                return f"No change observed in domain '{context.domain}'."
            return f"No clear explanation found for the observed changes in domain '{context.domain}'."

        lines = [f"System behavior analysis for domain '{context.domain}':"]

        for pattern in context.active_patterns[:3]:
            lines.append(
                f"- {pattern.kind} pattern {pattern.id} "
                f"(confidence {pattern.confidence:.2f}) across {', '.join(sorted(pattern.domains))}"
            )

        if context.causal_chain:
            lines.append(f"Causal chain: {' -> '.join(context.causal_chain)}")

        if changes:
            key = max(changes, key=lambda k: abs(changes[k]))
            lines.append(f"Largest change: {key} {changes[key]:+.3f}")

        return "\n".join(lines)

    def _estimate_confidence(
        self,
        model: ExplanationModel,
        context: ExplanationContext,
        evidence: List[Dict[str, Any]],
    ) -> float:
        estimators = model.confidence_estimators or [EvidenceConfidenceEstimator()]
        scores = [est.estimate(context, evidence) for est in estimators]
        return min(1.0, max(0.0, sum(scores) / len(scores)))

    def _abstraction_level(self, model: ExplanationModel, context: ExplanationContext) -> int:
        if not context.active_patterns:
            return 0
        level = 0
        for rule in model.abstraction_rules:
            level = rule.apply(context, level)
        return min(MAX_ABSTRACTION_LEVEL, max(0, level))

    def validate_explanation(self, explanation: Explanation) -> Dict[str, bool]:
        """Run built-in and domain validators over an explanation."""
        chain = explanation.context.causal_chain
        results = {
            "causal_consistency": all(
                self.causal_graph.has_edge(cause, effect)
                for cause, effect in zip(chain, chain[1:])
            ),
            "pattern_support": all(
                self._passes_threshold(p) for p in explanation.context.active_patterns
            ),
        }
        for validator in self.model_for(explanation.context.domain).validation_checks:
            results[validator.name] = validator.validate(explanation)
        return results

    # =========================================================================
    # RETRIEVAL
    # =========================================================================

    def latest_explanation(self) -> Optional[Explanation]:
        return self.explanation_history.newest() if self.explanation_history else None

    def recent_explanations(self, n: int = 10) -> List[Explanation]:
        return self.explanation_history.to_list()[-n:] if n > 0 else []


def create_explainability_system(
    history_size: int = 1000,
    config: Optional[ExplainabilityConfig] = None,
) -> ExplainabilitySystem:
    """Create an explainability system with empty registries and graph."""
    if config is None:
        config = ExplainabilityConfig(history_size=history_size)
    return ExplainabilitySystem(config)
