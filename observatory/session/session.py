"""
Research Session - One Driver, One Cycle at a Time
==================================================

Owns the orchestrator, metrics collector, explainability system and
episodic memory for one session and runs research cycles:

    state before
        → allocate_resources
        → health drifts toward homeostasis targets (scaled by allocation share)
        → performance snapshot + analyze_research_data
        → record metrics
        → store episode
        → detect patterns, register influence chains
        → generate explanation

Allocation is never written back into the resource pool; the latest
result is kept in last_allocation for the caller to act on.

Usage:
    from observatory.session import ResearchSession

    session = ResearchSession()
    reports = session.run(cycles=20)
    print(reports[-1].explanation.description)
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
from tqdm import tqdm

from ..cognitive.memory import EpisodicMemory
from ..core.config import ObservatoryConfig, get_config
from ..core.ring_buffer import RingBuffer
from ..explain.schemas import Explanation
from ..explain.system import ExplainabilitySystem
from ..metrics.collector import MetricsCollection
from ..orchestrator.orchestrator import Orchestrator

logger = logging.getLogger(__name__)


@dataclass
class CycleReport:
    """Everything one research cycle produced."""
    cycle: int
    allocation: Dict[str, float]
    analysis: Dict[str, Any]
    metrics_summary: Dict[str, Dict[str, float]]
    patterns: List[str]
    explanation: Explanation
    ts: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cycle": self.cycle,
            "allocation": self.allocation,
            "analysis": self.analysis,
            "metrics_summary": self.metrics_summary,
            "patterns": self.patterns,
            "explanation": self.explanation.model_dump(mode="json"),
            "ts": self.ts,
        }


class ResearchSession:
    """Drives research cycles over the orchestrator / metrics / explainability triad."""

    def __init__(
        self,
        config: Optional[ObservatoryConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Args:
            config: Observatory configuration (loaded config if None)
            rng: Random source for health noise and insights (seeded from config if None)
        """
        self.config = config or get_config()
        self.config.validate()
        sess = self.config.session

        self.domain = sess.domain
        self.rng = rng if rng is not None else np.random.default_rng(sess.seed)

        self.orchestrator = Orchestrator(self.config.orchestrator)
        self.metrics = MetricsCollection(self.config.metrics.buffer_size)
        self.explainability = ExplainabilitySystem(self.config.explainability)
        self.memory = EpisodicMemory(rng=self.rng, max_episodes=self.config.orchestrator.history_size)

        self.components: List[str] = []
        self.history_size = self.config.orchestrator.history_size
        self.observations: Dict[str, RingBuffer[Dict[str, Any]]] = {}
        self.last_allocation: Dict[str, float] = {}
        self.cycle = 0
        self.started_at = time.time()
        self._lock = threading.Lock()

        state = self.orchestrator.state
        for pool, amount in sess.resources.items():
            state.set_resource(pool, amount)
        for comp in sess.components:
            self.add_component(comp.id, mass=comp.mass, health=comp.health, target=comp.target)
        for link in sess.interactions:
            self.link(link.source, link.target, link.strength)

        logger.info(
            "ResearchSession ready: domain=%s components=%d resources=%.1f",
            self.domain, len(self.components), state.total_resources,
        )

    # =========================================================================
    # SETUP
    # =========================================================================

    def add_component(
        self,
        component: str,
        mass: float = 1.0,
        health: float = 0.5,
        target: Optional[float] = None,
    ) -> None:
        state = self.orchestrator.state
        state.set_mass(component, mass)
        state.set_health(component, health)
        if target is not None:
            state.set_target(component, target)
        if component not in self.components:
            self.components.append(component)

    def link(self, source: str, target: str, strength: float) -> None:
        """Record a directed influence between two components."""
        state = self.orchestrator.state
        state.link_components(source, target)
        state.set_interaction(source, target, strength)

    def _series(self, store: Dict[str, RingBuffer], domain: str) -> RingBuffer:
        series = store.get(domain)
        if series is None:
            series = RingBuffer(self.history_size)
            store[domain] = series
        return series

    def record_observation(self, domain: str, observation: Dict[str, Any]) -> None:
        """
        Store a raw observation and fold its numeric fields into research data.

        Raw observations and the per-domain series keep the newest history_size
        entries. The mean of the numeric fields is appended to
        research_metrics[domain] and becomes research_session[domain].
        """
        self._series(self.observations, domain).push(dict(observation))

        numeric = [
            float(v) for v in observation.values()
            if isinstance(v, (int, float)) and not isinstance(v, bool)
        ]
        if not numeric:
            return

        value = float(np.mean(numeric))
        state = self.orchestrator.state
        self._series(state.research_metrics, domain).push(value)
        state.research_session[domain] = value

    # =========================================================================
    # CYCLE
    # =========================================================================

    def _state_vector(self) -> Dict[str, float]:
        state = self.orchestrator.state
        vector = {f"health.{c}": state.health_of(c) for c in self.components}
        if state.performance_history:
            vector["performance.overall"] = state.snapshot_value(
                state.performance_history.newest(), "overall"
            )
        return vector

    def _adapt(self, allocation: Dict[str, float]) -> None:
        """Move each component's health toward its target, faster with more resources."""
        state = self.orchestrator.state
        n = len(allocation)
        total = sum(allocation.values())
        rate = self.config.session.adaptation_rate
        noise = self.config.session.noise_scale

        for comp, amount in allocation.items():
            share = amount / total if total > 0 else 1.0 / n
            health = state.health_of(comp)
            target = state.homeostasis_targets.get(comp, health)
            drift = rate * share * n * (target - health)
            state.set_health(comp, health + drift + noise * self.rng.normal())

    def run_cycle(self, health_updates: Optional[Dict[str, float]] = None) -> CycleReport:
        """
        Run one research cycle.

        Args:
            health_updates: Externally observed health values applied first

        Returns:
            CycleReport for this cycle
        """
        with self._lock:
            state = self.orchestrator.state
            before = self._state_vector()

            for comp, health in (health_updates or {}).items():
                if comp not in self.components:
                    self.components.append(comp)
                state.set_health(comp, health)

            allocation = self.orchestrator.allocate_resources(self.components)
            self.last_allocation = allocation
            self._adapt(allocation)

            overall = float(np.mean([state.health_of(c) for c in self.components])) \
                if self.components else 0.0
            self.orchestrator.record_performance({
                "overall": overall,
                "allocated": float(sum(allocation.values())),
            })
            self.record_observation(self.domain, {"overall": overall})
            analysis = self.orchestrator.analyze_research_data()

            for comp in self.components:
                self.metrics.record_metric(f"health.{comp}", state.health_of(comp))
                self.metrics.record_metric(f"allocation.{comp}", allocation.get(comp, 0.0))
            self.metrics.record_metric("performance.overall", overall)
            summary = self.metrics.get_metrics_summary()

            self.memory.store_memory({"domain": self.domain, "cycle": self.cycle, "overall": overall})

            patterns = self.explainability.detect_patterns(
                self.domain, analysis, state.interaction_strengths, summary
            )
            for source, targets in state.pattern_network.items():
                for target in targets:
                    self.explainability.register_causal_chain(
                        [f"health.{source}", f"health.{target}"]
                    )

            evidence = []
            previous = self.memory.recall_memory({"domain": self.domain, "cycle": self.cycle - 1})
            if previous is not None:
                evidence.append({"type": "episode", **previous})

            explanation = self.explainability.generate_explanation(
                before,
                self._state_vector(),
                domain=self.domain,
                analysis_results=analysis,
                metrics_summary=summary,
                evidence=evidence,
            )

            report = CycleReport(
                cycle=self.cycle,
                allocation=allocation,
                analysis=analysis,
                metrics_summary=summary,
                patterns=[p.id for p in patterns],
                explanation=explanation,
            )
            logger.debug(
                "Cycle %d: overall=%.3f patterns=%d confidence=%.3f",
                self.cycle, overall, len(patterns), explanation.confidence,
            )
            self.cycle += 1
            return report

    def run(self, cycles: int, progress: bool = False) -> List[CycleReport]:
        """Run several cycles back to back."""
        steps = range(cycles)
        if progress:
            steps = tqdm(steps, desc="Research cycles", unit="cycle")
        return [self.run_cycle() for _ in steps]

    # =========================================================================
    # REPORTING
    # =========================================================================

    def summary(self) -> Dict[str, Any]:
        state = self.orchestrator.state
        latest = self.explainability.latest_explanation()
        return {
            "domain": self.domain,
            "cycles": self.cycle,
            "elapsed_sec": time.time() - self.started_at,
            "health": {c: state.health_of(c) for c in self.components},
            "last_allocation": dict(self.last_allocation),
            "analysis": dict(state.analysis_results),
            "patterns": {
                pid: round(p.confidence, 4)
                for pid, p in self.explainability.pattern_registry.items()
            },
            "causal_graph": {
                "nodes": self.explainability.causal_graph.number_of_nodes,
                "edges": self.explainability.causal_graph.number_of_edges,
            },
            "explanations": len(self.explainability.explanation_history),
            "latest_explanation": None if latest is None else {
                "id": latest.id,
                "description": latest.description,
                "confidence": latest.confidence,
                "causal_chain": latest.context.causal_chain,
                "alternatives": latest.alternative_explanations,
            },
        }
