"""
Central Orchestrator - Gravitational Resource Allocation
========================================================

Allocates a shared resource pool across components with a gravity-style
force model:

    distance(i, j) = |health(i) - health(j)|
    force(i, j)    = mass(i) * mass(j) / max(distance², floor)
    force(i)       = Σ_j≠i force(i, j)
    allocation(i)  = force(i) / Σ force · Σ resources

Components whose health sits close to many heavy peers pull the most
resources. When no pairwise force exists (single component, all-zero
masses) the pool is split equally.

The orchestrator also aggregates interaction, research and performance
statistics into analysis_results for the explainability layer.

Usage:
    from observatory.orchestrator import Orchestrator

    orch = Orchestrator()
    orch.state.set_resource("compute", 100.0)
    orch.state.set_health("scanner", 0.7)

    allocation = orch.allocate_resources(["scanner", "processor"])
    analysis = orch.analyze_research_data()
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import numpy as np

from ..core.config import OrchestratorConfig
from ..core.ring_buffer import RingBuffer
from .state import OrchestratorState

logger = logging.getLogger(__name__)


def _unique(components: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for comp in components:
        if comp not in seen:
            seen.add(comp)
            ordered.append(comp)
    return ordered


def allocate_resources(
    state: OrchestratorState,
    components: Iterable[str],
    distance_floor: float = 0.01,
) -> Dict[str, float]:
    """
    Allocate the total resource pool across components.

    Pure over state: resources are read, never written back.

    Args:
        state: Orchestrator state (health, mass, resources)
        components: Component ids; duplicates collapse to one entry
        distance_floor: Floor on squared health distance

    Returns:
        component id -> allocated quantity, summing to total resources
    """
    comps = _unique(components)
    if not comps:
        return {}

    total_resources = state.total_resources
    n = len(comps)

    health = np.array([state.health_of(c) for c in comps], dtype=float)
    mass = np.array([state.mass_of(c) for c in comps], dtype=float)

    dist_sq = (health[:, None] - health[None, :]) ** 2
    pair_force = np.outer(mass, mass) / np.maximum(dist_sq, distance_floor)
    np.fill_diagonal(pair_force, 0.0)
    forces = pair_force.sum(axis=1)
    total_force = float(forces.sum())

    if total_force > 0:
        shares = forces / total_force
    else:
        shares = np.full(n, 1.0 / n)

    allocations = {comp: float(share * total_resources) for comp, share in zip(comps, shares)}

    logger.debug(
        "Allocated %.3f across %d components (total_force=%.3f)",
        total_resources, n, total_force,
    )
    return allocations


def analyze_research_data(state: OrchestratorState) -> Dict[str, Any]:
    """
    Aggregate interaction, research and performance statistics.

    Sections whose backing collection is empty are omitted. The result
    replaces state.analysis_results.
    """
    results: Dict[str, Any] = {}

    if state.interaction_strengths:
        strengths = np.fromiter(state.interaction_strengths.values(), dtype=float)
        results["interaction_analysis"] = {
            "mean_strength": float(np.mean(strengths)),
            "pattern_count": len(state.pattern_network),
        }

    if state.research_session:
        values = np.fromiter(state.research_session.values(), dtype=float)
        results["research_analysis"] = {
            "mean_value": float(np.mean(values)),
            "stability": float(np.std(values)),
        }

    if state.performance_history:
        perf = [state.snapshot_value(snap, "overall") for snap in state.performance_history]
        results["performance_analysis"] = {
            "mean_performance": float(np.mean(perf)),
            "trend": float(perf[-1] - perf[0]),
        }

    state.analysis_results = results
    return results


class Orchestrator:
    """
    Research-focused orchestrator for a single session.

    Owns an OrchestratorState; the driver mutates the state directly or
    through its validating setters between cycles.
    """

    def __init__(
        self,
        config: Optional[OrchestratorConfig] = None,
        state: Optional[OrchestratorState] = None,
    ):
        self.config = config or OrchestratorConfig()
        if state is None:
            state = OrchestratorState(
                performance_history=RingBuffer(self.config.history_size),
                default_mass=self.config.default_mass,
                default_health=self.config.default_health,
            )
        self.state = state
        logger.info(
            "Orchestrator initialized (history=%d, floor=%.3f)",
            self.state.performance_history.capacity, self.config.distance_floor,
        )

    # Convenience views onto the state
    @property
    def resources(self) -> Dict[str, float]:
        return self.state.resources

    @property
    def analysis_results(self) -> Dict[str, Any]:
        return self.state.analysis_results

    @property
    def performance_history(self) -> RingBuffer:
        return self.state.performance_history

    def allocate_resources(self, components: Iterable[str]) -> Dict[str, float]:
        return allocate_resources(self.state, components, self.config.distance_floor)

    def analyze_research_data(self) -> Dict[str, Any]:
        return analyze_research_data(self.state)

    def record_performance(self, snapshot: Dict[str, float]) -> None:
        """Append a per-cycle snapshot, evicting the oldest past capacity."""
        self.state.performance_history.push(dict(snapshot))


def create_orchestrator(config: Optional[OrchestratorConfig] = None) -> Orchestrator:
    """Initialize a new research-focused orchestrator."""
    return Orchestrator(config=config)
