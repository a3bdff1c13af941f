"""
Orchestrator State - The Session's Shared Picture of Its Components
===================================================================

Typed record for everything the orchestrator reads. The driver owns it and
writes to it between cycles; allocation and analysis only read it (except
for storing the latest analysis result).

Missing lookups resolve to documented defaults:
    mass    -> 1.0
    health  -> 0.5
    snapshot field -> 0.0
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from ..core.errors import ConfigurationError
from ..core.ring_buffer import RingBuffer

DEFAULT_MASS = 1.0
DEFAULT_HEALTH = 0.5
DEFAULT_FIELD_VALUE = 0.0


@dataclass
class OrchestratorState:
    """
    Session state consumed by the orchestrator.

    interaction_strengths is keyed by ordered pairs; (A, B) and (B, A) are
    independent directed relations and are never reconciled.
    """
    resources: Dict[str, float] = field(default_factory=dict)
    component_masses: Dict[str, float] = field(default_factory=dict)
    health_states: Dict[str, float] = field(default_factory=dict)
    homeostasis_targets: Dict[str, float] = field(default_factory=dict)
    pattern_network: Dict[str, List[str]] = field(default_factory=dict)
    interaction_strengths: Dict[Tuple[str, str], float] = field(default_factory=dict)
    performance_history: RingBuffer = field(default_factory=lambda: RingBuffer(1000))
    research_metrics: Dict[str, RingBuffer] = field(default_factory=dict)
    research_session: Dict[str, float] = field(default_factory=dict)
    analysis_results: Dict[str, Any] = field(default_factory=dict)

    default_mass: float = DEFAULT_MASS
    default_health: float = DEFAULT_HEALTH

    # -------------------------------------------------------------------------
    # Default lookups
    # -------------------------------------------------------------------------

    def mass_of(self, component: str) -> float:
        return self.component_masses.get(component, self.default_mass)

    def health_of(self, component: str) -> float:
        return self.health_states.get(component, self.default_health)

    @staticmethod
    def snapshot_value(snapshot: Dict[str, float], name: str) -> float:
        return snapshot.get(name, DEFAULT_FIELD_VALUE)

    @property
    def total_resources(self) -> float:
        return float(sum(self.resources.values()))

    # -------------------------------------------------------------------------
    # Validating setters
    # -------------------------------------------------------------------------

    def set_resource(self, pool: str, amount: float) -> None:
        if amount < 0:
            raise ConfigurationError(f"Resource {pool!r} cannot be negative: {amount}")
        self.resources[pool] = float(amount)

    def set_mass(self, component: str, mass: float) -> None:
        if mass < 0:
            raise ConfigurationError(f"Mass of {component!r} cannot be negative: {mass}")
        self.component_masses[component] = float(mass)

    def set_health(self, component: str, health: float) -> None:
        """Set health, clamped into [0, 1]."""
        self.health_states[component] = min(1.0, max(0.0, float(health)))

    def set_target(self, component: str, target: float) -> None:
        self.homeostasis_targets[component] = min(1.0, max(0.0, float(target)))

    def set_interaction(self, source: str, target: str, strength: float) -> None:
        self.interaction_strengths[(source, target)] = float(strength)

    def link_components(self, source: str, target: str) -> None:
        """Record that source influences target (kept in insertion order, no repeats)."""
        related = self.pattern_network.setdefault(source, [])
        if target not in related:
            related.append(target)
