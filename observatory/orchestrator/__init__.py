"""
Orchestrator - resource allocation and aggregate analysis.

Modules:
    state.py        - OrchestratorState with default lookups
    orchestrator.py - allocate_resources, analyze_research_data, Orchestrator
"""

from .state import (
    OrchestratorState,
    DEFAULT_MASS,
    DEFAULT_HEALTH,
    DEFAULT_FIELD_VALUE,
)

from .orchestrator import (
    Orchestrator,
    create_orchestrator,
    allocate_resources,
    analyze_research_data,
)

__all__ = [
    "OrchestratorState",
    "DEFAULT_MASS",
    "DEFAULT_HEALTH",
    "DEFAULT_FIELD_VALUE",
    "Orchestrator",
    "create_orchestrator",
    "allocate_resources",
    "analyze_research_data",
]
