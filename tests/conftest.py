"""
Observatory Test Configuration
==============================

Shared fixtures for the core triad and the session driver.
"""

import numpy as np
import pytest

from observatory.core.config import (
    ComponentSpec,
    InteractionSpec,
    ObservatoryConfig,
    SessionConfig,
)
from observatory.explain import create_explainability_system
from observatory.metrics import MetricsCollection
from observatory.orchestrator import Orchestrator


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: tests that take >1s to run")


@pytest.fixture
def rng():
    """Reproducible random number generator."""
    return np.random.default_rng(42)


@pytest.fixture
def orchestrator():
    orch = Orchestrator()
    orch.state.set_resource("compute", 60.0)
    orch.state.set_resource("memory", 40.0)
    return orch


@pytest.fixture
def collector():
    return MetricsCollection()


@pytest.fixture
def system():
    return create_explainability_system(history_size=50)


@pytest.fixture
def session_config():
    """Small deterministic session config."""
    config = ObservatoryConfig()
    config.session = SessionConfig(
        domain="lab",
        components=[
            ComponentSpec("alpha", mass=1.0, health=0.6, target=0.8),
            ComponentSpec("beta", mass=2.0, health=0.4, target=0.8),
        ],
        resources={"compute": 10.0},
        interactions=[
            InteractionSpec("alpha", "beta", 0.9),
            InteractionSpec("beta", "alpha", 0.2),
        ],
        seed=7,
        noise_scale=0.0,
    )
    return config
