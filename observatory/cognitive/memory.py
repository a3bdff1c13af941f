"""
Episodic Memory - Raw Event Source for Explanations
===================================================

Stores episodes (flat attribute mappings) in arrival order and keeps a
semantic view holding the latest value seen for each attribute.

Recall is exact-match: the most recent episode whose fields equal every
field of the query. Insight generation merges two randomly chosen
episodes; the random source is injectable so runs can be seeded.

Usage:
    memory = EpisodicMemory(rng=np.random.default_rng(7))
    memory.store_memory({"domain": "research", "cycle": 3, "overall": 0.61})

    episode = memory.recall_memory({"domain": "research"})
    insight = memory.generate_insight()
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class InsightEvent:
    """Combination of two remembered episodes."""
    description: str
    context: Dict[str, Any]
    timestamp: float = field(default_factory=time.time)


class EpisodicMemory:
    """Episodic and semantic memory store."""

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        max_episodes: Optional[int] = None,
    ):
        """
        Args:
            rng: Random source for insight generation
            max_episodes: Keep only the newest N episodes (unbounded if None)
        """
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_episodes = max_episodes
        self.episodic: List[Dict[str, Any]] = []
        self.semantic: Dict[str, Any] = {}

    def store_memory(self, episode: Dict[str, Any]) -> None:
        """Store an episode and fold its fields into semantic memory."""
        self.episodic.append(dict(episode))
        self.semantic.update(episode)
        if self.max_episodes is not None and len(self.episodic) > self.max_episodes:
            del self.episodic[0]

    def recall_memory(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Most recent episode matching every query field, or None."""
        for episode in reversed(self.episodic):
            if all(k in episode and episode[k] == v for k, v in query.items()):
                return episode
        return None

    def generate_insight(self) -> Optional[InsightEvent]:
        """Merge two randomly picked episodes. None with fewer than two stored."""
        if len(self.episodic) < 2:
            return None
        i, j = self.rng.integers(0, len(self.episodic), size=2)
        combined = {**self.episodic[int(i)], **self.episodic[int(j)]}
        logger.debug("Insight from episodes %d and %d", i, j)
        return InsightEvent("Combined memory insight", combined)

    def __len__(self) -> int:
        return len(self.episodic)
