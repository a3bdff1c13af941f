"""Cognitive collaborator: episodic memory used as a raw evidence source."""

from .memory import EpisodicMemory, InsightEvent

__all__ = ["EpisodicMemory", "InsightEvent"]
