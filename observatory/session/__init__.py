"""Research session driver and command-line entry point."""

from .session import ResearchSession, CycleReport

__all__ = ["ResearchSession", "CycleReport"]
