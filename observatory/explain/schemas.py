"""Data schemas for the explainability layer.

Pydantic models for patterns, explanation contexts and explanations.
"""

from __future__ import annotations

import math
import time
import uuid
from typing import Any, Dict, List, Set

from pydantic import BaseModel, Field


class CrossDomainPattern(BaseModel):
    """A recurring characteristic observed across one or more domains.

    Example:
    {
      "id": "coupling:scanner->processor",
      "kind": "coupling",
      "domains": ["research", "scanner", "processor"],
      "characteristics": {"strength": 0.8, "variables": ["health.scanner"]},
      "confidence": 0.91,
      "support": {"scanner": 0.8, "processor": 0.8}
    }
    """

    id: str
    kind: str = "generic"
    domains: Set[str] = Field(default_factory=set)
    characteristics: Dict[str, Any] = Field(default_factory=dict)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    support: Dict[str, float] = Field(default_factory=dict)
    detections: int = 1

    def absorb(self, other: "CrossDomainPattern") -> None:
        """Fold a re-detection of the same pattern into this one."""
        self.confidence = other.confidence
        self.domains |= other.domains
        self.characteristics.update(other.characteristics)
        self.support.update(other.support)
        self.detections += 1

    @property
    def variables(self) -> List[str]:
        """State variables this pattern is known to act on."""
        return list(self.characteristics.get("variables", []))


class ExplanationContext(BaseModel):
    """Snapshot an explanation was generated from."""

    timestamp: float = Field(default_factory=time.time)
    domain: str = "research"
    state_before: Dict[str, Any] = Field(default_factory=dict)
    state_after: Dict[str, Any] = Field(default_factory=dict)
    active_patterns: List[CrossDomainPattern] = Field(default_factory=list)
    causal_chain: List[str] = Field(default_factory=list)

    def state_changes(self) -> Dict[str, float]:
        """Finite numeric deltas for variables present before and after, zero deltas dropped."""
        changes = {}
        for key, after in self.state_after.items():
            if key not in self.state_before:
                continue
            before = self.state_before[key]
            if not (_is_number(before) and _is_number(after)) or after == before:
                continue
            delta = float(after) - float(before)
            if math.isfinite(delta):
                changes[key] = delta
        return changes


class Explanation(BaseModel):
    """A generated explanation for observed system behavior."""

    id: str = Field(default_factory=lambda: f"EXP-{uuid.uuid4().hex[:12]}")
    context: ExplanationContext
    description: str = ""
    confidence: float = 0.0
    evidence: List[Dict[str, Any]] = Field(default_factory=list)
    alternative_explanations: List[str] = Field(default_factory=list)
    abstraction_level: int = 0  # 0 = raw-event narrative


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
