"""
Tests for the Explainability System
"""

import math

import pytest
from pydantic import ValidationError

from observatory.explain import (
    CrossDomainPattern,
    DetectionInput,
    Explanation,
    ExplanationContext,
    ExplanationModel,
    EvidenceConfidenceEstimator,
    MetricRegimeDetector,
    create_explainability_system,
)
from observatory.metrics import MetricsCollection


def coupling(confidence=0.9, domains=("research", "a", "b")):
    return CrossDomainPattern(
        id="coupling:a->b",
        kind="coupling",
        domains=set(domains),
        characteristics={"variables": ["health.a", "health.b"]},
        confidence=confidence,
        support={"a": 0.9, "b": 0.9},
    )


class TestSchemas:
    """Pydantic models."""

    def test_confidence_bounds(self):
        with pytest.raises(ValidationError):
            CrossDomainPattern(id="p", confidence=1.5)

    def test_state_changes(self):
        ctx = ExplanationContext(
            state_before={"x": 1.0, "y": 2.0, "flag": True, "name": "a", "gone": 1.0},
            state_after={"x": 1.5, "y": 2.0, "flag": False, "name": "b", "new": 3.0},
        )
        assert ctx.state_changes() == {"x": 0.5}

    def test_state_changes_skip_non_finite(self):
        ctx = ExplanationContext(
            state_before={"x": float("nan"), "y": 1.0, "z": 0.0},
            state_after={"x": 1.0, "y": float("inf"), "z": 2.0},
        )
        assert ctx.state_changes() == {"z": 2.0}

    def test_explanation_id(self):
        exp = Explanation(context=ExplanationContext())
        assert exp.id.startswith("EXP-")
        assert exp.abstraction_level == 0


class TestPatternRegistry:
    """Upsert and thresholds."""

    def test_upsert_keeps_one_entry(self, system):
        system.register_pattern(coupling(0.6, domains=("research",)))
        system.register_pattern(coupling(0.8, domains=("lab",)))

        assert len(system.pattern_registry) == 1
        stored = system.pattern_registry["coupling:a->b"]
        assert stored.confidence == 0.8
        assert stored.domains == {"research", "lab"}
        assert stored.detections == 2

    def test_registry_stores_a_copy(self, system):
        pattern = coupling(0.6)
        system.register_pattern(pattern)
        pattern.confidence = 0.1
        assert system.pattern_registry[pattern.id].confidence == 0.6

    def test_threshold_rejects(self, system):
        system.set_confidence_threshold("coupling", 0.95)
        assert system.register_pattern(coupling(0.9)) is False
        assert system.pattern_registry == {}

    def test_threshold_accepts_at_boundary(self, system):
        system.set_confidence_threshold("coupling", 0.9)
        assert system.register_pattern(coupling(0.9)) is True

    def test_no_threshold_accepts_everything(self, system):
        assert system.register_pattern(coupling(0.0)) is True

    def test_new_pattern_becomes_graph_node(self, system):
        system.register_pattern(coupling())
        assert "coupling:a->b" in system.causal_graph


class TestDetection:
    """Default detectors over one cycle's observations."""

    def test_default_detectors(self, system):
        patterns = system.detect_patterns(
            "research",
            analysis_results={"performance_analysis": {"mean_performance": 0.5, "trend": 0.1}},
            interaction_strengths={("a", "b"): 0.9, ("b", "a"): 0.3},
            metrics_summary={
                "health.a": {"mean": 0.5, "std": 0.01},
                "health.b": {"mean": 0.6, "std": 0.0},
            },
        )
        ids = {p.id for p in patterns}
        assert ids == {"coupling:a->b", "performance_trend:up", "stability:health"}

        ranked = system.relevant_patterns("research")
        assert [p.id for p in ranked] == [
            "coupling:a->b", "stability:health", "performance_trend:up",
        ]
        assert system.pattern_registry["stability:health"].confidence == pytest.approx(0.9)
        assert system.pattern_registry["performance_trend:up"].confidence == pytest.approx(0.2)

    def test_flat_trend_not_reported(self, system):
        patterns = system.detect_patterns(
            "research",
            analysis_results={"performance_analysis": {"mean_performance": 0.5, "trend": 0.0}},
        )
        assert patterns == []

    def test_single_domain_stability_is_not_cross_domain(self):
        detector = MetricRegimeDetector()
        found = detector.detect(DetectionInput(
            domain="research",
            metrics_summary={"health.a": {"mean": 1.0, "std": 0.0}},
        ))
        assert found == []

    def test_registered_model_replaces_default(self, system):
        system.register_model("lab", ExplanationModel())
        patterns = system.detect_patterns(
            "lab", interaction_strengths={("a", "b"): 0.9},
        )
        assert patterns == []


class TestNonFiniteInput:
    """NaN samples are stored as-is but never reach pattern confidence."""

    def test_nan_metric_series_is_not_stable(self, system):
        collector = MetricsCollection()
        for domain in ("a", "c"):
            collector.record_metric(f"latency.{domain}", 1.0)
            collector.record_metric(f"latency.{domain}", 1.0)
        collector.record_metric("latency.b", float("nan"))

        patterns = system.detect_patterns("research", metrics_summary=collector.get_metrics_summary())

        assert [p.id for p in patterns] == ["stability:latency"]
        assert patterns[0].confidence == pytest.approx(1.0)
        assert "b" not in patterns[0].domains

    def test_nan_series_alone_yields_nothing(self, system):
        summary = {
            "latency.a": {"mean": 1.0, "std": 0.0},
            "latency.b": {"mean": float("nan"), "std": float("nan")},
        }
        assert system.detect_patterns("research", metrics_summary=summary) == []

    def test_nan_interaction_strength_skipped(self, system):
        patterns = system.detect_patterns(
            "research",
            interaction_strengths={("a", "b"): float("nan"), ("b", "c"): 0.8, ("c", "a"): 0.2},
        )
        assert [p.id for p in patterns] == ["coupling:b->c"]
        assert patterns[0].confidence == pytest.approx(1.0)

    def test_nan_trend_skipped(self, system):
        analysis = {"performance_analysis": {"mean_performance": float("nan"), "trend": float("nan")}}
        assert system.detect_patterns("research", analysis_results=analysis) == []

    def test_explanation_over_nan_state(self, system):
        system.register_pattern(CrossDomainPattern(
            id="coupling:a->b",
            kind="coupling",
            domains={"research", "a", "b"},
            characteristics={"variables": ["health.a", "health.b"]},
            confidence=0.9,
        ))
        exp = system.generate_explanation(
            {"health.a": float("nan"), "health.b": 0.5},
            {"health.a": 0.7, "health.b": 0.6},
            metrics_summary={"health.a": {"mean": float("nan"), "std": float("nan")}},
        )

        changed = [e["variable"] for e in exp.evidence if e["type"] == "state_change"]
        assert changed == ["health.b"]
        assert math.isfinite(exp.confidence)
        assert 0.0 < exp.confidence <= 1.0
        assert system.validate_explanation(exp)["evidence_completeness"] is True


class TestGenerateExplanation:
    """Explanation synthesis."""

    def test_nothing_to_explain(self, system):
        exp = system.generate_explanation({"x": 1.0}, {"x": 1.0})
        assert exp.description.startswith("No change observed")
        assert exp.confidence == 0.0
        assert exp.abstraction_level == 0
        assert exp.context.causal_chain == []

    def test_change_without_patterns(self, system):
        exp = system.generate_explanation({"x": 1.0}, {"x": 2.0})
        assert exp.description.startswith("No clear explanation found")
        assert exp.confidence == 0.0
        assert exp.evidence[0]["type"] == "state_change"

    def test_pattern_explains_change(self, system):
        system.register_pattern(coupling(0.9))
        exp = system.generate_explanation(
            {"health.a": 0.5}, {"health.a": 0.7}, domain="research",
        )

        assert exp.context.causal_chain == ["coupling:a->b", "health.a"]
        assert system.causal_graph.has_edge("coupling:a->b", "health.a")
        assert exp.alternative_explanations == ["health.a (strength 0.50)"]
        assert "Causal chain: coupling:a->b -> health.a" in exp.description
        assert 0.0 < exp.confidence <= 1.0
        # research, a, b
        assert exp.abstraction_level == 3

        types = [e["type"] for e in exp.evidence]
        assert types.count("state_change") == 1
        assert types.count("pattern_match") == 1
        assert types.count("causal_relation") == 1

    def test_alternatives_strongest_first(self, system):
        system.register_pattern(CrossDomainPattern(id="p", domains={"research"}, confidence=0.8))
        system.register_causal_chain(["p", "x", "y"])
        system.register_causal_chain(["p", "z"])

        exp = system.generate_explanation({"x": 1.0}, {"x": 2.0})

        assert exp.context.causal_chain == ["p", "x", "y"]
        assert exp.alternative_explanations == [
            "p -> z (strength 1.30)",
            "x -> y (strength 1.00)",
        ]

    def test_confidence_grows_with_evidence(self, system):
        pattern = coupling(0.9)
        before, after = {"health.a": 0.5}, {"health.a": 0.7}

        sparse = system.generate_explanation(before, after, active_patterns=[pattern])
        rich = system.generate_explanation(
            before, after, active_patterns=[pattern],
            evidence=[{"type": "episode", "cycle": i} for i in range(5)],
        )
        assert rich.confidence > sparse.confidence

    def test_confidence_formula(self):
        ctx = ExplanationContext(active_patterns=[coupling(0.8)])
        estimate = EvidenceConfidenceEstimator().estimate(ctx, [{}] * 10)
        assert estimate == pytest.approx(0.8 * (0.5 + 0.5 * 0.7615941559557649))

    def test_analysis_keys_do_not_overwrite_tags(self, system):
        exp = system.generate_explanation(
            {}, {}, analysis_results={"odd": {"type": "bogus", "section": "other", "n": 1}},
        )
        assert exp.evidence == [{"type": "analysis", "section": "odd", "n": 1}]

    def test_extra_evidence_defaults_to_external(self, system):
        exp = system.generate_explanation({}, {}, evidence=[{"note": "lab log"}])
        assert exp.evidence == [{"note": "lab log", "type": "external"}]

    def test_metric_evidence_for_pattern_variables(self, system):
        system.register_pattern(coupling(0.9))
        exp = system.generate_explanation(
            {"health.a": 0.5}, {"health.a": 0.7},
            metrics_summary={"health.b": {"mean": 0.4}, "unrelated": {"mean": 1.0}},
        )
        metrics = [e["name"] for e in exp.evidence if e["type"] == "metric"]
        assert metrics == ["health.b"]

    def test_abstraction_capped(self, system):
        wide = coupling(0.9, domains=[f"d{i}" for i in range(8)] + ["research"])
        exp = system.generate_explanation({}, {}, active_patterns=[wide])
        assert exp.abstraction_level == 5

    def test_wide_state_without_patterns_stays_raw(self, system):
        state = {f"v{i}": float(i) for i in range(12)}
        exp = system.generate_explanation(state, state)
        assert exp.abstraction_level == 0

    def test_context_snapshots_patterns(self, system):
        system.register_pattern(coupling(0.5))
        exp = system.generate_explanation({"health.a": 0.5}, {"health.a": 0.6})
        system.register_pattern(coupling(0.95))
        assert exp.context.active_patterns[0].confidence == 0.5

    def test_history_bounded(self, system):
        """History keeps the newest entries up to capacity."""
        generated = [system.generate_explanation({}, {}) for _ in range(55)]

        assert len(system.explanation_history) == 50
        assert system.latest_explanation().id == generated[-1].id
        assert system.explanation_history[0].id == generated[5].id
        assert [e.id for e in system.recent_explanations(2)] == [g.id for g in generated[-2:]]

    def test_empty_history(self):
        system = create_explainability_system(history_size=3)
        assert system.latest_explanation() is None
        assert system.recent_explanations() == []


class TestValidation:
    """validate_explanation checks."""

    def test_generated_explanation_validates(self, system):
        system.register_pattern(coupling(0.9))
        exp = system.generate_explanation({"health.a": 0.5}, {"health.a": 0.7})

        results = system.validate_explanation(exp)
        assert results == {
            "causal_consistency": True,
            "pattern_support": True,
            "evidence_completeness": True,
            "abstraction_appropriate": True,
        }

    def test_unknown_chain_is_inconsistent(self, system):
        exp = Explanation(context=ExplanationContext(causal_chain=["q", "r"]))
        assert system.validate_explanation(exp)["causal_consistency"] is False

    def test_out_of_range_level(self, system):
        exp = Explanation(context=ExplanationContext(), abstraction_level=7)
        assert system.validate_explanation(exp)["abstraction_appropriate"] is False

    def test_missing_state_change_evidence(self, system):
        exp = Explanation(
            context=ExplanationContext(state_before={"x": 1.0}, state_after={"x": 2.0}),
        )
        assert system.validate_explanation(exp)["evidence_completeness"] is False

    def test_pattern_below_later_threshold(self, system):
        system.register_pattern(coupling(0.5))
        exp = system.generate_explanation({"health.a": 0.5}, {"health.a": 0.6})
        system.set_confidence_threshold("coupling", 0.7)
        assert system.validate_explanation(exp)["pattern_support"] is False
