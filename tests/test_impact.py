from __future__ import annotations

import numpy as np

from fitcore.config import ScoringPolicy
from fitcore.impact import (
    compute_impact,
    fit_category,
    priority_for,
    score_breakdown,
    summarize_improvements,
    weighted_overall_score,
)
from fitcore.models import DimensionScore


def test_empty_input_yields_no_items():
    assert compute_impact({}) == []
    assert compute_impact(None) == []
    assert compute_impact([("skills", 50)]) == []


def test_impact_and_priority_for_injected_weights():
    policy = ScoringPolicy(weights={"skills": 0.20, "education": 0.15})
    items = compute_impact({"skills": 50, "education": 90}, policy)

    assert [item.dimension for item in items] == ["skills", "education"]
    skills, education = items
    assert skills.current_score == 50
    assert skills.target_score == 80
    assert skills.potential_impact == 6
    assert skills.priority == "medium"
    assert education.potential_impact == 0
    assert education.priority == "achieved"
    assert education.target_score == 80


def test_ties_keep_input_order():
    items = compute_impact({"first": 60, "second": 60, "big": 10})
    assert [item.dimension for item in items] == ["big", "first", "second"]
    assert [item.potential_impact for item in items] == [7, 2, 2]

    reordered = compute_impact({"second": 60, "first": 60})
    assert [item.dimension for item in reordered] == ["second", "first"]


def test_priority_uses_weighted_gap():
    assert priority_for(20, 0.20) == "high"
    assert priority_for(50, 0.20) == "medium"
    assert priority_for(0, 0.05) == "low"
    assert priority_for(10, 0.10) == "medium"


def test_unknown_dimension_uses_default_weight():
    (item,) = compute_impact({"leadership": 10})
    assert item.potential_impact == 7
    assert item.priority == "medium"


def test_score_at_target_is_achieved():
    (item,) = compute_impact({"skills": 80})
    assert item.priority == "achieved"
    assert item.potential_impact == 0


def test_malformed_values_score_as_zero():
    (item,) = compute_impact({"skills": "oops"})
    assert item.current_score == 0
    assert item.potential_impact == 16
    assert item.priority == "high"


def test_normalized_records_are_accepted():
    policy = ScoringPolicy(weights={"skills": 0.20})
    (item,) = compute_impact({"skills": DimensionScore(score=50, matches=["SQL"], gaps=[])}, policy)
    assert item.potential_impact == 6


def test_custom_target_and_default_policy_do_not_interfere():
    strict = ScoringPolicy(target_score=90)
    (item,) = compute_impact({"skills": 85}, strict)
    assert item.target_score == 90
    assert item.potential_impact == 1
    assert item.priority == "low"

    (default_item,) = compute_impact({"skills": 85})
    assert default_item.priority == "achieved"


def test_item_serializes_to_read_contract():
    (item,) = compute_impact({"tasks": 50})
    assert item.to_dict() == {
        "dimension": "tasks",
        "currentScore": 50,
        "targetScore": 80,
        "potentialImpact": 6,
        "priority": "medium",
    }


def test_weighted_overall_score():
    assert weighted_overall_score({}) == 0.0
    assert weighted_overall_score({"skills": 50, "knowledge": 100}) == 60.0
    assert weighted_overall_score({"a": 50}, ScoringPolicy(weights={"a": 0.0}, default_weight=0.0)) == 0.0


def test_fit_category_bands():
    assert fit_category(85).category == "Excellent Match"
    assert fit_category(84.9).category == "Good Match"
    assert fit_category(55).category == "Moderate Match"
    assert fit_category(40).category == "Developing Match"
    assert fit_category(39.9).category == "Early Career Match"


def test_score_breakdown_buckets_and_details():
    breakdown = score_breakdown(
        {
            "tasks": 90,
            "skills": {"score": 70, "matches": ["a", "b"], "gaps": ["c"]},
            "tools": {"score": 55, "alternativeTools": ["Jira"]},
            "knowledge": 20,
            "education": 95,
        }
    )
    assert [e.dimension for e in breakdown["strengths"]] == ["education", "tasks"]
    assert breakdown["strengths"][1].label == "Job Tasks"
    (skills,) = breakdown["adequate"]
    assert (skills.matches, skills.gaps) == (2, 1)
    (tools,) = breakdown["needsImprovement"]
    assert tools.alternative_tools == ["Jira"]
    assert [e.dimension for e in breakdown["critical"]] == ["knowledge"]


def test_summary_keeps_significant_improvements():
    items = compute_impact({"tasks": 50, "skills": 70, "education": 95, "knowledge": 75})
    summary = summarize_improvements(items)

    assert [item.dimension for item in summary.significant] == ["tasks", "skills"]
    assert [item.dimension for item in summary.achieved] == ["education"]
    assert [item.dimension for item in summary.quick_wins] == ["tasks", "skills"]
    assert summary.total_potential_gain == 8
    assert summary.quick_win_gain == 8


def test_oversized_and_overflowing_scores_never_raise():
    (item,) = compute_impact({"skills": int("1" + "0" * 400)})
    assert item.current_score == 0
    assert item.potential_impact == 16
    assert item.priority == "high"
    assert weighted_overall_score({"a": 1.7e308, "b": 1.7e308}) == 0.0


def test_numpy_integer_scores_are_ranked():
    (item,) = compute_impact({"tasks": np.int64(50)})
    assert item.current_score == 50
    assert item.potential_impact == 6
