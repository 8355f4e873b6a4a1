from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import numpy as np

from fitcore.config import ScoringPolicy, default_policy
from fitcore.labels import format_dimension_name
from fitcore.models import (
    PRIORITY_ACHIEVED,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    BreakdownEntry,
    FitCategory,
    ImprovementItem,
    ImprovementSummary,
)
from fitcore.normalizer import normalize, normalize_all, raw_extra_items, round_half_up

FIT_CATEGORIES = (
    (85, FitCategory("Excellent Match", "green", "You are highly qualified for this position!")),
    (70, FitCategory("Good Match", "blue", "You meet most requirements with some areas for improvement.")),
    (
        55,
        FitCategory(
            "Moderate Match",
            "yellow",
            "You have foundational qualifications but need development in key areas.",
        ),
    ),
    (40, FitCategory("Developing Match", "orange", "Significant skill development needed to meet requirements.")),
)
EARLY_CAREER = FitCategory(
    "Early Career Match",
    "red",
    "Consider this as a longer-term career goal requiring substantial preparation.",
)

BREAKDOWN_BANDS = (
    ("strengths", 80),
    ("adequate", 65),
    ("needsImprovement", 50),
)

QUICK_WIN_COUNT = 3
MIN_SIGNIFICANT_IMPACT = 1


def _items(dimension_scores: Any) -> list[tuple[str, Any]]:
    if not isinstance(dimension_scores, Mapping):
        return []
    return list(dimension_scores.items())


def priority_for(score: float, weight: float, policy: ScoringPolicy | None = None) -> str:
    policy = policy or default_policy()
    gap_weighted = (100 - score) * weight
    if gap_weighted > policy.high_priority_gap:
        return PRIORITY_HIGH
    if gap_weighted > policy.medium_priority_gap:
        return PRIORITY_MEDIUM
    return PRIORITY_LOW


def compute_impact(dimension_scores: Any, policy: ScoringPolicy | None = None) -> list[ImprovementItem]:
    """Rank dimensions by the overall-score gain of lifting them to target.

    ``potential_impact`` is in whole percentage points of the weighted overall
    score. Dimensions already at or above target are kept with priority
    ``achieved`` and zero impact. The sort is stable, so ties keep the input
    order.
    """
    policy = policy or default_policy()
    target = policy.target_score
    improvements: list[ImprovementItem] = []

    for dimension, raw in _items(dimension_scores):
        score = normalize(raw).score
        weight = policy.weight_for(dimension)

        if score < target:
            current_contribution = (score / 100.0) * weight
            potential_contribution = (target / 100.0) * weight
            impact = round_half_up((potential_contribution - current_contribution) * 100.0)
            priority = priority_for(score, weight, policy)
        else:
            impact = 0
            priority = PRIORITY_ACHIEVED

        improvements.append(
            ImprovementItem(
                dimension=dimension,
                current_score=score,
                target_score=target,
                potential_impact=impact,
                priority=priority,
            )
        )

    improvements.sort(key=lambda item: item.potential_impact, reverse=True)
    return improvements


def weighted_overall_score(dimension_scores: Any, policy: ScoringPolicy | None = None) -> float:
    policy = policy or default_policy()
    entries = _items(dimension_scores)
    if not entries:
        return 0.0

    scores = np.array([normalize(raw).score for _, raw in entries], dtype=float)
    weights = np.array([policy.weight_for(dimension) for dimension, _ in entries], dtype=float)
    total_weight = weights.sum()
    if total_weight <= 0:
        return 0.0
    overall = float(np.dot(scores, weights) / total_weight)
    return round_half_up(overall * 10.0) / 10.0


def fit_category(overall_score: float) -> FitCategory:
    for threshold, category in FIT_CATEGORIES:
        if overall_score >= threshold:
            return category
    return EARLY_CAREER


def score_breakdown(dimension_scores: Any) -> dict[str, list[BreakdownEntry]]:
    breakdown: dict[str, list[BreakdownEntry]] = {
        "strengths": [],
        "adequate": [],
        "needsImprovement": [],
        "critical": [],
    }
    normalized = normalize_all(dimension_scores)

    for dimension, raw in _items(dimension_scores):
        data = normalized[dimension]
        entry = BreakdownEntry(
            dimension=dimension,
            label=format_dimension_name(dimension),
            score=data.score,
            matches=len(data.matches),
            gaps=len(data.gaps),
            strength_areas=raw_extra_items(raw, "strengthAreas"),
            alternative_tools=raw_extra_items(raw, "alternativeTools"),
        )
        bucket = "critical"
        for name, floor in BREAKDOWN_BANDS:
            if data.score >= floor:
                bucket = name
                break
        breakdown[bucket].append(entry)

    for entries in breakdown.values():
        entries.sort(key=lambda e: e.score, reverse=True)
    return breakdown


def summarize_improvements(improvements: list[ImprovementItem]) -> ImprovementSummary:
    achieved = [item for item in improvements if item.priority == PRIORITY_ACHIEVED]
    significant = [
        item
        for item in improvements
        if item.priority != PRIORITY_ACHIEVED and item.potential_impact >= MIN_SIGNIFICANT_IMPACT
    ]
    quick_wins = significant[:QUICK_WIN_COUNT]
    return ImprovementSummary(
        significant=significant,
        achieved=achieved,
        quick_wins=quick_wins,
        total_potential_gain=sum(item.potential_impact for item in significant),
        quick_win_gain=sum(item.potential_impact for item in quick_wins[:2]),
    )
