"""Dimension score normalization.

Backends have emitted two shapes over time: a bare number (legacy records)
and a rich object carrying ``score``, ``matches`` and ``gaps``. Everything in
here is total: malformed input degrades to a zero record instead of raising.
``normalize`` expects a raw payload; feeding its own output back in is not a
supported round trip.
"""

from __future__ import annotations

import logging
import math
import numbers
from collections.abc import Mapping
from typing import Any

from fitcore.models import DimensionScore, InvalidScore, NumericScore, RawDimension, RichScore

logger = logging.getLogger(__name__)

_RICH_FIELDS = ("score", "matches", "gaps", "confidence")
CONFIDENCE_LEVELS = ("high", "medium", "low")


def round_half_up(value: float) -> int:
    """Round half away from zero for positives; non-finite or overflowing values give 0."""
    try:
        value = float(value)
    except (OverflowError, TypeError, ValueError):
        return 0
    if not math.isfinite(value):
        return 0
    return int(math.floor(value + 0.5))


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    try:
        return math.isfinite(float(value))
    except OverflowError:
        return False


def _as_score(value: numbers.Real) -> float:
    if isinstance(value, numbers.Integral):
        return int(value)
    return float(value)


def _as_items(value: Any) -> tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return ()


def classify(raw: Any) -> RawDimension:
    if _is_number(raw):
        return NumericScore(value=_as_score(raw))
    if isinstance(raw, DimensionScore):
        return RichScore(score=raw.score, matches=tuple(raw.matches), gaps=tuple(raw.gaps))
    if isinstance(raw, Mapping):
        score = raw.get("score")
        confidence = raw.get("confidence")
        return RichScore(
            score=_as_score(score) if _is_number(score) and score else 0,
            matches=_as_items(raw.get("matches")),
            gaps=_as_items(raw.get("gaps")),
            confidence=confidence if confidence in CONFIDENCE_LEVELS else None,
            extras={key: value for key, value in raw.items() if key not in _RICH_FIELDS},
        )
    return InvalidScore(raw=raw)


def normalize(raw: Any) -> DimensionScore:
    shape = classify(raw)
    if isinstance(shape, NumericScore):
        return DimensionScore(score=shape.value, matches=[], gaps=[])
    if isinstance(shape, RichScore):
        return DimensionScore(score=shape.score, matches=list(shape.matches), gaps=list(shape.gaps))
    logger.debug("Coercing malformed dimension payload of type %s to zero", type(raw).__name__)
    return DimensionScore(score=0, matches=[], gaps=[])


def raw_confidence(raw: Any) -> str | None:
    shape = classify(raw)
    if isinstance(shape, RichScore):
        return shape.confidence
    return None


def raw_extra_items(raw: Any, key: str) -> list[str]:
    """Read a pass-through list field such as ``strengthAreas`` from a raw payload."""
    shape = classify(raw)
    if isinstance(shape, RichScore):
        return list(_as_items(shape.extras.get(key)))
    return []


def _entries(dimension_scores: Any) -> list[tuple[str, Any]]:
    if not isinstance(dimension_scores, Mapping):
        if dimension_scores is not None:
            logger.debug("Treating non-mapping dimension scores (%s) as empty", type(dimension_scores).__name__)
        return []
    return list(dimension_scores.items())


def normalize_all(dimension_scores: Any) -> dict[str, DimensionScore]:
    return {key: normalize(value) for key, value in _entries(dimension_scores)}


def extract_numeric_scores(dimension_scores: Any) -> dict[str, float]:
    return {key: normalize(value).score for key, value in _entries(dimension_scores)}


def calculate_overall_score(dimension_scores: Any) -> int:
    """Unweighted mean of the normalized scores, rounded to a whole number."""
    scores = [normalize(value).score for _, value in _entries(dimension_scores)]
    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores))


def normalize_analysis_data(data: Any) -> dict[str, Any] | None:
    if not isinstance(data, Mapping):
        return None

    normalized = dict(data)
    if data.get("dimensionScores"):
        normalized["dimensionScores"] = {
            key: score.to_dict() for key, score in normalize_all(data["dimensionScores"]).items()
        }
    recommendations = data.get("recommendations")
    normalized["recommendations"] = list(recommendations) if isinstance(recommendations, list) else []
    return normalized
