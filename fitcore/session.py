"""Accumulates streamed dimension results for one analysis request.

The backend emits one ``dimension_completed`` chunk per dimension, in no
particular order. Each chunk is normalized on arrival and merged into a fresh
read-only mapping, so snapshots handed to readers never change under them.
"""

from __future__ import annotations

import logging
import numbers
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from fitcore.config import EXPECTED_DIMENSIONS, ScoringPolicy, default_policy
from fitcore.impact import compute_impact, fit_category, weighted_overall_score
from fitcore.labels import format_progress
from fitcore.models import DimensionScore, ImprovementItem
from fitcore.normalizer import calculate_overall_score, normalize, normalize_analysis_data, raw_confidence

logger = logging.getLogger(__name__)

EVENT_ANALYSIS_STARTED = "analysis_started"
EVENT_DIMENSION_COMPLETED = "dimension_completed"
EVENT_ANALYSIS_COMPLETED = "analysis_completed"
EVENT_ERROR = "error"

STATUS_PENDING = "pending"
STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"


class AnalysisSession:
    def __init__(
        self,
        policy: ScoringPolicy | None = None,
        expected_dimensions: tuple[str, ...] = EXPECTED_DIMENSIONS,
    ):
        self.policy = policy or default_policy()
        self.expected_dimensions = tuple(expected_dimensions)
        self.reset()

    def reset(self) -> None:
        self._scores: Mapping[str, DimensionScore] = MappingProxyType({})
        self._confidence: Mapping[str, str | None] = MappingProxyType({})
        self.status = STATUS_PENDING
        self.progress = 0
        self.error: str | None = None
        self.analysis_id: str | None = None
        self.occupation_code: str | None = None
        self.occupation_title: str | None = None
        self.reported_overall_score: float | None = None
        self.reported_fit_category: Any = None
        self.recommendations: list[Any] = []

    @classmethod
    def from_record(cls, data: Any, policy: ScoringPolicy | None = None) -> AnalysisSession:
        """Replay a persisted analysis record as if it had been streamed."""
        session = cls(policy=policy)
        normalized = normalize_analysis_data(data)
        if normalized is None:
            return session

        session.apply_event(
            {
                "type": EVENT_ANALYSIS_STARTED,
                "analysisId": data.get("analysisId"),
                "occupationCode": data.get("occupationCode"),
                "occupationTitle": data.get("occupationTitle"),
            }
        )
        raw_dimensions = data.get("dimensionScores")
        if isinstance(raw_dimensions, Mapping):
            for dimension, raw in raw_dimensions.items():
                session.apply_event({"type": EVENT_DIMENSION_COMPLETED, "dimension": dimension, "scores": raw})
        session.apply_event(
            {
                "type": EVENT_ANALYSIS_COMPLETED,
                "analysisId": data.get("analysisId"),
                "overallFitScore": data.get("overallFitScore"),
                "fitCategory": data.get("fitCategory"),
                "recommendations": normalized["recommendations"],
            }
        )
        return session

    def apply_event(self, event: Any) -> None:
        if not isinstance(event, Mapping):
            logger.debug("Ignoring non-mapping stream chunk: %r", event)
            return

        progress = event.get("progress")
        if isinstance(progress, numbers.Real) and not isinstance(progress, bool):
            self.progress = format_progress(progress)

        event_type = event.get("type")
        if event_type == EVENT_ANALYSIS_STARTED:
            self.status = STATUS_PROCESSING
            self.analysis_id = event.get("analysisId") or self.analysis_id
            self.occupation_code = event.get("occupationCode") or self.occupation_code
            self.occupation_title = event.get("occupationTitle") or self.occupation_title
        elif event_type == EVENT_DIMENSION_COMPLETED:
            self._apply_dimension(event.get("dimension"), event.get("scores"))
        elif event_type == EVENT_ANALYSIS_COMPLETED:
            self.status = STATUS_COMPLETED
            self.progress = 100
            self.analysis_id = event.get("analysisId") or self.analysis_id
            self.reported_overall_score = event.get("overallFitScore")
            self.reported_fit_category = event.get("fitCategory")
            recommendations = event.get("recommendations")
            self.recommendations = list(recommendations) if isinstance(recommendations, list) else []
            logger.info(
                "Analysis %s completed with %d/%d dimensions",
                self.analysis_id,
                len(self._scores),
                len(self.expected_dimensions),
            )
        elif event_type == EVENT_ERROR:
            self.status = STATUS_FAILED
            self.error = event.get("error") or "Analysis failed"
            logger.warning("Analysis %s reported an error: %s", self.analysis_id, self.error)
        else:
            logger.debug("Ignoring stream chunk of type %r", event_type)

    def _apply_dimension(self, dimension: Any, raw: Any) -> None:
        if not isinstance(dimension, str) or not dimension:
            logger.debug("Dropping dimension_completed chunk without a dimension key")
            return
        if self.status == STATUS_PENDING:
            self.status = STATUS_PROCESSING

        scores = dict(self._scores)
        scores[dimension] = normalize(raw)
        confidence = dict(self._confidence)
        confidence[dimension] = raw_confidence(raw)

        self._scores = MappingProxyType(scores)
        self._confidence = MappingProxyType(confidence)
        logger.debug("Dimension %s scored %s", dimension, scores[dimension].score)

    def snapshot(self) -> Mapping[str, DimensionScore]:
        return self._scores

    def confidence(self, dimension: str) -> str | None:
        return self._confidence.get(dimension)

    def pending_dimensions(self) -> list[str]:
        return [d for d in self.expected_dimensions if d not in self._scores]

    @property
    def is_complete(self) -> bool:
        return self.status == STATUS_COMPLETED or not self.pending_dimensions()

    def overall_score(self) -> int:
        return calculate_overall_score(self._scores)

    def weighted_score(self) -> float:
        return weighted_overall_score(self._scores, self.policy)

    def improvements(self) -> list[ImprovementItem]:
        return compute_impact(self._scores, self.policy)

    def to_dict(self) -> dict[str, Any]:
        weighted = self.weighted_score()
        category = fit_category(weighted)
        return {
            "analysisId": self.analysis_id,
            "occupationCode": self.occupation_code,
            "occupationTitle": self.occupation_title,
            "status": self.status,
            "progress": self.progress,
            "error": self.error,
            "dimensionScores": {key: score.to_dict() for key, score in self._scores.items()},
            "overallScore": self.overall_score(),
            "weightedScore": weighted,
            "fitCategory": category.category,
            "recommendations": list(self.recommendations),
            "improvementImpact": [item.to_dict() for item in self.improvements()],
        }
