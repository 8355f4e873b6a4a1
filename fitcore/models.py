from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

PRIORITY_HIGH = "high"
PRIORITY_MEDIUM = "medium"
PRIORITY_LOW = "low"
PRIORITY_ACHIEVED = "achieved"


@dataclass
class DimensionScore:
    score: float
    matches: list[str] = field(default_factory=list)
    gaps: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"score": self.score, "matches": list(self.matches), "gaps": list(self.gaps)}


# Raw producer payloads, classified once by runtime shape.
@dataclass(frozen=True)
class NumericScore:
    value: float


@dataclass(frozen=True)
class RichScore:
    score: float
    matches: tuple[str, ...] = ()
    gaps: tuple[str, ...] = ()
    confidence: str | None = None
    extras: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class InvalidScore:
    raw: Any = None


RawDimension = Union[NumericScore, RichScore, InvalidScore]


@dataclass
class ImprovementItem:
    dimension: str
    current_score: float
    target_score: int
    potential_impact: int
    priority: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "dimension": self.dimension,
            "currentScore": self.current_score,
            "targetScore": self.target_score,
            "potentialImpact": self.potential_impact,
            "priority": self.priority,
        }


@dataclass
class FitCategory:
    category: str
    color: str
    description: str


@dataclass
class BreakdownEntry:
    dimension: str
    label: str
    score: float
    matches: int
    gaps: int
    strength_areas: list[str] = field(default_factory=list)
    alternative_tools: list[str] = field(default_factory=list)


@dataclass
class ImprovementSummary:
    significant: list[ImprovementItem]
    achieved: list[ImprovementItem]
    quick_wins: list[ImprovementItem]
    total_potential_gain: int
    quick_win_gain: int
