from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from fitcore.errors import PolicyError

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parents[1]
DEFAULT_POLICY_PATH = BASE_DIR / "data" / "scoring_policy.json"
POLICY_PATH_ENV = "FITCORE_POLICY_PATH"

EXPECTED_DIMENSIONS = (
    "tasks",
    "skills",
    "technologySkills",
    "education",
    "workActivities",
    "abilities",
    "knowledge",
    "tools",
)

DEFAULT_DIMENSION_WEIGHTS = {
    "tasks": 0.20,
    "skills": 0.20,
    "technologySkills": 0.15,
    "education": 0.10,
    "tools": 0.10,
    "workActivities": 0.10,
    "abilities": 0.10,
    "knowledge": 0.05,
}

DEFAULT_WEIGHT = 0.10
TARGET_SCORE = 80
HIGH_PRIORITY_GAP = 15.0
MEDIUM_PRIORITY_GAP = 8.0


@dataclass(frozen=True)
class ScoringPolicy:
    """Weights and thresholds used by the impact calculator.

    Priority thresholds apply to the weighted gap, ``(100 - score) * weight``,
    not to the raw score gap.
    """

    weights: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_DIMENSION_WEIGHTS))
    default_weight: float = DEFAULT_WEIGHT
    target_score: int = TARGET_SCORE
    high_priority_gap: float = HIGH_PRIORITY_GAP
    medium_priority_gap: float = MEDIUM_PRIORITY_GAP

    def weight_for(self, dimension: str) -> float:
        return self.weights.get(dimension, self.default_weight)


def default_policy() -> ScoringPolicy:
    return ScoringPolicy()


def _as_number(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PolicyError(f"Policy value '{key}' must be a number, got {value!r}")
    return float(value)


def policy_from_dict(raw: dict[str, Any]) -> ScoringPolicy:
    if not isinstance(raw, dict):
        raise PolicyError("Policy document must be a JSON object")

    weights_raw = raw.get("weights", DEFAULT_DIMENSION_WEIGHTS)
    if not isinstance(weights_raw, dict):
        raise PolicyError("Policy 'weights' must be an object of dimension -> weight")
    weights = {str(key): _as_number(value, f"weights.{key}") for key, value in weights_raw.items()}

    thresholds = raw.get("priority_thresholds", {})
    if not isinstance(thresholds, dict):
        raise PolicyError("Policy 'priority_thresholds' must be an object")

    return ScoringPolicy(
        weights=weights,
        default_weight=_as_number(raw.get("default_weight", DEFAULT_WEIGHT), "default_weight"),
        target_score=int(_as_number(raw.get("target_score", TARGET_SCORE), "target_score")),
        high_priority_gap=_as_number(thresholds.get("high", HIGH_PRIORITY_GAP), "priority_thresholds.high"),
        medium_priority_gap=_as_number(
            thresholds.get("medium", MEDIUM_PRIORITY_GAP), "priority_thresholds.medium"
        ),
    )


def load_policy(path: str | Path | None = None) -> ScoringPolicy:
    policy_path = Path(path or os.getenv(POLICY_PATH_ENV) or DEFAULT_POLICY_PATH)
    try:
        with policy_path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError as exc:
        raise PolicyError(f"Scoring policy not found: {policy_path}") from exc
    except json.JSONDecodeError as exc:
        raise PolicyError(f"Scoring policy is not valid JSON: {policy_path}: {exc}") from exc

    policy = policy_from_dict(raw)
    logger.info("Loaded scoring policy from %s (%d weights)", policy_path, len(policy.weights))
    return policy
