from __future__ import annotations

import math
import re

from fitcore.models import PRIORITY_ACHIEVED, PRIORITY_HIGH, PRIORITY_LOW, PRIORITY_MEDIUM
from fitcore.normalizer import round_half_up

DIMENSION_NAMES = {
    "tasks": "Job Tasks",
    "skills": "Core Skills",
    "technologySkills": "Technology Skills",
    "education": "Education",
    "tools": "Tools & Software",
    "workActivities": "Work Activities",
    "abilities": "Abilities",
    "knowledge": "Knowledge Areas",
}

PRIORITY_LABELS = {
    PRIORITY_HIGH: "High Priority",
    PRIORITY_MEDIUM: "Medium Priority",
    PRIORITY_LOW: "Low Priority",
    PRIORITY_ACHIEVED: "Target Met",
}


def format_dimension_name(dimension: str) -> str:
    if dimension in DIMENSION_NAMES:
        return DIMENSION_NAMES[dimension]
    spaced = re.sub(r"([A-Z])", r" \1", dimension).strip()
    return spaced[:1].upper() + spaced[1:]


def priority_label(priority: str) -> str:
    return PRIORITY_LABELS.get(priority, "Priority")


def format_progress(value: float) -> int:
    try:
        value = float(value)
    except OverflowError:
        return 100 if value > 0 else 0
    if math.isnan(value):
        return 0
    return round_half_up(min(100.0, max(0.0, value)))
