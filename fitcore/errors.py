from __future__ import annotations


class FitcoreError(Exception):
    """Base class for errors raised outside the scoring path."""


class PolicyError(FitcoreError):
    """Scoring policy file is missing or malformed."""


class AnalysisStreamError(FitcoreError):
    """Analysis stream could not be opened or read."""
