from __future__ import annotations

import json
from pathlib import Path

import pytest

from fitcore.config import ScoringPolicy
from fitcore.session import AnalysisSession

BASE_DIR = Path(__file__).resolve().parents[1]


def _load_sample() -> dict:
    with (BASE_DIR / "data" / "sample_analysis.json").open("r", encoding="utf-8") as f:
        return json.load(f)


def _dimension(key: str, scores) -> dict:
    return {"type": "dimension_completed", "dimension": key, "scores": scores}


def test_dimensions_accumulate_in_any_order():
    session = AnalysisSession(expected_dimensions=("tasks", "skills", "tools"))
    session.apply_event({"type": "analysis_started", "analysisId": "a1", "occupationTitle": "Analyst", "progress": 0})
    session.apply_event(_dimension("tools", 40))
    session.apply_event(_dimension("tasks", {"score": 75, "matches": ["Reporting"], "gaps": [], "confidence": "high"}))

    assert session.status == "processing"
    assert session.analysis_id == "a1"
    assert set(session.snapshot()) == {"tools", "tasks"}
    assert session.pending_dimensions() == ["skills"]
    assert not session.is_complete
    assert session.confidence("tasks") == "high"

    session.apply_event(_dimension("skills", 90))
    assert session.is_complete


def test_last_write_per_dimension_wins():
    session = AnalysisSession()
    session.apply_event(_dimension("skills", 40))
    session.apply_event(_dimension("skills", {"score": 65, "gaps": ["SQL"]}))
    assert session.snapshot()["skills"].score == 65
    assert session.snapshot()["skills"].gaps == ["SQL"]


def test_snapshots_are_read_only_and_stable():
    session = AnalysisSession()
    session.apply_event(_dimension("skills", 40))
    before = session.snapshot()

    session.apply_event(_dimension("tasks", 70))
    assert list(before) == ["skills"]
    with pytest.raises(TypeError):
        before["tasks"] = None


def test_malformed_chunks_are_ignored():
    session = AnalysisSession()
    session.apply_event(None)
    session.apply_event("dimension_completed")
    session.apply_event({"type": "dimension_completed", "scores": 50})
    session.apply_event({"type": "something_new", "progress": 150})

    assert session.snapshot() == {}
    assert session.status == "pending"
    assert session.progress == 100


def test_malformed_dimension_payload_scores_zero():
    session = AnalysisSession()
    session.apply_event(_dimension("tools", "not a score"))
    assert session.snapshot()["tools"].score == 0
    assert session.snapshot()["tools"].matches == []


def test_error_chunk_marks_session_failed():
    session = AnalysisSession()
    session.apply_event(_dimension("skills", 50))
    session.apply_event({"type": "error", "error": "Insufficient credits"})
    assert session.status == "failed"
    assert session.error == "Insufficient credits"
    assert session.snapshot()["skills"].score == 50


def test_completion_records_backend_summary():
    session = AnalysisSession()
    session.apply_event(_dimension("skills", 50))
    session.apply_event(
        {
            "type": "analysis_completed",
            "analysisId": "a9",
            "overallFitScore": 61.5,
            "recommendations": ["Take a SQL course"],
            "progress": 100,
        }
    )
    assert session.status == "completed"
    assert session.progress == 100
    assert session.reported_overall_score == 61.5
    assert session.recommendations == ["Take a SQL course"]
    assert session.is_complete


def test_improvements_use_session_policy_on_partial_state():
    session = AnalysisSession(policy=ScoringPolicy(weights={"skills": 0.20, "education": 0.15}))
    session.apply_event(_dimension("education", 90))
    session.apply_event(_dimension("skills", 50))

    items = session.improvements()
    assert [item.dimension for item in items] == ["skills", "education"]
    assert items[0].potential_impact == 6
    assert session.overall_score() == 70


def test_from_record_replays_sample_analysis():
    session = AnalysisSession.from_record(_load_sample())

    assert session.status == "completed"
    assert session.analysis_id == "demo-analysis"
    assert session.occupation_title == "Data Scientists"
    assert len(session.snapshot()) == 8
    assert session.pending_dimensions() == []
    assert session.snapshot()["education"].score == 90
    assert session.confidence("tasks") == "high"
    assert len(session.recommendations) == 2

    payload = session.to_dict()
    assert payload["fitCategory"] == "Good Match"
    assert payload["weightedScore"] == 71.8
    assert payload["improvementImpact"][0]["dimension"] == "tasks"


def test_from_record_tolerates_non_mapping():
    session = AnalysisSession.from_record(None)
    assert session.status == "pending"
    assert session.snapshot() == {}


def test_reset_clears_state():
    session = AnalysisSession()
    session.apply_event(_dimension("skills", 50))
    session.apply_event({"type": "error", "error": "boom"})
    session.reset()
    assert session.snapshot() == {}
    assert session.status == "pending"
    assert session.error is None


def test_oversized_stream_values_do_not_break_session():
    huge = json.loads("1" + "0" * 400)
    session = AnalysisSession()
    session.apply_event(_dimension("skills", huge))
    session.apply_event({"type": "processing_started", "progress": huge})

    assert session.snapshot()["skills"].score == 0
    assert session.progress == 100
    assert session.improvements()[0].priority == "high"
