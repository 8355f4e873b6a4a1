from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import streamlit as st

from fitcore.config import EXPECTED_DIMENSIONS, load_policy
from fitcore.errors import AnalysisStreamError, PolicyError
from fitcore.impact import fit_category, score_breakdown, summarize_improvements
from fitcore.labels import format_dimension_name, priority_label
from fitcore.logging_config import setup_logging
from fitcore.session import AnalysisSession
from fitcore.stream_client import analysis_url, run_streamed_analysis

APP_TITLE = "Resume Fit Studio"
APP_SUBTITLE = "Dimension-level fit between a resume and a target occupation"
ROOT_DIR = Path(__file__).resolve().parent
SAMPLE_ANALYSIS_PATH = ROOT_DIR / "data" / "sample_analysis.json"
CONFIDENCE_BADGES = {"high": "High confidence", "medium": "Medium confidence", "low": "Low confidence"}
BREAKDOWN_TITLES = {
    "strengths": "Strengths",
    "adequate": "Adequate",
    "needsImprovement": "Needs Improvement",
    "critical": "Critical",
}


def load_sample_analysis() -> dict:
    with SAMPLE_ANALYSIS_PATH.open("r", encoding="utf-8") as f:
        return json.load(f)


def ensure_state():
    if "session" not in st.session_state:
        st.session_state["session"] = None
    if "raw_analysis" not in st.session_state:
        st.session_state["raw_analysis"] = None


def inject_styles():
    st.markdown(
        """
        <style>
        .hero-wrap {
            background: radial-gradient(circle at 20% 20%, #3b82f6 0%, #1d4ed8 35%, #0f172a 100%);
            border-radius: 18px;
            padding: 28px;
            color: #f8fafc;
            margin-bottom: 18px;
        }
        .hero-title { font-size: 2.2rem; font-weight: 700; margin-bottom: 0.4rem; }
        .hero-sub { opacity: 0.92; font-size: 1.03rem; }
        </style>
        """,
        unsafe_allow_html=True,
    )


def as_pct_label(value: float) -> str:
    return f"{value:.0f}%"


def render_hero():
    st.markdown(
        f"""
        <div class="hero-wrap">
          <div class="hero-title">{APP_TITLE}</div>
          <div class="hero-sub">{APP_SUBTITLE}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def render_summary(session: AnalysisSession):
    weighted = session.weighted_score()
    category = fit_category(weighted)
    c1, c2, c3 = st.columns(3)
    c1.metric("Weighted Fit Score", as_pct_label(weighted), category.category)
    c1.progress(min(100, max(0, int(weighted))) / 100.0)
    c2.metric("Average Dimension Score", as_pct_label(session.overall_score()))
    c3.metric("Dimensions Scored", f"{len(session.snapshot())}/{len(session.expected_dimensions)}", session.status)
    st.caption(category.description)
    pending = session.pending_dimensions()
    if pending:
        st.info("Still waiting on: " + ", ".join(format_dimension_name(d) for d in pending))


def render_dimension_cards(session: AnalysisSession):
    snapshot = session.snapshot()
    ordered = [d for d in EXPECTED_DIMENSIONS if d in snapshot] + [d for d in snapshot if d not in EXPECTED_DIMENSIONS]

    chart_df = pd.DataFrame(
        [{"Dimension": format_dimension_name(d), "Score": snapshot[d].score} for d in ordered]
    )
    if not chart_df.empty:
        st.bar_chart(chart_df.set_index("Dimension")[["Score"]])

    cols = st.columns(2)
    for i, dimension in enumerate(ordered):
        data = snapshot[dimension]
        with cols[i % 2]:
            st.markdown(f"#### {format_dimension_name(dimension)}")
            st.progress(min(100, max(0, int(data.score))) / 100.0)
            badge = CONFIDENCE_BADGES.get(session.confidence(dimension) or "")
            st.caption(f"Score {as_pct_label(data.score)}" + (f" · {badge}" if badge else ""))
            if data.matches:
                st.write("Matches: " + "; ".join(str(m) for m in data.matches))
            if data.gaps:
                st.write("Gaps: " + "; ".join(str(g) for g in data.gaps))


def render_improvement_impact(session: AnalysisSession):
    improvements = session.improvements()
    if not improvements:
        return

    summary = summarize_improvements(improvements)
    st.metric("Potential points", f"+{summary.total_potential_gain}")
    if summary.quick_wins:
        names = [format_dimension_name(item.dimension) for item in summary.quick_wins[:2]]
        st.success(
            f"Quick Win Strategy: focus on {' and '.join(names)} for the biggest score boost. "
            f"These areas alone could add +{summary.quick_win_gain} points to your overall score."
        )
    elif summary.achieved:
        st.success(
            f"All dimensions meet or exceed the target threshold of {session.policy.target_score}%."
        )

    impact_df = pd.DataFrame(
        [
            {
                "Dimension": format_dimension_name(item.dimension),
                "Priority": priority_label(item.priority),
                "Current": item.current_score,
                "Target": item.target_score,
                "Needed": max(0, item.target_score - item.current_score),
                "Potential Points": item.potential_impact,
            }
            for item in summary.significant + summary.achieved
        ]
    )
    st.dataframe(impact_df, use_container_width=True, hide_index=True)


def render_breakdown(session: AnalysisSession):
    breakdown = score_breakdown(session.snapshot())
    cols = st.columns(len(BREAKDOWN_TITLES))
    for col, (bucket, title) in zip(cols, BREAKDOWN_TITLES.items()):
        col.markdown(f"**{title}**")
        for entry in breakdown[bucket]:
            col.write(f"- {entry.label}: {as_pct_label(entry.score)} ({entry.matches} matches, {entry.gaps} gaps)")


def export_payload(session: AnalysisSession) -> dict:
    payload = session.to_dict()
    payload["exportedFrom"] = APP_TITLE
    return payload


def render_workspace(policy):
    with st.expander("Section A - Load Analysis", expanded=True):
        source = st.radio("Source", ["Sample analysis", "Upload JSON", "Stream from backend"], horizontal=True)
        if source == "Sample analysis":
            if st.button("Load sample"):
                st.session_state["raw_analysis"] = load_sample_analysis()
                st.session_state["session"] = None
        elif source == "Upload JSON":
            uploaded = st.file_uploader("Analysis JSON", type=["json"])
            if uploaded is not None:
                try:
                    st.session_state["raw_analysis"] = json.load(uploaded)
                    st.session_state["session"] = None
                except json.JSONDecodeError as exc:
                    st.error(f"Could not read analysis JSON: {exc}")
        else:
            st.caption("Streaming requires FITCORE_ANALYSIS_URL.")
            resume_id = st.text_input("Resume ID")
            occupation_code = st.text_input("Occupation code", value="15-2051.00")
            if st.button("Run streamed analysis", disabled=not analysis_url()):
                try:
                    st.session_state["session"] = run_streamed_analysis(
                        resume_id,
                        occupation_code,
                        session=AnalysisSession(policy=policy),
                    )
                    st.session_state["raw_analysis"] = None
                except AnalysisStreamError as exc:
                    st.error(str(exc))

    session = st.session_state.get("session")
    if session is None and st.session_state.get("raw_analysis") is not None:
        raw_analysis = st.session_state["raw_analysis"]
        if not isinstance(raw_analysis, dict):
            st.error("Analysis JSON must be an object.")
            return
        session = AnalysisSession.from_record(raw_analysis, policy=policy)
        st.session_state["session"] = session

    if session is None:
        st.info("Load an analysis in Section A to view results.")
        return
    if session.error:
        st.error(session.error)

    if session.occupation_title:
        st.subheader(session.occupation_title)

    with st.expander("Section B - Fit Summary", expanded=True):
        render_summary(session)
    with st.expander("Section C - Dimension Scores", expanded=True):
        render_dimension_cards(session)
    with st.expander("Section D - Improvement Opportunities", expanded=True):
        render_improvement_impact(session)
    with st.expander("Section E - Score Breakdown", expanded=False):
        render_breakdown(session)
    with st.expander("Section F - Recommendations + Export", expanded=False):
        for item in session.recommendations:
            st.write(f"- {item}")
        report = export_payload(session)
        st.download_button(
            "Download Analysis JSON",
            data=json.dumps(report, indent=2),
            file_name=f"{session.analysis_id or 'analysis'}_fit.json",
            mime="application/json",
        )


setup_logging()
st.set_page_config(page_title=APP_TITLE, layout="wide")
inject_styles()
render_hero()
ensure_state()

try:
    scoring_policy = load_policy()
except PolicyError as exc:
    st.error(str(exc))
    st.stop()

render_workspace(scoring_policy)
