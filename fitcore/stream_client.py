from __future__ import annotations

import json
import logging
import os
import time
import uuid
from typing import Any, Iterator

import requests

from fitcore.errors import AnalysisStreamError
from fitcore.session import AnalysisSession

logger = logging.getLogger(__name__)

ANALYSIS_URL_ENV = "FITCORE_ANALYSIS_URL"
DEFAULT_TIMEOUT = 120


def analysis_url() -> str | None:
    return os.getenv(ANALYSIS_URL_ENV)


def new_request_id() -> str:
    return f"req_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _decode_line(line: Any) -> dict[str, Any] | None:
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    line = (line or "").strip()
    if not line:
        return None
    try:
        chunk = json.loads(line)
    except json.JSONDecodeError:
        logger.warning("Skipping undecodable stream line: %.120s", line)
        return None
    if not isinstance(chunk, dict):
        logger.warning("Skipping non-object stream chunk: %.120s", line)
        return None
    return chunk


def iter_analysis_events(
    url: str,
    payload: dict[str, Any],
    timeout: float = DEFAULT_TIMEOUT,
) -> Iterator[dict[str, Any]]:
    """Yield decoded chunks from a newline-delimited JSON analysis stream."""
    try:
        with requests.post(url, json=payload, stream=True, timeout=timeout) as response:
            response.raise_for_status()
            for line in response.iter_lines(decode_unicode=True):
                chunk = _decode_line(line)
                if chunk is not None:
                    yield chunk
    except requests.RequestException as exc:
        raise AnalysisStreamError(f"Analysis stream from {url} failed: {exc}") from exc


def run_streamed_analysis(
    resume_id: str,
    occupation_code: str,
    url: str | None = None,
    session: AnalysisSession | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> AnalysisSession:
    url = url or analysis_url()
    if not url:
        raise AnalysisStreamError(f"No analysis endpoint configured; set {ANALYSIS_URL_ENV}")

    session = session or AnalysisSession()
    payload = {
        "resumeId": resume_id,
        "occupationCode": occupation_code,
        "requestId": new_request_id(),
    }
    logger.info("Streaming analysis for resume %s against %s", resume_id, occupation_code)
    for chunk in iter_analysis_events(url, payload, timeout=timeout):
        session.apply_event(chunk)
    return session
