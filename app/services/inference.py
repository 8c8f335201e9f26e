"""Client for the external complaint classification service.

``classify`` is total: every failure mode (unconfigured URL, timeout, transport
error, non-2xx status, malformed payload) resolves to the fallback prediction
so complaint intake keeps working while the model is down.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, asdict
from typing import Any, Mapping, Optional

import httpx
from flask import current_app

from app.config import DEFAULT_FALLBACK_RESPONSE

REQUIRED_FIELDS = ("category", "sentiment", "priority", "ai_response")

FALLBACK_CATEGORY = "Other"
FALLBACK_SENTIMENT = "Neutral"
FALLBACK_PRIORITY = "Low"
FALLBACK_CONFIDENCE = 50
FALLBACK_EXPLANATION = "Using fallback values due to ML service unavailability."


@dataclass(frozen=True)
class Prediction:
    category: str
    sentiment: str
    priority: str
    ai_response: str
    confidence_score: int = 0
    explanation: str = ""
    is_fallback: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


class UpstreamUnavailable(Exception):
    """Inference call failed. Never leaves this module."""


def fallback_prediction() -> Prediction:
    return Prediction(
        category=FALLBACK_CATEGORY,
        sentiment=FALLBACK_SENTIMENT,
        priority=FALLBACK_PRIORITY,
        ai_response=current_app.config.get("FALLBACK_RESPONSE") or DEFAULT_FALLBACK_RESPONSE,
        confidence_score=FALLBACK_CONFIDENCE,
        explanation=FALLBACK_EXPLANATION,
        is_fallback=True,
    )


def _http_client(timeout: float) -> httpx.Client:
    return httpx.Client(timeout=timeout)


def _coerce_confidence(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(score):
        return 0
    # inf clamps like any other out-of-range score
    return int(round(max(0.0, min(100.0, score))))


def parse_prediction(payload: Any) -> Prediction:
    """Validate an upstream payload; raise UpstreamUnavailable if it is unusable."""
    if not isinstance(payload, Mapping):
        raise UpstreamUnavailable(f"payload is not an object: {type(payload).__name__}")

    values = {}
    for field in REQUIRED_FIELDS:
        raw = payload.get(field)
        if not isinstance(raw, str) or not raw.strip():
            raise UpstreamUnavailable(f"payload missing {field!r}")
        values[field] = raw

    explanation = payload.get("explanation")
    return Prediction(
        confidence_score=_coerce_confidence(payload.get("confidence_score")),
        explanation=explanation if isinstance(explanation, str) else "",
        **values,
    )


def _request_prediction(base_url: str, complaint_text: str, timeout: float) -> Prediction:
    url = f"{base_url.rstrip('/')}/predict"
    try:
        with _http_client(timeout) as client:
            resp = client.post(url, json={"complaint_text": complaint_text})
    except httpx.TimeoutException as exc:
        raise UpstreamUnavailable(f"timed out after {timeout}s") from exc
    except httpx.HTTPError as exc:
        raise UpstreamUnavailable(f"transport error: {exc}") from exc

    if not resp.is_success:
        raise UpstreamUnavailable(f"status {resp.status_code}")

    try:
        payload = resp.json()
    except ValueError as exc:
        raise UpstreamUnavailable("response body is not JSON") from exc

    return parse_prediction(payload)


def classify(complaint_text: str, base_url: Optional[str] = None, timeout: Optional[float] = None) -> Prediction:
    base_url = base_url if base_url is not None else current_app.config.get("ML_SERVICE_URL")
    timeout = timeout if timeout is not None else float(current_app.config.get("ML_SERVICE_TIMEOUT", 10))

    if not base_url:
        current_app.logger.warning("ML_SERVICE_URL not configured; using fallback prediction")
        return fallback_prediction()

    try:
        prediction = _request_prediction(base_url, complaint_text, timeout)
    except UpstreamUnavailable as exc:
        current_app.logger.warning("ML service unavailable (%s); using fallback prediction", exc)
        return fallback_prediction()
    except Exception:
        current_app.logger.exception("Unexpected error calling ML service; using fallback prediction")
        return fallback_prediction()

    current_app.logger.info(
        "ML prediction category=%s priority=%s confidence=%s",
        prediction.category, prediction.priority, prediction.confidence_score,
    )
    return prediction
