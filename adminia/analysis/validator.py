"""Decodes a parsed model response into an AnalysisResult with per-field defaults."""

import math
from typing import Any

from adminia.analysis.models import AnalysisResult
from adminia.documents.categories import coerce_category
from adminia.logging.logger import Log

DEFAULT_CONFIDENCE = 0.5
DEFAULT_DOCUMENT_TYPE = "Unknown"
_MAX_KEY_INFORMATION = 50


def build_analysis_result(data: dict[str, Any]) -> AnalysisResult:
    """Build a fully defaulted AnalysisResult from a decoded JSON object.

    Missing or mistyped fields never fail: each one falls back to its default.
    """
    return AnalysisResult(
        category=coerce_category(data.get("category")),
        confidence=_build_confidence(data.get("confidence")),
        extracted_data=_build_extracted_data(data.get("extractedData")),
        summary=_build_summary(data.get("summary")),
        key_information=_build_key_information(data.get("keyInformation")),
        document_type=_build_document_type(data.get("documentType")),
    )


def _build_confidence(raw: Any) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        if raw is not None:
            Log.warning(f"Ignoring non-numeric confidence {raw!r}")
        return DEFAULT_CONFIDENCE
    value = float(raw)
    if math.isnan(value):
        return DEFAULT_CONFIDENCE
    return max(0.0, min(1.0, value))


def _build_extracted_data(raw: Any) -> dict[str, Any]:
    if isinstance(raw, dict):
        return {str(key): value for key, value in raw.items()}
    if raw is not None:
        Log.warning(f"Ignoring extractedData of type {type(raw).__name__}")
    return {}


def _build_summary(raw: Any) -> str:
    return raw.strip() if isinstance(raw, str) else ""


def _build_key_information(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    if len(raw) > _MAX_KEY_INFORMATION:
        Log.warning(
            f"Keeping the first {_MAX_KEY_INFORMATION} of {len(raw)} keyInformation items"
        )
    items: list[str] = []
    for item in raw[:_MAX_KEY_INFORMATION]:
        if isinstance(item, str):
            text = item.strip()
        elif isinstance(item, (int, float)) and not isinstance(item, bool):
            text = str(item)
        else:
            continue
        if text:
            items.append(text)
    return items


def _build_document_type(raw: Any) -> str:
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    return DEFAULT_DOCUMENT_TYPE
