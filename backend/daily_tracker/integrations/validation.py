"""Validation of AI responses.

Coerces model output into strict structures: missing fields get defaults,
out-of-range scores are clamped, list items are forced to strings.
"""

import logging

from pydantic import Field, ValidationError, field_validator

from ..records import WireModel

logger = logging.getLogger(__name__)

UNPARSEABLE_SCORE = -1


class ResumeAnalysisResult(WireModel):
    ats_score: int = UNPARSEABLE_SCORE
    matching_skills: list[str] = Field(default_factory=list)
    areas_for_improvement: list[str] = Field(default_factory=list)
    raw_response: str | None = None

    @field_validator("ats_score", mode="before")
    @classmethod
    def clamp_score(cls, v: object) -> int:
        try:
            score = int(float(v))
        except (TypeError, ValueError):
            return UNPARSEABLE_SCORE
        if score == UNPARSEABLE_SCORE:
            return score
        return max(0, min(100, score))

    @field_validator("matching_skills", "areas_for_improvement", mode="before")
    @classmethod
    def coerce_items(cls, v: object) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [v] if v.strip() else []
        if not isinstance(v, list):
            return [str(v)]
        items = []
        for item in v:
            if isinstance(item, dict):
                item = item.get("skill") or item.get("text") or next(iter(item.values()), "")
            text = str(item).strip()
            if text:
                items.append(text)
        return items


def unparseable_analysis(raw_text: str, reason: str) -> dict:
    """Result returned when the model output cannot be used."""
    return ResumeAnalysisResult(
        ats_score=UNPARSEABLE_SCORE,
        areas_for_improvement=[reason],
        raw_response=raw_text,
    ).model_dump(by_alias=True)


def validate_resume_analysis(data: dict, raw_text: str) -> dict:
    if "atsScore" not in data and "ats_score" not in data:
        logger.warning("AI analysis is missing atsScore, keys=%s", list(data))
        return unparseable_analysis(raw_text, "Could not parse AI response accurately. Please review raw output.")
    try:
        result = ResumeAnalysisResult.model_validate(data)
    except ValidationError:
        logger.warning("AI analysis failed validation", exc_info=True)
        return unparseable_analysis(raw_text, "Could not parse AI response accurately. Please review raw output.")
    return result.model_dump(by_alias=True, exclude_none=True)
