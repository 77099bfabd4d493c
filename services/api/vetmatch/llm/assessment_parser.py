"""
Parse the collaborator's assess-step output into a structured assessment.

The boundary is a sum type: ParsedAssessment (a validated JSON object was found) or
RawAssessment (anything else, kept as free text). Partial JSON is never repaired.
"""

import json
from typing import Any, Callable, NamedTuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from vetmatch.matching.query_builder import severity_tier
from vetmatch.models import Recommendation, RecommendationSet, Severity, TRACKS, TriageResponse
from vetmatch.safety.crisis_bundle import build_crisis_response

DEFAULT_ASSESSMENT_MESSAGE = (
    "Based on what you've shared, here are some resources that may help. Remember, this is for "
    "informational purposes only. Please consult a healthcare provider for personalized medical advice."
)

# Older prompt shapes name the tracks after the organization kind.
_LEGACY_TRACK_KEYS = {
    "vaResources": "institutional",
    "ngoResources": "grassroots",
    "stateResources": "regional",
    "institutionalResources": "institutional",
    "grassrootsResources": "grassroots",
    "regionalResources": "regional",
}

_PRIORITIES = ("high", "medium", "low")


class AssessmentResource(BaseModel):
    title: str
    description: str = ""
    url: str = ""
    phone: str | None = None
    priority: str = "medium"

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("title is required")
        return value.strip()

    @field_validator("description", "url", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return value.strip() if isinstance(value, str) else ""

    @field_validator("phone", mode="before")
    @classmethod
    def _phone(cls, value: Any) -> str | None:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            return value.strip() or None
        return None

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, value: Any) -> str:
        priority = value.strip().lower() if isinstance(value, str) else ""
        return priority if priority in _PRIORITIES else "medium"


def _valid_resources(value: Any) -> list[AssessmentResource]:
    """Keep the entries that validate; drop the rest."""
    if not isinstance(value, list):
        return []
    kept = []
    for item in value:
        if not isinstance(item, dict):
            continue
        try:
            kept.append(AssessmentResource.model_validate(item))
        except ValidationError:
            continue
    return kept


class ParsedAssessment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    severity: Severity = "moderate"
    summary: str = ""
    ai_message: str = Field(default="", alias="aiMessage")
    institutional: list[AssessmentResource] = Field(default_factory=list)
    grassroots: list[AssessmentResource] = Field(default_factory=list)
    regional: list[AssessmentResource] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _legacy_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for legacy, track in _LEGACY_TRACK_KEYS.items():
            if legacy in data and track not in data:
                data[track] = data.pop(legacy)
        return data

    @field_validator("severity", mode="before")
    @classmethod
    def _severity(cls, value: Any) -> str:
        return severity_tier(value if isinstance(value, str) else None) or "moderate"

    @field_validator("summary", "ai_message", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return value.strip() if isinstance(value, str) else ""

    @field_validator("institutional", "grassroots", "regional", mode="before")
    @classmethod
    def _resources(cls, value: Any) -> list[AssessmentResource]:
        return _valid_resources(value)

    def recommendations(self) -> list[Recommendation]:
        """Every resource entry, tagged with the track it was listed under."""
        out = []
        for track in TRACKS:
            for r in getattr(self, track):
                out.append(
                    Recommendation(
                        track=track,
                        title=r.title,
                        description=r.description,
                        url=r.url,
                        phone=r.phone,
                        priority=r.priority,
                        note="Suggested for your situation",
                    )
                )
        return out


class RawAssessment(NamedTuple):
    text: str


AssessmentResult = Union[ParsedAssessment, RawAssessment]


def extract_first_json_object(text: str) -> str | None:
    """
    Return the first balanced {...} substring, tracking string literals so braces inside
    strings do not count. None when there is no opening brace or it never closes.
    """
    if not text:
        return None
    start = text.find("{")
    if start == -1:
        return None
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def parse_assessment(raw: str) -> AssessmentResult:
    """Extract, decode and validate; any failure yields RawAssessment(raw)."""
    raw = (raw or "").strip()
    fragment = extract_first_json_object(raw)
    if fragment is None:
        return RawAssessment(raw)
    try:
        data = json.loads(fragment)
    except json.JSONDecodeError:
        return RawAssessment(raw)
    if not isinstance(data, dict):
        return RawAssessment(raw)
    try:
        return ParsedAssessment.model_validate(data)
    except ValidationError:
        return RawAssessment(raw)


# (severity, collaborator-suggested entries) -> composed three-track set
Recommend = Callable[[Severity, list[Recommendation]], RecommendationSet]


def assessment_response(result: AssessmentResult, *, recommend: Recommend) -> TriageResponse:
    """
    Turn a parse result into the terminal triage response.
    Crisis self-reported by the collaborator is replaced by the static crisis bundle; otherwise
    the suggested entries go through the recommender (and its composer) rather than verbatim.
    """
    if isinstance(result, RawAssessment):
        return TriageResponse(
            ai_message=result.text or DEFAULT_ASSESSMENT_MESSAGE,
            next_step="complete",
            severity="moderate",
            recommendations=recommend("moderate", []),
        )
    if result.severity == "crisis":
        return build_crisis_response()
    return TriageResponse(
        ai_message=result.ai_message or result.summary or DEFAULT_ASSESSMENT_MESSAGE,
        next_step="complete",
        severity=result.severity,
        recommendations=recommend(result.severity, result.recommendations()),
    )
