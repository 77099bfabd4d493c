"""
Pydantic models for the catalog, search and triage surfaces.
Wire names are camelCase (pageSize, nextStep, isCrisis, ...); Python attributes are snake_case.
Request models are lenient: from_raw() never raises, bad values fall back to permissive defaults.
"""

import math
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from vetmatch.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

OrgType = Literal["institutional", "grassroots", "regional", "unknown"]
Track = Literal["institutional", "grassroots", "regional"]
Severity = Literal["low", "moderate", "high", "crisis"]
Priority = Literal["high", "medium", "low"]
Step = Literal["welcome", "category", "symptoms", "severity", "context", "assess"]

TRACKS: tuple[Track, ...] = ("institutional", "grassroots", "regional")
STEPS: tuple[str, ...] = ("welcome", "category", "symptoms", "severity", "context", "assess")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Lenient coercion helpers ---


def _coerce_text(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _coerce_text_list(value: Any) -> list[str]:
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return []
    out = []
    for item in value:
        text = _coerce_text(item)
        if text:
            out.append(text)
    return out


def _coerce_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return int(number)


def _coerce_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


# --- Catalog ---


class Contact(CamelModel):
    phone: str | None = None
    email: str | None = None
    url: str | None = None


class Resource(CamelModel):
    """One catalog entry. Loosely structured: only id is required."""

    id: str
    title: str = ""
    description: str = ""
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    organization: str = ""
    org_type: OrgType = "unknown"
    location: str | None = None
    is_verified: bool = False
    is_featured: bool = False
    rating: float = 0.0
    review_count: int = 0
    view_count: int = 0
    contact: Contact | None = None
    last_updated: datetime | None = None

    @field_validator("categories", "tags", mode="before")
    @classmethod
    def _text_list(cls, value: Any) -> list[str]:
        return _coerce_text_list(value)


# --- Recommendations ---


class Recommendation(CamelModel):
    track: Track
    title: str
    description: str = ""
    url: str = ""
    phone: str | None = None
    priority: Priority = "medium"
    note: str = ""
    resource_id: str | None = None


class RecommendationSet(CamelModel):
    institutional: list[Recommendation] = Field(default_factory=list)
    grassroots: list[Recommendation] = Field(default_factory=list)
    regional: list[Recommendation] = Field(default_factory=list)

    def track(self, name: Track) -> list[Recommendation]:
        return getattr(self, name)

    def all(self) -> list[Recommendation]:
        return [*self.institutional, *self.grassroots, *self.regional]


# --- Search ---


class SearchRequest(CamelModel):
    query: str | None = None
    category: str | None = None
    symptoms: list[str] = Field(default_factory=list)
    severity: str | None = None
    location: str | None = None
    resource_type: str | None = None
    min_rating: float | None = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    seed: str | None = None

    @field_validator("query", "category", "severity", "location", "resource_type", "seed", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str | None:
        return _coerce_text(value)

    @field_validator("symptoms", mode="before")
    @classmethod
    def _symptoms(cls, value: Any) -> list[str]:
        return _coerce_text_list(value)

    @field_validator("min_rating", mode="before")
    @classmethod
    def _min_rating(cls, value: Any) -> float | None:
        return _coerce_float(value)

    @field_validator("page", mode="before")
    @classmethod
    def _page(cls, value: Any) -> int:
        page = _coerce_int(value)
        return page if page is not None and page >= 1 else 1

    @field_validator("page_size", mode="before")
    @classmethod
    def _page_size(cls, value: Any) -> int:
        size = _coerce_int(value)
        if size is None or size < 1:
            return DEFAULT_PAGE_SIZE
        return min(size, MAX_PAGE_SIZE)

    @classmethod
    def from_raw(cls, payload: Any) -> "SearchRequest":
        """Build from an untrusted body; anything unusable becomes an empty request."""
        if not isinstance(payload, dict):
            return cls()
        return cls.model_validate(payload)


class Pagination(CamelModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int


class SearchResponse(CamelModel):
    success: bool = True
    degraded: bool = False
    level: str = "full"
    relaxed_levels: list[str] = Field(default_factory=list)
    data: list[Resource] = Field(default_factory=list)
    pagination: Pagination


class SearchErrorResponse(CamelModel):
    success: bool = False
    message: str
    error: str


class RecommendResponse(CamelModel):
    success: bool = True
    severity: Severity
    degraded: bool = False
    recommendations: RecommendationSet


# --- Triage ---


class TriageMessage(CamelModel):
    role: str = "user"
    content: str = ""

    @field_validator("role", "content", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _coerce_text(value) or ""


class TriageAnswers(CamelModel):
    """Answers captured so far, keyed by the step that collected them."""

    category: str | None = None
    symptoms: list[str] = Field(default_factory=list)
    severity_level: int | None = None
    duration: str | None = None
    current_care: str | None = None
    location: str | None = None

    @field_validator("severity_level", mode="before")
    @classmethod
    def _severity_level(cls, value: Any) -> int | None:
        level = _coerce_int(value)
        if level is None:
            return None
        return max(1, min(5, level))


class TriageRequest(CamelModel):
    messages: list[TriageMessage] = Field(default_factory=list)
    step: Step = "welcome"
    category: str | None = None
    symptoms: list[str] = Field(default_factory=list)
    severity_level: int | None = None
    duration: str | None = None
    current_care: str | None = None
    location: str | None = None
    user_message: str | None = None
    seed: str | None = None

    @field_validator("messages", mode="before")
    @classmethod
    def _messages(cls, value: Any) -> list[dict]:
        if not isinstance(value, list):
            return []
        return [m for m in value if isinstance(m, dict)]

    @field_validator("step", mode="before")
    @classmethod
    def _step(cls, value: Any) -> str:
        step = (_coerce_text(value) or "").lower()
        return step if step in STEPS else "welcome"

    @field_validator("category", "duration", "current_care", "location", "user_message", "seed", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str | None:
        return _coerce_text(value)

    @field_validator("symptoms", mode="before")
    @classmethod
    def _symptoms(cls, value: Any) -> list[str]:
        return _coerce_text_list(value)

    @field_validator("severity_level", mode="before")
    @classmethod
    def _severity_level(cls, value: Any) -> int | None:
        return _coerce_int(value)

    @classmethod
    def from_raw(cls, payload: Any) -> "TriageRequest":
        """Build from an untrusted body; a missing or unknown step degrades to welcome."""
        if not isinstance(payload, dict):
            return cls()
        return cls.model_validate(payload)

    def answers(self) -> TriageAnswers:
        return TriageAnswers(
            category=self.category,
            symptoms=list(self.symptoms),
            severity_level=self.severity_level,
            duration=self.duration,
            current_care=self.current_care,
            location=self.location,
        )

    def user_texts(self) -> list[str]:
        """Every user-authored string in the request: latest answer, prior user messages, symptoms."""
        texts = [self.user_message or ""]
        texts.extend(m.content for m in self.messages if m.role == "user")
        texts.extend(self.symptoms)
        return [t for t in texts if t]


class TriageResponse(CamelModel):
    ai_message: str
    next_step: str
    is_crisis: bool = False
    severity: Severity | None = None
    recommendations: RecommendationSet | None = None
    suggested_questions: list[str] | None = None


class TriageSession(CamelModel):
    """Client-held conversation state. Discarded once the step is terminal."""

    messages: list[TriageMessage] = Field(default_factory=list)
    step: str = "welcome"
    answers: TriageAnswers = Field(default_factory=TriageAnswers)
    is_crisis: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.step in ("complete", "crisis")
