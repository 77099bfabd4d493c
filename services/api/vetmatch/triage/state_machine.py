"""
Triage wizard: welcome -> category -> symptoms -> severity -> context -> assess -> complete | crisis.

Each turn is independent and reentrant. Order of work per turn:
1. Crisis gate on every user-authored string (latest answer, prior user messages, symptoms).
2. assess: ask the collaborator for strict JSON, parse it, build the three tracks.
3. Conversational steps: ask the collaborator for a short follow-up; static question on any failure.
The collaborator is optional. Nothing it does (raise, time out, return junk) can stall the wizard.
"""

import math
import re

from vetmatch.llm.assessment_parser import RawAssessment, assessment_response, parse_assessment
from vetmatch.llm.client import TextGenerator, generate_text
from vetmatch.llm.prompts import PROMPT_ASSESS, build_step_prompt
from vetmatch.logging_structured import NullLogger, StructuredLogger
from vetmatch.matching.recommender import Recommender
from vetmatch.matching.taxonomy import CATEGORY_TITLES, SYMPTOM_KEYWORDS
from vetmatch.models import (
    Recommendation,
    RecommendationSet,
    Severity,
    TriageAnswers,
    TriageMessage,
    TriageRequest,
    TriageResponse,
    TriageSession,
)
from vetmatch.safety.crisis import check_crisis
from vetmatch.safety.crisis_bundle import build_crisis_response

NEXT_STEP = {
    "welcome": "category",
    "category": "symptoms",
    "symptoms": "severity",
    "severity": "context",
    "context": "assess",
    "assess": "complete",
}

# Static questions, keyed by the step whose answer they follow.
FALLBACK_QUESTIONS = {
    "welcome": (
        "Welcome. I'm here to help you find health resources that fit your situation. "
        "Which area would you like help with today?"
    ),
    "category": (
        "Thank you for sharing that. Can you tell me more about what you're experiencing? "
        "What symptoms have you noticed?"
    ),
    "symptoms": "How long have you been experiencing these symptoms? Have they been getting better, worse, or staying the same?",
    "severity": (
        "On a scale of 1 to 5, how much do these symptoms affect your daily life? "
        "(1 = barely noticeable, 5 = severely impacting daily activities)"
    ),
    "context": (
        "Are you currently enrolled in VA healthcare or seeing any healthcare provider? "
        "This helps me recommend the right resources."
    ),
}

SUGGESTED_ANSWERS = {
    "welcome": list(CATEGORY_TITLES.values()),
    "symptoms": ["Less than a week", "A few weeks", "A few months", "More than a year"],
    "severity": ["1 - Barely noticeable", "2 - Mild", "3 - Moderate", "4 - Severe", "5 - Very severe"],
    "context": ["Enrolled in VA healthcare", "Seeing a private provider", "Not currently receiving care", "Not sure"],
}

# Symptom suggestions after a category is chosen. Typing or picking "Crisis & Urgent" trips the
# crisis gate first, so the "crisis" entry only serves callers that send category="crisis" directly.
_CATEGORY_SYMPTOMS = {
    "mental": ["Anxiety", "Depression", "PTSD", "Sleep problems", "Anger"],
    "physical": ["Chronic pain", "Headaches", "Hearing", "Mobility", "Fatigue"],
    "life": ["Housing", "Work", "Financial", "Relationships", "Isolation"],
    "crisis": ["I need to talk to someone now", "Substance use", "Grief"],
}

_CATEGORY_WORDS = (
    ("mental", ("mental", "emotional", "mood")),
    ("physical", ("physical", "body", "pain", "medical")),
    ("life", ("life", "social", "housing", "job", "money", "family")),
    ("crisis", ("crisis", "urgent")),
)

# Longest phrases first so "very severe" wins over "severe".
_SEVERITY_WORDS = (
    ("very severe", 5),
    ("extreme", 5),
    ("unbearable", 5),
    ("severe", 4),
    ("serious", 4),
    ("moderate", 3),
    ("mild", 2),
    ("barely", 1),
    ("minimal", 1),
)

_SCALAR = re.compile(r"(\d+(?:\.\d+)?)(?:\s*(?:/|out of)\s*(\d+))?")

# The answer sent with a step replies to the question asked at the previous step.
ANSWER_FIELDS = {
    "category": "category",
    "symptoms": "symptoms",
    "severity": "duration",
    "context": "severity_level",
    "assess": "current_care",
}


# --- Answer capture ---


def parse_category(text: str | None) -> str | None:
    """Category key for a free-text choice; unrecognized text is kept as given."""
    lower = (text or "").strip().lower()
    if not lower:
        return None
    for key, title in CATEGORY_TITLES.items():
        if lower in (key, title.lower()):
            return key
    for key, words in _CATEGORY_WORDS:
        if any(w in lower for w in words):
            return key
    return text.strip()


def parse_symptoms(text: str | None) -> list[str]:
    """Known symptom keys mentioned in the text; otherwise the comma-separated parts themselves."""
    lower = (text or "").lower()
    if not lower.strip():
        return []
    found = [key for key in SYMPTOM_KEYWORDS if re.search(rf"\b{re.escape(key)}\b", lower)]
    if found:
        return found
    return [part.strip() for part in re.split(r",|\band\b", lower) if part.strip()]


def parse_severity_level(text: str | None) -> int | None:
    """
    Severity scalar 1-5 from a number or wording. "7/10" and bare numbers above 5 are read on a
    1-10 scale and folded onto 1-5. None when nothing usable is present.
    """
    lower = (text or "").lower()
    match = _SCALAR.search(lower)
    if match:
        value = float(match.group(1))
        scale = int(match.group(2)) if match.group(2) else (10 if value > 5 else 5)
        if scale > 0:
            return max(1, min(5, math.ceil(value * 5 / scale)))
    for phrase, level in _SEVERITY_WORDS:
        if phrase in lower:
            return level
    return None


def capture_answer(step: str, answers: TriageAnswers, user_message: str | None) -> TriageAnswers:
    """Record the latest answer in the field its step collects. Values the caller already sent win."""
    field = ANSWER_FIELDS.get(step)
    if not user_message or not field or getattr(answers, field) not in (None, []):
        return answers
    if field == "category":
        value = parse_category(user_message)
    elif field == "symptoms":
        value = parse_symptoms(user_message)
    elif field == "severity_level":
        value = parse_severity_level(user_message)
    else:
        value = user_message.strip()
    return answers.model_copy(update={field: value})


def suggested_answers(step: str, answers: TriageAnswers) -> list[str]:
    if step == "category":
        return list(_CATEGORY_SYMPTOMS.get(answers.category or "", _CATEGORY_SYMPTOMS["mental"]))
    return list(SUGGESTED_ANSWERS.get(step, []))


def _answers_summary(answers: TriageAnswers) -> str:
    lines = []
    if answers.category:
        lines.append(f"Category: {CATEGORY_TITLES.get(answers.category, answers.category)}")
    if answers.symptoms:
        lines.append(f"Symptoms: {', '.join(answers.symptoms)}")
    if answers.duration:
        lines.append(f"Duration: {answers.duration}")
    if answers.severity_level is not None:
        lines.append(f"Impact on daily life (1-5): {answers.severity_level}")
    if answers.current_care:
        lines.append(f"Current care: {answers.current_care}")
    if answers.location:
        lines.append(f"Location: {answers.location}")
    return "\n".join(lines)


def _conversation(request: TriageRequest) -> list[dict]:
    messages = [{"role": m.role, "content": m.content} for m in request.messages if m.content]
    latest = request.user_message
    if latest and not (messages and messages[-1]["role"] == "user" and messages[-1]["content"] == latest):
        messages.append({"role": "user", "content": latest})
    if not messages:
        messages.append({"role": "user", "content": "Hello, I'm looking for help."})
    return messages


class TriageEngine:
    """Drives one wizard turn at a time. Holds no per-session state."""

    def __init__(
        self,
        *,
        generate: TextGenerator | None = generate_text,
        recommender: Recommender | None = None,
        logger: StructuredLogger | None = None,
    ) -> None:
        self.generate = generate
        self.logger = logger or NullLogger()
        self.recommender = recommender or Recommender(None, logger=self.logger)

    def _call(self, step: str, messages: list[dict], system_prompt: str) -> str | None:
        """Collaborator text, or None when it is not configured, fails or returns nothing."""
        if self.generate is None:
            return None
        try:
            text = self.generate(messages, system_prompt)
        except Exception as e:
            self.logger.log_llm_unavailable(step=step, error=str(e) or type(e).__name__)
            return None
        text = (text or "").strip() if isinstance(text, str) else ""
        if not text:
            self.logger.log_llm_unavailable(step=step, error="empty response")
            return None
        return text

    def handle_turn(self, request: TriageRequest) -> TriageResponse:
        step = request.step
        crisis = check_crisis(request.user_texts())
        if crisis.hit:
            self.logger.log_crisis_intercept(matched_terms=crisis.matched_terms, step=step)
            return build_crisis_response()

        answers = capture_answer(step, request.answers(), request.user_message)
        if step == "assess":
            return self._assess(request, answers)
        return self._ask(step, request, answers)

    def _ask(self, step: str, request: TriageRequest, answers: TriageAnswers) -> TriageResponse:
        system_prompt = build_step_prompt(step, answers.category)
        summary = _answers_summary(answers)
        if summary:
            system_prompt = f"{system_prompt}\n\nWhat the veteran has shared so far:\n{summary}"
        text = self._call(step, _conversation(request), system_prompt)
        return TriageResponse(
            ai_message=text or FALLBACK_QUESTIONS[step],
            next_step=NEXT_STEP[step],
            suggested_questions=suggested_answers(step, answers),
        )

    def _assess(self, request: TriageRequest, answers: TriageAnswers) -> TriageResponse:
        messages = _conversation(request)
        summary = _answers_summary(answers)
        if summary:
            messages.append({"role": "user", "content": f"Summary of my answers:\n{summary}"})
        raw = self._call("assess", messages, PROMPT_ASSESS)
        if raw is None:
            result = RawAssessment("")
        else:
            result = parse_assessment(raw)
            if isinstance(result, RawAssessment):
                self.logger.log_llm_parse_failed(response_snippet=raw)

        def recommend(severity: Severity, suggested: list[Recommendation]) -> RecommendationSet:
            outcome = self.recommender.recommend(severity, answers, seed=request.seed, suggested=suggested)
            return outcome.recommendations

        return assessment_response(result, recommend=recommend)

    def advance(
        self, session: TriageSession, user_message: str | None = None, *, seed: str | None = None
    ) -> tuple[TriageSession, TriageResponse]:
        """
        Apply one turn to a client-held session and return (updated session, response).
        A terminal session is returned unchanged with a response that repeats its terminal step.
        """
        if session.is_terminal:
            return session, TriageResponse(
                ai_message="This conversation is finished. Start a new one to continue.",
                next_step=session.step,
                is_crisis=session.is_crisis,
            )
        answers = capture_answer(session.step, session.answers, user_message)
        request = TriageRequest(
            messages=[m.model_dump() for m in session.messages],
            step=session.step,
            category=answers.category,
            symptoms=answers.symptoms,
            severity_level=answers.severity_level,
            duration=answers.duration,
            current_care=answers.current_care,
            location=answers.location,
            user_message=user_message,
            seed=seed,
        )
        response = self.handle_turn(request)

        messages = list(session.messages)
        if user_message:
            messages.append(TriageMessage(role="user", content=user_message))
        messages.append(TriageMessage(role="assistant", content=response.ai_message))
        updated = TriageSession(
            messages=messages,
            step=response.next_step,
            answers=answers,
            is_crisis=response.is_crisis,
        )
        return updated, response
