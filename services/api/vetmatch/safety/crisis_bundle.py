"""
Static crisis bundle. Used whenever the crisis detector fires or the assessment comes back
as crisis. Does not depend on the catalog or the text-generation collaborator.
"""

from vetmatch.models import Recommendation, RecommendationSet, TriageResponse

CRISIS_MESSAGE = (
    "I hear you, and I want you to know that help is available right now. "
    "You don't have to face this alone.\n\n"
    "**If you or someone you know is in immediate danger, please call 911.**\n\n"
    "This is for informational purposes only. Trained crisis counselors are available 24/7 "
    "at the numbers below."
)

_CRISIS_RECOMMENDATIONS = RecommendationSet(
    institutional=[
        Recommendation(
            track="institutional",
            title="Veterans Crisis Line",
            description="Free, confidential support 24/7. Dial 988 then Press 1.",
            url="https://www.veteranscrisisline.net/",
            phone="988 (Press 1)",
            priority="high",
            note="24/7 crisis line",
        ),
        Recommendation(
            track="institutional",
            title="VA Crisis Text Line",
            description="Text 838255 for confidential support.",
            url="https://www.veteranscrisisline.net/get-help-now/chat",
            phone="Text 838255",
            priority="high",
            note="24/7 crisis text line",
        ),
        Recommendation(
            track="institutional",
            title="VA Emergency Care",
            description="Go to your nearest VA Emergency Room or call 911.",
            url="https://www.va.gov/find-locations/",
            priority="high",
            note="Emergency care",
        ),
    ],
    grassroots=[
        Recommendation(
            track="grassroots",
            title="Crisis Text Line",
            description="Text HOME to 741741.",
            url="https://www.crisistextline.org/",
            phone="Text 741741",
            priority="high",
            note="24/7 crisis text line",
        ),
        Recommendation(
            track="grassroots",
            title="SAMHSA National Helpline",
            description="Free, confidential, 24/7 treatment referral.",
            url="https://www.samhsa.gov/find-help/national-helpline",
            phone="1-800-662-4357",
            priority="high",
            note="24/7 helpline",
        ),
    ],
    regional=[
        Recommendation(
            track="regional",
            title="911 Emergency Services",
            description="For immediate life-threatening emergencies.",
            phone="911",
            priority="high",
            note="Emergency services",
        ),
        Recommendation(
            track="regional",
            title="Local Crisis Centers",
            description="Find crisis services in your area.",
            url="https://findtreatment.gov/",
            priority="high",
            note="Local crisis services",
        ),
    ],
)

CRISIS_LINE_TITLES = frozenset({"Veterans Crisis Line", "VA Crisis Text Line"})


def crisis_recommendations() -> RecommendationSet:
    """Fresh copy of the crisis bundle; the first institutional entry is the 24/7 crisis line."""
    return _CRISIS_RECOMMENDATIONS.model_copy(deep=True)


def is_crisis_line(rec: Recommendation) -> bool:
    return rec.title in CRISIS_LINE_TITLES


def build_crisis_response() -> TriageResponse:
    """Terminal crisis payload for the triage wizard."""
    return TriageResponse(
        ai_message=CRISIS_MESSAGE,
        next_step="crisis",
        is_crisis=True,
        severity="crisis",
        recommendations=crisis_recommendations(),
        suggested_questions=[],
    )
