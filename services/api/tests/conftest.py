import io
import json
from datetime import datetime

import pytest

from vetmatch.logging_structured import StructuredLogger
from vetmatch.matching.catalog import InMemoryCatalog
from vetmatch.models import Contact, Resource


def make_resource(rid: str, **fields) -> Resource:
    fields.setdefault("title", rid.replace("-", " ").title())
    fields.setdefault("last_updated", datetime(2024, 6, 1))
    return Resource(id=rid, **fields)


def sample_resources() -> list[Resource]:
    return [
        make_resource(
            "vcl",
            title="Veterans Crisis Line",
            description="Confidential 24/7 crisis support. Dial 988 then press 1.",
            categories=["Crisis Services", "Mental Health"],
            tags=["Crisis", "Hotline"],
            organization="Department of Veterans Affairs",
            org_type="institutional",
            location="national",
            is_featured=True,
            rating=4.9,
            contact=Contact(phone="988", url="https://www.veteranscrisisline.net/"),
        ),
        make_resource(
            "va-mh",
            title="VA Mental Health Services",
            description="Treatment for depression, PTSD and anxiety.",
            categories=["Mental Health"],
            tags=["PTSD", "Depression", "Anxiety"],
            organization="Department of Veterans Affairs",
            org_type="institutional",
            location="national",
            rating=4.5,
            contact=Contact(url="https://www.va.gov/mental-health/"),
        ),
        make_resource(
            "va-whole-health",
            title="VA Whole Health",
            description="Personalized wellness and prevention programs.",
            categories=["Physical Health", "Wellness Programs"],
            tags=["Wellness"],
            organization="Department of Veterans Affairs",
            org_type="institutional",
            location="national",
            rating=4.2,
        ),
        make_resource(
            "headstrong",
            title="Headstrong Project",
            description="Cost-free mental health treatment for post-9/11 veterans.",
            categories=["Mental Health"],
            tags=["Trauma", "Depression"],
            organization="Headstrong Project",
            org_type="grassroots",
            location="national",
            rating=4.6,
            contact=Contact(url="https://getheadstrong.org/"),
        ),
        make_resource(
            "give-an-hour",
            title="Give An Hour",
            description="Free counseling from volunteer professionals.",
            categories=["Mental Health", "Family Support"],
            tags=["Anxiety", "Family"],
            organization="Give An Hour",
            org_type="grassroots",
            location="national",
            rating=4.8,
        ),
        make_resource(
            "team-rwb",
            title="Team Red, White & Blue",
            description="Physical and social activity with other veterans.",
            categories=["Physical Health"],
            tags=["Community", "Physical Activity"],
            organization="Team RWB",
            org_type="grassroots",
            location="national",
            rating=4.9,
        ),
        make_resource(
            "tx-vets",
            title="Texas Veterans Commission",
            description="State benefits, claims help and local programs.",
            categories=["Benefits"],
            tags=["Local"],
            organization="State of Texas",
            org_type="regional",
            location="TX",
            rating=4.0,
        ),
        make_resource(
            "untagged-clinic",
            title="Sleep Clinic for Veterans",
            description="Insomnia treatment and sleep studies.",
            organization="Community Clinic",
            location=None,
            rating=3.5,
            last_updated=datetime(2025, 2, 1),
        ),
    ]


@pytest.fixture
def resources() -> list[Resource]:
    return sample_resources()


@pytest.fixture
def catalog(resources) -> InMemoryCatalog:
    return InMemoryCatalog(resources)


class CapturingLogger(StructuredLogger):
    """StructuredLogger writing to an in-memory stream, with decoded events."""

    def __init__(self) -> None:
        self.buffer = io.StringIO()
        super().__init__(stream=self.buffer)

    def events(self) -> list[dict]:
        return [json.loads(line) for line in self.buffer.getvalue().splitlines() if line.strip()]

    def event_names(self) -> list[str]:
        return [e["event"] for e in self.events()]


@pytest.fixture
def logger() -> CapturingLogger:
    return CapturingLogger()


class ScriptedGenerator:
    """Fake text generator: returns the scripted replies in order and records every call."""

    def __init__(self, *replies) -> None:
        self.replies = list(replies)
        self.calls: list[tuple[list[dict], str]] = []

    def __call__(self, messages: list[dict], system_prompt: str) -> str:
        self.calls.append((messages, system_prompt))
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            raise reply
        return reply


def failing_generator(messages: list[dict], system_prompt: str) -> str:
    raise TimeoutError("collaborator timed out")
