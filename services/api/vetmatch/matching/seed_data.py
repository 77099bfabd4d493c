"""Static starter catalog. Loaded into an empty store on startup."""

from datetime import datetime

from vetmatch.models import Contact, Resource

_UPDATED = datetime(2025, 1, 15)


def _resource(rid: str, title: str, description: str, url: str, **fields) -> Resource:
    contact = Contact(url=url, phone=fields.pop("phone", None))
    fields.setdefault("location", "national")
    fields.setdefault("is_verified", True)
    fields.setdefault("last_updated", _UPDATED)
    return Resource(id=rid, title=title, description=description, contact=contact, **fields)


STATIC_RESOURCES: tuple[Resource, ...] = (
    _resource(
        "veterans-crisis-line",
        "Veterans Crisis Line",
        "Free, confidential 24/7 support for veterans in crisis and their families. Dial 988 then press 1.",
        "https://www.veteranscrisisline.net/",
        phone="988 (Press 1)",
        categories=["Crisis Services", "Mental Health"],
        tags=["Crisis", "Suicide Prevention", "Hotline", "24/7"],
        organization="Department of Veterans Affairs",
        org_type="institutional",
        is_featured=True,
        rating=4.9,
        review_count=310,
    ),
    _resource(
        "va-mental-health",
        "VA Mental Health Services",
        "Comprehensive mental health services for veterans, including treatment for depression, PTSD, "
        "anxiety, and substance use disorders.",
        "https://www.va.gov/health-care/health-needs-conditions/mental-health/",
        categories=["Mental Health", "Crisis Services"],
        tags=["PTSD", "Depression", "Anxiety", "Substance Use"],
        organization="Department of Veterans Affairs",
        org_type="institutional",
        rating=4.5,
        review_count=128,
    ),
    _resource(
        "va-caregiver-support",
        "VA Caregiver Support Program",
        "Support and resources for family caregivers of veterans, including education, training, and respite care.",
        "https://www.caregiver.va.gov/",
        categories=["Family Support", "Wellness Programs"],
        tags=["Caregivers", "Family", "Support"],
        organization="Department of Veterans Affairs",
        org_type="institutional",
        rating=4.0,
        review_count=65,
    ),
    _resource(
        "va-whole-health",
        "VA Whole Health",
        "A personalized health approach that considers the full range of physical, emotional, mental, social, "
        "spiritual, and environmental influences.",
        "https://www.va.gov/wholehealth/",
        categories=["Physical Health", "Wellness Programs"],
        tags=["Wellness", "Prevention", "Holistic"],
        organization="Department of Veterans Affairs",
        org_type="institutional",
        rating=4.2,
        review_count=78,
    ),
    _resource(
        "team-rwb",
        "Team Red, White & Blue",
        "Enriching veterans' lives by connecting them to their community through physical and social activity.",
        "https://www.teamrwb.org/",
        categories=["Physical Health", "Wellness Programs"],
        tags=["Physical Activity", "Social Connection", "Community"],
        organization="Team RWB",
        org_type="grassroots",
        rating=4.9,
        review_count=156,
    ),
    _resource(
        "wounded-warrior",
        "Wounded Warrior Project",
        "Programs and services for veterans and service members who incurred a physical or mental injury or "
        "illness on or after September 11, 2001.",
        "https://www.woundedwarriorproject.org/",
        phone="1-888-997-2586",
        categories=["Physical Health", "Mental Health"],
        tags=["PTSD", "TBI", "Physical Injury", "Rehabilitation"],
        organization="Wounded Warrior Project",
        org_type="grassroots",
        rating=4.3,
        review_count=215,
    ),
    _resource(
        "headstrong",
        "Headstrong Project",
        "Confidential, cost-free, and frictionless mental health treatment for post-9/11 veterans and their families.",
        "https://getheadstrong.org/",
        categories=["Mental Health", "Crisis Services"],
        tags=["PTSD", "Depression", "Anxiety", "Trauma"],
        organization="Headstrong Project",
        org_type="grassroots",
        rating=4.6,
        review_count=87,
    ),
    _resource(
        "give-an-hour",
        "Give An Hour",
        "Free mental health services provided by volunteer mental health professionals to veterans, "
        "service members, and their families.",
        "https://giveanhour.org/",
        categories=["Mental Health", "Family Support"],
        tags=["PTSD", "Depression", "Anxiety", "Family"],
        organization="Give An Hour",
        org_type="grassroots",
        rating=4.8,
        review_count=92,
    ),
    _resource(
        "cohen-veterans-network",
        "Cohen Veterans Network",
        "High-quality, accessible mental health care for veterans and their families through a nationwide "
        "network of clinics.",
        "https://www.cohenveteransnetwork.org/",
        phone="1-888-523-6936",
        categories=["Mental Health", "Family Support"],
        tags=["PTSD", "Depression", "Anxiety", "Family"],
        organization="Cohen Veterans Network",
        org_type="grassroots",
        rating=4.7,
        review_count=103,
    ),
    _resource(
        "state-veterans-affairs",
        "State Veterans Affairs Office",
        "Find your state veterans office for local benefits, claims help and state programs.",
        "https://www.va.gov/statedva.htm",
        categories=["Benefits", "Housing Assistance"],
        tags=["State Benefits", "Claims", "Local"],
        organization="State Veterans Affairs",
        org_type="regional",
        location=None,
        rating=4.0,
        review_count=40,
    ),
    _resource(
        "findtreatment",
        "Local Treatment Locator",
        "Locate state-licensed mental health and substance use treatment facilities near you.",
        "https://findtreatment.gov/",
        categories=["Mental Health", "Substance Use"],
        tags=["Local", "Treatment", "Substance Use"],
        organization="SAMHSA",
        org_type="regional",
        location=None,
        rating=4.1,
        review_count=33,
    ),
)


def static_resources() -> list[Resource]:
    """Fresh copies of the starter catalog."""
    return [r.model_copy(deep=True) for r in STATIC_RESOURCES]
