"""
Static symptom and category taxonomy. Pure data plus read-only lookups.
Keys are canonical lowercase ids; values are ordered synonym tuples used for
query expansion and tag enrichment. Tuples and MappingProxyType keep it immutable.
"""

from types import MappingProxyType

from vetmatch.models import Resource

SYMPTOM_KEYWORDS = MappingProxyType({
    "anxiety": ("anxiety", "anxious", "worry", "panic", "stress", "nervous", "fear", "phobia", "tension"),
    "depression": ("depression", "depressed", "mood", "sadness", "hopelessness", "melancholy", "despair"),
    "ptsd": ("ptsd", "post-traumatic", "trauma", "traumatic", "flashback", "nightmares", "hypervigilance"),
    "stress": ("stress", "stressed", "tension", "pressure", "burnout", "overwhelm", "strain"),
    "sleep": ("sleep", "insomnia", "nightmares", "sleepless", "drowsy", "apnea", "narcolepsy"),
    "substance": ("substance", "alcohol", "drug", "addiction", "recovery", "sober", "dependence", "rehab"),
    "isolation": ("isolation", "isolated", "alone", "lonely", "loneliness", "withdrawn", "detached"),
    "grief": ("grief", "loss", "bereavement", "mourning", "sorrow", "widow"),
    "suicidal": ("suicide", "suicidal", "crisis", "prevention", "hotline", "ideation", "self-harm"),
    "anger": ("anger", "irritability", "irritable", "aggression", "rage", "temper"),
    "concentration": ("concentration", "focus", "memory", "cognitive", "attention"),
    "chronic pain": ("pain", "chronic", "pain management", "persistent", "discomfort", "ache", "soreness"),
    "pain": ("pain", "chronic pain", "pain management", "discomfort", "ache", "soreness"),
    "fatigue": ("fatigue", "tired", "exhaustion", "energy", "lethargy", "weariness"),
    "tbi": ("tbi", "traumatic brain", "brain injury", "concussion", "cognitive", "head trauma", "neurological"),
    "mobility": ("mobility", "movement", "disability", "accessible", "walking", "prosthetic", "adaptive"),
    "headaches": ("headache", "headaches", "migraine", "migraines"),
    "hearing": ("hearing", "deaf", "auditory", "tinnitus", "cochlear"),
    "vision": ("vision", "sight", "eye", "visual", "blind", "low vision"),
    "breathing": ("breathing", "respiratory", "lung", "asthma", "burn pit", "copd"),
    "digestive": ("digestive", "stomach", "gastro", "gastrointestinal", "bowel"),
    "relationships": ("relationship", "relationships", "marriage", "family", "couples", "caregiver"),
    "work": ("employment", "job", "career", "work", "vocational"),
    "housing": ("housing", "homeless", "homelessness", "shelter", "rent"),
    "financial": ("financial", "finance", "debt", "money", "budget"),
    "legal": ("legal", "lawyer", "attorney", "court", "discharge upgrade"),
    "transition": ("transition", "civilian", "reintegration", "separation", "transition assistance"),
    "purpose": ("purpose", "meaning", "volunteer", "service", "mission"),
    "community": ("community", "peer", "social", "connection", "camaraderie"),
})

# Category keys (the wizard's first choice) and the catalog labels each one covers.
CATEGORY_TAGS = MappingProxyType({
    "mental": (
        "Mental Health", "Crisis Services", "Family Support", "Wellness Programs", "Peer Support",
        "Counseling", "PTSD", "Depression", "Anxiety", "Veteran Support", "Community Support",
    ),
    "physical": (
        "Physical Health", "Specialized Care", "Rehabilitation", "Medical Services", "Wellness Programs",
        "Adaptive Sports", "Pain Management", "Physical Therapy", "Veteran Support",
    ),
    "life": (
        "Family Support", "Wellness Programs", "Specialized Care", "Community Support", "Social Services",
        "Financial Assistance", "Housing Support", "Employment Services", "Veteran Support",
    ),
    "crisis": (
        "Crisis Services", "Mental Health", "Emergency Services", "Suicide Prevention", "Immediate Support",
        "Hotlines", "Peer Support", "Veteran Support",
    ),
})

CATEGORY_TITLES = MappingProxyType({
    "mental": "Mental & Emotional",
    "physical": "Physical Health",
    "life": "Life & Social",
    "crisis": "Crisis & Urgent",
})

# Content keywords that imply a catalog label when found in title/description.
_ENRICHMENT_KEYWORDS = MappingProxyType({
    "Mental Health": (
        "mental health", "ptsd", "trauma", "stress", "anxiety", "depression", "counseling",
        "therapy", "therapist", "psychological", "psychiatry", "psychiatric", "mental illness",
        "suicide", "crisis", "addiction", "substance abuse", "alcohol", "recovery",
    ),
    "Primary Care": (
        "primary care", "doctor", "physician", "clinic", "medical", "healthcare", "health care",
        "checkup", "check-up", "exam", "screening", "prevention", "wellness",
    ),
})


def normalize_key(key: str) -> str:
    return " ".join((key or "").lower().replace("_", " ").split())


def is_known_symptom(key: str) -> bool:
    return normalize_key(key) in SYMPTOM_KEYWORDS


def expand_symptom(key: str) -> tuple[str, ...]:
    """Synonyms for a canonical symptom key; unknown keys expand to themselves (lower-cased)."""
    normalized = normalize_key(key)
    if not normalized:
        return ()
    return SYMPTOM_KEYWORDS.get(normalized, (normalized,))


def expand_symptoms(keys: list[str]) -> tuple[str, ...]:
    """Expand several keys, de-duplicated, first occurrence order kept."""
    seen: dict[str, None] = {}
    for key in keys:
        for synonym in expand_symptom(key):
            seen.setdefault(synonym, None)
    return tuple(seen)


def category_labels(category: str) -> tuple[str, ...]:
    """Catalog labels for a category key, or the key itself when it is not in the taxonomy."""
    normalized = normalize_key(category)
    if not normalized:
        return ()
    return CATEGORY_TAGS.get(normalized, (category.strip(),))


def enrich_tags(resource: Resource) -> Resource:
    """
    Return a copy of resource with inferred tags appended: its category labels, its org type,
    and any enrichment label whose keywords occur in title/description. Never mutates the input.
    """
    tags = list(resource.tags)
    seen = {t.lower() for t in tags}

    def add(tag: str) -> None:
        if tag and tag.lower() not in seen:
            seen.add(tag.lower())
            tags.append(tag)

    for category in resource.categories:
        add(category)
    if resource.org_type != "unknown":
        add(resource.org_type)
    content = f"{resource.title} {resource.description}".lower()
    for label, keywords in _ENRICHMENT_KEYWORDS.items():
        if any(k in content for k in keywords):
            add(label)
    return resource.model_copy(update={"tags": tags})
