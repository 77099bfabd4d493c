"""
Seeded shuffle and organization-type balancing for result lists.

compose() is pure: the permutation depends only on the candidates, the seed string,
the symptom list and the timestamp the caller passes in. No clock reads here.
"""

import math
import re
from dataclasses import dataclass
from typing import Callable, Sequence, TypeVar

from vetmatch.models import Resource

T = TypeVar("T")

_VA_WORD = re.compile(r"\bva\b")
_INSTITUTIONAL_MARKERS = ("veterans affairs", "department of")
_EMBEDDED_TIMESTAMP = re.compile(r"(\d{13})")


def bucket_of(resource: Resource) -> str:
    """Organization-type bucket; unknown types are inferred from organization and title."""
    if resource.org_type != "unknown":
        return resource.org_type
    org = resource.organization.lower()
    title = resource.title.lower()
    if _VA_WORD.search(org) or _VA_WORD.search(title):
        return "institutional"
    if any(m in org or m in title for m in _INSTITUTIONAL_MARKERS):
        return "institutional"
    return "grassroots"


@dataclass(frozen=True)
class BucketTarget:
    """At least `minimum` members, or `ratio` of the output size if that is larger."""

    bucket: str
    minimum: int
    ratio: float = 0.0

    def required(self, size: int) -> int:
        return min(size, max(self.minimum, math.floor(size * self.ratio)))


# Priority order: grassroots is filled first so institutional resources cannot crowd it out.
DEFAULT_TARGETS: tuple[BucketTarget, ...] = (
    BucketTarget("grassroots", minimum=5, ratio=0.6),
    BucketTarget("institutional", minimum=3, ratio=0.3),
)


# --- Seed derivation ---


def string_seed(seed: str) -> int:
    return sum(ord(ch) * (i + 1) for i, ch in enumerate(seed))


def symptom_seed(symptoms: Sequence[str]) -> int:
    return sum(ord(ch) for ch in ",".join(symptoms))


def embedded_timestamp(seed: str) -> int:
    """A 13-digit millisecond timestamp inside the seed string, or 0."""
    match = _EMBEDDED_TIMESTAMP.search(seed or "")
    return int(match.group(1)) if match else 0


def derive_seed(seed: str, *, symptoms: Sequence[str] = (), timestamp_ms: int = 0) -> int:
    """Fold the seed string, timestamp (mod 10000) and symptom list into one integer."""
    return string_seed(seed) + (timestamp_ms % 10000) + symptom_seed(symptoms) * 31


# --- Shuffle ---


class LinearRandom:
    """Linear congruential generator. Output depends only on the seed."""

    MULTIPLIER = 1664525
    INCREMENT = 1013904223
    MODULUS = 2**32

    def __init__(self, seed: int) -> None:
        self._state = seed % self.MODULUS

    def random(self) -> float:
        self._state = (self.MULTIPLIER * self._state + self.INCREMENT) % self.MODULUS
        return self._state / self.MODULUS


def seeded_shuffle(items: Sequence[T], seed: int) -> list[T]:
    """Fisher-Yates shuffle driven by LinearRandom(seed). Same seed, same permutation."""
    shuffled = list(items)
    rng = LinearRandom(seed)
    for i in range(len(shuffled) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


# --- Balancing ---


def balance(
    items: Sequence[T],
    targets: Sequence[BucketTarget],
    size: int,
    key: Callable[[T], str],
) -> list[T]:
    """
    Take each target's required count from its bucket (targets in priority order), then fill
    the remaining slots from whatever is left, keeping input order. A bucket short of its
    target just leaves more room for the fill.
    """
    size = min(size, len(items))
    buckets = [key(item) for item in items]
    taken: list[int] = []
    taken_set: set[int] = set()
    remaining = size
    for target in targets:
        want = min(target.required(size), remaining)
        members = [i for i, b in enumerate(buckets) if b == target.bucket and i not in taken_set][:want]
        taken.extend(members)
        taken_set.update(members)
        remaining -= len(members)
    rest = [i for i in range(len(items)) if i not in taken_set][:remaining]
    return [items[i] for i in taken + rest]


def compose(
    candidates: Sequence[T],
    seed: str | None = None,
    *,
    symptoms: Sequence[str] = (),
    timestamp_ms: int = 0,
    targets: Sequence[BucketTarget] = DEFAULT_TARGETS,
    size: int | None = None,
    key: Callable[[T], str] = bucket_of,
) -> list[T]:
    """
    Without a seed: the first `size` candidates in their given (scored) order.
    With a seed: seeded shuffle, then bucket balancing. Never returns more than it was given.
    """
    size = len(candidates) if size is None else max(0, min(size, len(candidates)))
    if seed is None:
        return list(candidates[:size])
    shuffled = seeded_shuffle(candidates, derive_seed(seed, symptoms=symptoms, timestamp_ms=timestamp_ms))
    return balance(shuffled, targets, size, key)
