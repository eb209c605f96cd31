"""Even split of a tip pool.

The share is ``tips_cents // people_count`` (floor). The remainder,
``tips_cents - share * people_count``, is smaller than ``people_count``
and is not paid out to anyone; callers report it, nothing redistributes it.
Rounding to nearest is not an option here: 1001 cents over 2 people would
pay out 1002.
"""
from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class Split:
    people_count: int
    per_person_cents: int
    remainder_cents: int


def per_person_share(tips_cents: int, people_count: int) -> int:
    if tips_cents < 0:
        raise ValueError("tips_cents must be non-negative")
    if people_count < 0:
        raise ValueError("people_count must be non-negative")
    if people_count == 0:
        return 0
    return tips_cents // people_count


def split_tips(tips_cents: int, people_count: int) -> Split:
    share = per_person_share(tips_cents, people_count)
    return Split(
        people_count=people_count,
        per_person_cents=share,
        remainder_cents=tips_cents - share * people_count,
    )
