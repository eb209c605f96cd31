"""Roster parsing: free-text roster -> participant names."""
from __future__ import annotations
from typing import Iterator

DEFAULT_DELIMITER = ","


def parse_roster(roster_text: str | None, delimiter: str = DEFAULT_DELIMITER) -> Iterator[str]:
    """Yield trimmed, non-empty names from *roster_text* in input order.

    Duplicates are preserved: names are free text and nothing here knows
    whether two equal strings are the same person.
    """
    if not roster_text:
        return
    for part in roster_text.split(delimiter):
        name = part.strip()
        if name:
            yield name
