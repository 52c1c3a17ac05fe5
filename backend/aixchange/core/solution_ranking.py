"""Solution Ranking — listing sort orders and search matching.

Invariants:
    - sort_listing is stable: ties keep the incoming (newest-first) order
    - Unknown sort keys fall back to "recent" (incoming order)
"""

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

EVENT_SOLUTION_SORTS = ("recent", "rating", "most-voted", "most-upvoted")


def sort_listing(items: list[T], sort: str) -> list[T]:
    """Sort listing items carrying `rating` and `review_count` attributes."""
    if sort == "rating":
        return sorted(items, key=lambda i: getattr(i, "rating"), reverse=True)
    if sort == "popular":
        return sorted(items, key=lambda i: getattr(i, "review_count"), reverse=True)
    return list(items)


def normalize_event_solution_sort(sort: str | None) -> str:
    return sort if sort in EVENT_SOLUTION_SORTS else "recent"


def matches_search(term: str, title: str, description: str, tags: Sequence[str]) -> bool:
    """Case-insensitive substring on title/description, or an exact tag match."""
    needle = term.strip().lower()
    if not needle:
        return True
    return (
        needle in title.lower()
        or needle in description.lower()
        or term.strip() in tags
    )
