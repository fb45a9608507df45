"""Filter pipeline over the aggregated paper collection (no network, no state)."""

from __future__ import annotations

from typing import Iterable

from config import ALL_QUICK_FILTER, QUICK_FILTERS
from models import FilterState, PaperRecord


def matches_categories(paper: PaperRecord, active_categories: frozenset[str]) -> bool:
    return paper.category in active_categories


def matches_search(paper: PaperRecord, query: str) -> bool:
    """Case-insensitive substring match against title, abstract or authors."""
    needle = query.lower()
    return (
        needle in paper.title.lower()
        or needle in paper.abstract.lower()
        or needle in paper.authors.lower()
    )


def matches_quick_filter(paper: PaperRecord, keywords: Iterable[str]) -> bool:
    """True when any keyword appears in the title or abstract."""
    text = f"{paper.title} {paper.abstract}".lower()
    return any(keyword in text for keyword in keywords)


def apply_filters(papers: list[PaperRecord], state: FilterState) -> list[PaperRecord]:
    """Return the papers visible under state, in their original order.

    Stages run in a fixed order: category membership, free-text search (only
    for a non-blank query), then the quick-filter keyword group (skipped for
    "all" and for unknown keys). The input list is never modified.
    """
    filtered = [p for p in papers if matches_categories(p, state.active_categories)]

    query = state.search_query.strip()
    if query:
        filtered = [p for p in filtered if matches_search(p, query)]

    if state.quick_filter_key != ALL_QUICK_FILTER:
        keywords = QUICK_FILTERS.get(state.quick_filter_key)
        if keywords:
            filtered = [p for p in filtered if matches_quick_filter(p, keywords)]

    return filtered
