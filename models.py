"""Shared typed models for the paper feed."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum


class DateRangeMode(str, Enum):
    """How far back an aggregation reaches."""

    TODAY = "today"
    WEEK = "week"
    MONTH = "month"

    @property
    def days_back(self) -> int:
        return {"today": 0, "week": 7, "month": 30}[self.value]

    @property
    def is_snapshot(self) -> bool:
        return self is DateRangeMode.TODAY


@dataclass(frozen=True, slots=True)
class SourceDescriptor:
    """One configured arXiv category and its daily RSS feed."""

    id: str
    display_name: str
    feed_url: str


@dataclass(frozen=True, slots=True)
class PaperRecord:
    """Normalized paper record produced by both feed parsers."""

    id: str
    title: str
    link: str
    abstract: str
    authors: str
    category: str
    fetched_at: datetime


@dataclass(frozen=True, slots=True)
class BookmarkRecord:
    """A saved paper; projection of PaperRecord plus the time it was saved."""

    id: str
    title: str
    link: str
    category: str
    added_at: str

    @classmethod
    def from_paper(cls, paper: PaperRecord, added_at: str) -> BookmarkRecord:
        return cls(
            id=paper.id,
            title=paper.title,
            link=paper.link,
            category=paper.category,
            added_at=added_at,
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "title": self.title,
            "link": self.link,
            "category": self.category,
            "addedAt": self.added_at,
        }


@dataclass(frozen=True, slots=True)
class FilterState:
    """User-controlled filter settings.

    Instances are immutable: every mutation returns a new FilterState so the
    reading list can compare old and new state when deciding to re-fetch.
    """

    active_categories: frozenset[str] = field(default_factory=frozenset)
    search_query: str = ""
    quick_filter_key: str = "all"
    date_range_mode: DateRangeMode = DateRangeMode.TODAY

    def toggle_category(self, category_id: str) -> FilterState:
        if category_id in self.active_categories:
            categories = self.active_categories - {category_id}
        else:
            categories = self.active_categories | {category_id}
        return replace(self, active_categories=frozenset(categories))

    def with_search_query(self, query: str) -> FilterState:
        return replace(self, search_query=query)

    def with_quick_filter(self, key: str) -> FilterState:
        return replace(self, quick_filter_key=key)

    def with_date_range(self, mode: DateRangeMode) -> FilterState:
        return replace(self, date_range_mode=mode)
