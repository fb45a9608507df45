"""Reading-list state container shared by the pipeline and its front ends.

The container owns the fetched papers, the current filter state and the
bookmark store. Front ends drive it through the named operations below and
observe two events: the filtered collection changed, and the bookmark set
changed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable

from aggregator import Aggregator
from bookmarks import BookmarkStore
from config import source_ids
from filters import apply_filters
from models import BookmarkRecord, DateRangeMode, FilterState, PaperRecord

LOGGER = logging.getLogger(__name__)

PapersListener = Callable[[list[PaperRecord]], None]
BookmarksListener = Callable[[list[BookmarkRecord]], None]


def default_filter_state() -> FilterState:
    return FilterState(active_categories=frozenset(source_ids()))


@dataclass(frozen=True, slots=True)
class AppState:
    papers: list[PaperRecord] = field(default_factory=list)
    filtered: list[PaperRecord] = field(default_factory=list)
    filter_state: FilterState = field(default_factory=default_filter_state)
    message: str | None = None
    is_loading: bool = False


class ReadingList:
    def __init__(
        self,
        aggregator: Aggregator,
        store: BookmarkStore,
        filter_state: FilterState | None = None,
    ) -> None:
        self.aggregator = aggregator
        self.store = store
        self.state = AppState(filter_state=filter_state or default_filter_state())
        self._papers_listeners: list[PapersListener] = []
        self._bookmarks_listeners: list[BookmarksListener] = []
        self._refreshes_in_flight = 0

    def on_papers_changed(self, listener: PapersListener) -> None:
        self._papers_listeners.append(listener)

    def on_bookmarks_changed(self, listener: BookmarksListener) -> None:
        self._bookmarks_listeners.append(listener)

    @property
    def filter_state(self) -> FilterState:
        return self.state.filter_state

    @property
    def bookmarks(self) -> list[BookmarkRecord]:
        return self.store.all()

    def load_bookmarks(self) -> None:
        self.store.load()
        self._emit_bookmarks()

    # -- filter inputs ------------------------------------------------------

    def toggle_category(self, category_id: str) -> bool:
        """Toggle a category; returns True when the collection should be re-fetched.

        Ranged queries only fetch active categories, so a toggle there needs a
        refresh. Snapshot mode already holds every category.
        """
        self._set_filter_state(self.filter_state.toggle_category(category_id))
        return not self.filter_state.date_range_mode.is_snapshot

    def set_search_query(self, query: str) -> None:
        self._set_filter_state(self.filter_state.with_search_query(query))

    def select_quick_filter(self, key: str) -> None:
        self._set_filter_state(self.filter_state.with_quick_filter(key))

    def select_date_range(self, mode: DateRangeMode) -> bool:
        """Switch date range; returns True when it changed and needs a refresh."""
        if mode == self.filter_state.date_range_mode:
            return False
        self.state = replace(self.state, filter_state=self.filter_state.with_date_range(mode))
        return True

    # -- fetching -----------------------------------------------------------

    async def refresh(self) -> AppState:
        """Re-run aggregation and publish the new collection once it settles.

        A failed aggregation keeps the previous papers and only updates the
        message. Overlapping refreshes keep is_loading set until the last one
        settles.
        """
        self._refreshes_in_flight += 1
        self.state = replace(self.state, is_loading=True, message=None)
        try:
            result = await self.aggregator.aggregate(self.filter_state)
        finally:
            self._refreshes_in_flight -= 1
        is_loading = self._refreshes_in_flight > 0

        if result.failed:
            self.state = replace(self.state, is_loading=is_loading, message=result.message)
            LOGGER.warning("Refresh failed; keeping %s previous papers", len(self.state.papers))
            return self.state

        self.state = replace(
            self.state,
            papers=list(result.papers),
            message=result.message,
            is_loading=is_loading,
        )
        self._refilter()
        return self.state

    # -- bookmarks ----------------------------------------------------------

    def is_bookmarked(self, paper_id: str) -> bool:
        return self.store.contains(paper_id)

    def toggle_bookmark(self, paper: PaperRecord) -> bool:
        bookmarked = self.store.toggle(paper)
        self._emit_bookmarks()
        return bookmarked

    def remove_bookmark(self, paper_id: str) -> None:
        if self.store.remove(paper_id):
            self._emit_bookmarks()

    def find_paper(self, paper_id: str) -> PaperRecord | None:
        return next((paper for paper in self.state.papers if paper.id == paper_id), None)

    # -- internals ----------------------------------------------------------

    def _set_filter_state(self, filter_state: FilterState) -> None:
        self.state = replace(self.state, filter_state=filter_state)
        self._refilter()

    def _refilter(self) -> None:
        filtered = apply_filters(self.state.papers, self.filter_state)
        self.state = replace(self.state, filtered=filtered)
        for listener in self._papers_listeners:
            listener(list(filtered))

    def _emit_bookmarks(self) -> None:
        bookmarks = self.store.all()
        for listener in self._bookmarks_listeners:
            listener(bookmarks)
