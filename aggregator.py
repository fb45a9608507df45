"""Fan-out aggregation across arXiv sources with dedup and empty-result messages."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Callable, Iterable

from arxiv_parsers import parse_api_response, parse_rss_feed
from config import ARXIV_API_URL, MAX_RESULTS, SOURCES
from models import DateRangeMode, FilterState, PaperRecord, SourceDescriptor
from transport import TransportChain

LOGGER = logging.getLogger(__name__)

WEEKEND_MESSAGE = (
    'No new papers today. arXiv does not publish on weekends, try "Past 7 Days" instead!'
)
UNAVAILABLE_MESSAGE = "No papers found. The feeds may be temporarily unavailable."
NO_RANGE_MATCH_MESSAGE = "No papers found for this date range. Try different categories."
FAILURE_MESSAGE = "Failed to load papers. Please try again."

_WEEKEND_DAYS = frozenset({5, 6})  # datetime.weekday(): Saturday, Sunday


@dataclass(frozen=True, slots=True)
class AggregationResult:
    """Outcome of one aggregation cycle.

    ``failed`` is set only when the fan-out itself broke; callers must then
    keep their previous paper collection.
    """

    papers: list[PaperRecord] = field(default_factory=list)
    message: str | None = None
    failed: bool = False


def format_arxiv_date(moment: datetime) -> str:
    """Format a datetime for arXiv's submittedDate filter (YYYYMMDDHHMM at midnight)."""
    return moment.strftime("%Y%m%d") + "0000"


def build_api_query_url(
    category_id: str,
    days_back: int,
    now: datetime,
    max_results: int = MAX_RESULTS,
) -> str:
    """Build the arXiv API URL for one category over [now - days_back, now]."""
    start = now - timedelta(days=days_back)
    date_query = f"submittedDate:[{format_arxiv_date(start)}+TO+{format_arxiv_date(now)}]"
    query = f"cat:{category_id}+AND+{date_query}"
    return (
        f"{ARXIV_API_URL}?search_query={query}&start=0&max_results={max_results}"
        "&sortBy=submittedDate&sortOrder=descending"
    )


def merge_unique(results: Iterable[list[PaperRecord]]) -> list[PaperRecord]:
    """Concatenate per-source results, keeping the first record seen for each id."""
    seen: set[str] = set()
    merged: list[PaperRecord] = []
    for papers in results:
        for paper in papers:
            if paper.id in seen:
                continue
            seen.add(paper.id)
            merged.append(paper)
    return merged


def classify_empty_result(mode: DateRangeMode, weekday: int, count: int) -> str | None:
    """Return the user-facing message for an empty aggregation, or None.

    ``weekday`` follows datetime.weekday() (Monday is 0).
    """
    if count > 0:
        return None
    if not mode.is_snapshot:
        return NO_RANGE_MATCH_MESSAGE
    if weekday in _WEEKEND_DAYS:
        return WEEKEND_MESSAGE
    return UNAVAILABLE_MESSAGE


def _local_now() -> datetime:
    return datetime.now().astimezone()


class Aggregator:
    """Fetch every relevant source concurrently and merge the results."""

    def __init__(
        self,
        chain: TransportChain,
        sources: tuple[SourceDescriptor, ...] = SOURCES,
        max_results: int = MAX_RESULTS,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self.chain = chain
        self.sources = sources
        self.max_results = max_results
        self.clock = clock

    async def aggregate(self, filter_state: FilterState) -> AggregationResult:
        """Run one aggregation cycle for the given filter state."""
        mode = filter_state.date_range_mode
        now = self.clock()

        try:
            if mode.is_snapshot:
                results = await self._gather(
                    (source.feed_url, source.id, parse_rss_feed) for source in self.sources
                )
            else:
                results = await self._gather(
                    (
                        build_api_query_url(
                            source.id,
                            mode.days_back,
                            now.astimezone(UTC),
                            self.max_results,
                        ),
                        source.id,
                        parse_api_response,
                    )
                    for source in self.sources
                    if source.id in filter_state.active_categories
                )
        except Exception as exc:
            LOGGER.exception("Aggregation failed: %s", exc)
            return AggregationResult(message=FAILURE_MESSAGE, failed=True)

        papers = merge_unique(results)
        raw_count = sum(len(batch) for batch in results)
        LOGGER.info(
            "Aggregation: mode=%s sources=%s raw_count=%s unique=%s",
            mode.value,
            len(results),
            raw_count,
            len(papers),
        )
        return AggregationResult(
            papers=papers,
            message=classify_empty_result(mode, now.weekday(), len(papers)),
        )

    async def _gather(
        self,
        jobs: Iterable[tuple[str, str, Callable[[bytes, str], list[PaperRecord]]]],
    ) -> list[list[PaperRecord]]:
        tasks = [
            asyncio.to_thread(
                self.chain.fetch_records,
                url,
                lambda body, category_id=category_id, parse=parse: parse(body, category_id),
                category_id,
            )
            for url, category_id, parse in jobs
        ]
        # Wait for every source to settle before surfacing any orchestration error.
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        return list(outcomes)
