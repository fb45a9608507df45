"""CLI entrypoint for the AI Paper Feed reading list."""

from __future__ import annotations

import argparse
import asyncio
import logging

from dotenv import load_dotenv

from aggregator import Aggregator
from bookmarks import BookmarkStore
from config import QUICK_FILTERS, source_ids
from models import BookmarkRecord, DateRangeMode, FilterState, PaperRecord
from reading_list import ReadingList
from transport import TransportChain

_RANGE_LABELS = {
    DateRangeMode.TODAY: "today's feeds",
    DateRangeMode.WEEK: "past 7 days",
    DateRangeMode.MONTH: "past 30 days",
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Fetch, filter and bookmark new arXiv AI papers")
    parser.add_argument(
        "--range",
        choices=[mode.value for mode in DateRangeMode],
        default=DateRangeMode.TODAY.value,
        help="'today' reads the daily RSS feeds; 'week'/'month' query the arXiv API",
    )
    parser.add_argument(
        "--category",
        action="append",
        choices=source_ids(),
        help="Category to include (repeatable). Defaults to all configured categories.",
    )
    parser.add_argument("--search", default="", help="Free-text filter on title, abstract and authors")
    parser.add_argument(
        "--quick-filter",
        choices=list(QUICK_FILTERS),
        default="all",
        help="Keyword group applied to title and abstract",
    )
    parser.add_argument("--limit", type=int, default=None, help="Maximum number of papers to print")
    parser.add_argument("--bookmark", metavar="ID", help="Bookmark a fetched paper by arXiv id")
    parser.add_argument("--unbookmark", metavar="ID", help="Remove a bookmark without fetching")
    parser.add_argument("--bookmarks", action="store_true", help="List bookmarks without fetching")
    parser.add_argument("--serve-relay", action="store_true", help="Run the local relay server")
    return parser.parse_args(argv)


def build_filter_state(args: argparse.Namespace) -> FilterState:
    return FilterState(
        active_categories=frozenset(args.category or source_ids()),
        search_query=args.search,
        quick_filter_key=args.quick_filter,
        date_range_mode=DateRangeMode(args.range),
    )


def format_paper(paper: PaperRecord, bookmarked: bool = False) -> str:
    marker = "*" if bookmarked else " "
    lines = [f"{marker} [{paper.category}] {paper.title}", f"    {paper.link}"]
    if paper.authors:
        lines.append(f"    {paper.authors}")
    return "\n".join(lines)


def format_bookmark(bookmark: BookmarkRecord) -> str:
    return f"* [{bookmark.category}] {bookmark.title}\n    {bookmark.link}  (saved {bookmark.added_at})"


def run(args: argparse.Namespace) -> None:
    """Run one fetch-filter-print cycle, applying any bookmark request."""
    reading_list = ReadingList(
        Aggregator(TransportChain.from_config()),
        BookmarkStore(),
        filter_state=build_filter_state(args),
    )
    reading_list.load_bookmarks()

    if args.bookmarks:
        for bookmark in reading_list.bookmarks:
            print(format_bookmark(bookmark))
        logging.info("Listed %s bookmarks", len(reading_list.bookmarks))
        return

    if args.unbookmark:
        reading_list.remove_bookmark(args.unbookmark)
        logging.info("Removed bookmark id=%s", args.unbookmark)
        return

    state = asyncio.run(reading_list.refresh())
    logging.info(
        "Fetched %s papers (%s) from %s categories, showing %s",
        len(state.papers),
        _RANGE_LABELS[reading_list.filter_state.date_range_mode],
        len(reading_list.filter_state.active_categories),
        len(state.filtered),
    )
    if state.message:
        print(state.message)

    if args.bookmark:
        paper = reading_list.find_paper(args.bookmark)
        if paper is None:
            logging.warning("Cannot bookmark id=%s: not in the fetched papers", args.bookmark)
        elif reading_list.is_bookmarked(paper.id):
            logging.info("Already bookmarked id=%s", paper.id)
        else:
            reading_list.toggle_bookmark(paper)
            logging.info("Bookmarked id=%s", paper.id)

    shown = state.filtered if args.limit is None else state.filtered[: args.limit]
    for paper in shown:
        print(format_paper(paper, bookmarked=reading_list.is_bookmarked(paper.id)))


def main() -> None:
    """Initialize config and execute the CLI."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args()

    if args.serve_relay:
        from relay import main as serve_relay  # noqa: PLC0415

        serve_relay()
        return

    run(args)


if __name__ == "__main__":
    main()
