"""Parsers for arXiv RSS feeds and arXiv API (Atom) query responses.

Both parsers normalize entries into PaperRecord and never raise on malformed
input: a document feedparser cannot make sense of simply yields no records,
which lets the transport chain move on to the next relay.
"""

from __future__ import annotations

import html
import logging
import re
from datetime import UTC, datetime
from typing import Any, Callable

import feedparser

from models import PaperRecord

LOGGER = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")
_ARXIV_ID_RE = re.compile(r"abs/([^?]+)")
_CATEGORY_PREFIX_RE = re.compile(r"^\([^)]+\)\s*")
_API_ERROR_MARKER = "/api/errors"

# RSS creator lookups, tried in order; the first non-empty value wins.
# feedparser maps the Dublin Core dc:creator element onto "author", while a
# bare <creator> element is kept under its own name.
CREATOR_STRATEGIES: tuple[Callable[[Any], Any], ...] = (
    lambda entry: entry.get("creator"),
    lambda entry: entry.get("author"),
)


def clean_text(value: str | None) -> str:
    """Strip tags, decode HTML entities and collapse whitespace."""
    if not value:
        return ""
    text = html.unescape(_TAG_RE.sub("", value))
    return " ".join(text.split())


def extract_arxiv_id(url: str) -> str:
    """Return the identifier following ``abs/`` in an arXiv URL, or ''."""
    match = _ARXIV_ID_RE.search(url or "")
    return match.group(1) if match else ""


def to_https(url: str) -> str:
    if url.startswith("http://"):
        return "https://" + url[len("http://"):]
    return url


def parse_rss_feed(body: str | bytes, category_id: str) -> list[PaperRecord]:
    """Parse an arXiv RSS document into PaperRecords for one category.

    Items whose link carries no ``abs/<id>`` path get the positional fallback
    id ``{category_id}-{index}``. That id is only unique within one document.
    """
    entries = _parse_entries(body, category_id)
    fetched_at = datetime.now(UTC)

    papers: list[PaperRecord] = []
    for index, entry in enumerate(entries):
        title = clean_text(entry.get("title"))
        link = (entry.get("link") or "").strip()
        if not title or not link:
            continue

        papers.append(
            PaperRecord(
                id=extract_arxiv_id(link) or f"{category_id}-{index}",
                title=_CATEGORY_PREFIX_RE.sub("", title),
                link=to_https(link),
                abstract=clean_text(entry.get("summary") or entry.get("description")),
                authors=clean_text(_first_creator(entry)),
                category=category_id,
                fetched_at=fetched_at,
            )
        )

    return papers


def parse_api_response(body: str | bytes, category_id: str) -> list[PaperRecord]:
    """Parse an arXiv API Atom response into PaperRecords for one category."""
    entries = _parse_entries(body, category_id)
    fetched_at = datetime.now(UTC)

    papers: list[PaperRecord] = []
    for entry in entries:
        title = clean_text(entry.get("title"))
        entry_url = (entry.get("id") or "").strip()
        if _API_ERROR_MARKER in entry_url:
            LOGGER.warning("arXiv API returned an error entry for %s: %s", category_id, title)
            continue

        paper_id = extract_arxiv_id(entry_url) or entry_url.rstrip("/").split("/")[-1]
        link = _preferred_link(entry) or entry_url
        if not title or not paper_id or not link:
            continue

        authors = [
            clean_text(author.get("name"))
            for author in entry.get("authors") or []
            if clean_text(author.get("name"))
        ]
        papers.append(
            PaperRecord(
                id=paper_id,
                title=title,
                link=to_https(link),
                abstract=clean_text(entry.get("summary")),
                authors=", ".join(authors),
                category=category_id,
                fetched_at=fetched_at,
            )
        )

    return papers


def _parse_entries(body: str | bytes, category_id: str) -> list[Any]:
    # Bytes keep feedparser from treating a body that starts with "http" as a URL.
    if isinstance(body, str):
        body = body.encode("utf-8")
    try:
        feed = feedparser.parse(body)
    except Exception as exc:  # feedparser can still trip over pathological input
        LOGGER.warning("Feed parse failed for %s: %s", category_id, exc)
        return []

    if feed.get("bozo") and not feed.entries:
        LOGGER.warning(
            "Malformed feed document for %s: %s", category_id, feed.get("bozo_exception")
        )
    return list(feed.entries)


def _first_creator(entry: Any) -> str:
    for strategy in CREATOR_STRATEGIES:
        value = strategy(entry)
        if value:
            return value
    return ""


def _preferred_link(entry: Any) -> str:
    """Pick the PDF link, then the alternate (abstract page) link."""
    links = entry.get("links") or []
    for link in links:
        if link.get("title") == "pdf" and link.get("href"):
            return link["href"]
    for link in links:
        if link.get("rel") == "alternate" and link.get("href"):
            return link["href"]
    return ""
