"""JSON-file bookmark store with write-through persistence."""

from __future__ import annotations

import json
import logging
import os
from datetime import UTC, datetime
from json import JSONDecodeError
from pathlib import Path
from typing import Any

from config import BOOKMARKS_PATH
from models import BookmarkRecord, PaperRecord

LOGGER = logging.getLogger(__name__)


class BookmarkStore:
    """Ordered set of bookmarked papers, keyed by paper id.

    Every mutation rewrites the whole file. A missing or corrupt file loads as
    an empty store.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path or BOOKMARKS_PATH)
        self._bookmarks: list[BookmarkRecord] = []

    def load(self) -> list[BookmarkRecord]:
        self._bookmarks = self._read()
        LOGGER.info("Loaded %s bookmarks from %s", len(self._bookmarks), self.path)
        return self.all()

    def all(self) -> list[BookmarkRecord]:
        return list(self._bookmarks)

    def contains(self, paper_id: str) -> bool:
        return any(bookmark.id == paper_id for bookmark in self._bookmarks)

    def add(self, paper: PaperRecord) -> bool:
        """Bookmark paper; returns False when it was already bookmarked."""
        if self.contains(paper.id):
            return False
        added_at = datetime.now(UTC).isoformat()
        self._bookmarks.append(BookmarkRecord.from_paper(paper, added_at))
        self._save()
        return True

    def remove(self, paper_id: str) -> bool:
        """Drop the bookmark for paper_id; returns False when none existed."""
        remaining = [bookmark for bookmark in self._bookmarks if bookmark.id != paper_id]
        if len(remaining) == len(self._bookmarks):
            return False
        self._bookmarks = remaining
        self._save()
        return True

    def toggle(self, paper: PaperRecord) -> bool:
        """Add or remove paper; returns True when it is bookmarked afterwards."""
        if self.remove(paper.id):
            return False
        self.add(paper)
        return True

    def _read(self) -> list[BookmarkRecord]:
        if not self.path.exists():
            return []

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, JSONDecodeError, UnicodeDecodeError) as exc:
            LOGGER.error("Failed to load bookmarks from %s: %s", self.path, exc)
            return []

        if not isinstance(payload, list):
            LOGGER.error("Failed to load bookmarks from %s: expected a list", self.path)
            return []

        bookmarks: list[BookmarkRecord] = []
        seen: set[str] = set()
        for item in payload:
            bookmark = _bookmark_from_dict(item)
            if bookmark is None or bookmark.id in seen:
                continue
            seen.add(bookmark.id)
            bookmarks.append(bookmark)
        return bookmarks

    def _save(self) -> None:
        data = [bookmark.to_dict() for bookmark in self._bookmarks]
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            LOGGER.error("Failed to save bookmarks to %s: %s", self.path, exc)


def _bookmark_from_dict(item: Any) -> BookmarkRecord | None:
    if not isinstance(item, dict):
        return None
    paper_id = item.get("id")
    if not isinstance(paper_id, str) or not paper_id:
        return None
    return BookmarkRecord(
        id=paper_id,
        title=str(item.get("title") or ""),
        link=str(item.get("link") or ""),
        category=str(item.get("category") or ""),
        added_at=str(item.get("addedAt") or ""),
    )
