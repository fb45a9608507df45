"""Static feed configuration and environment-driven settings."""

from __future__ import annotations

import os

from models import SourceDescriptor

# arXiv RSS feeds refresh once a day around midnight US Eastern, never on weekends.
SOURCES: tuple[SourceDescriptor, ...] = (
    SourceDescriptor("cs.LG", "Machine Learning", "https://export.arxiv.org/rss/cs.LG"),
    SourceDescriptor("cs.CL", "NLP / LLMs", "https://export.arxiv.org/rss/cs.CL"),
    SourceDescriptor("cs.AI", "General AI", "https://export.arxiv.org/rss/cs.AI"),
    SourceDescriptor("cs.CV", "Computer Vision", "https://export.arxiv.org/rss/cs.CV"),
    SourceDescriptor("cs.RO", "Robotics", "https://export.arxiv.org/rss/cs.RO"),
    SourceDescriptor("cs.IR", "Information Retrieval", "https://export.arxiv.org/rss/cs.IR"),
    SourceDescriptor("stat.ML", "Statistics ML", "https://export.arxiv.org/rss/stat.ML"),
)

ARXIV_API_URL = "https://export.arxiv.org/api/query"

LOCAL_RELAY = os.getenv("PAPER_FEED_LOCAL_RELAY", "http://localhost:3001/?url=")
PUBLIC_RELAYS: tuple[str, ...] = (
    "https://api.codetabs.com/v1/proxy?quest=",
    "https://corsproxy.io/?",
    "https://api.allorigins.win/raw?url=",
)
# Marker accepted in PAPER_FEED_RELAYS for requesting the target without a relay.
DIRECT = "direct"

REQUEST_TIMEOUT_SECONDS = float(os.getenv("PAPER_FEED_TIMEOUT_SECONDS", "20"))
USER_AGENT = "AI-Paper-Feed/1.0"
MAX_RESULTS = int(os.getenv("PAPER_FEED_MAX_RESULTS", "100"))

BOOKMARKS_PATH = os.getenv("PAPER_FEED_BOOKMARKS_PATH", "bookmarks.json")

RELAY_PORT = int(os.getenv("PAPER_FEED_RELAY_PORT", "3001"))
RELAY_ALLOWED_HOSTS: frozenset[str] = frozenset({
    "export.arxiv.org",
    "arxiv.org",
    "rss.arxiv.org",
})

ALL_QUICK_FILTER = "all"

# Keyword groups behind the quick-filter chips; matched as lowercase substrings.
QUICK_FILTERS: dict[str, tuple[str, ...] | None] = {
    ALL_QUICK_FILTER: None,
    "llm": ("llm", "language model", "gpt", "bert", "transformer", "chatgpt", "llama", "gemini"),
    "transformer": ("transformer", "attention", "self-attention", "multi-head"),
    "rag": ("retrieval", "rag", "retrieval-augmented", "dense retrieval", "knowledge base"),
    "diffusion": ("diffusion", "stable diffusion", "ddpm", "score-based", "denoising"),
    "reinforcement": ("reinforcement learning", "rl", "policy gradient", "q-learning", "ppo", "rlhf"),
}


def relay_prefixes() -> list[str]:
    """Return relay prefixes in the order they should be tried.

    PAPER_FEED_RELAYS (comma-separated) replaces the default list entirely.
    """
    override = os.getenv("PAPER_FEED_RELAYS", "").strip()
    if override:
        return [part.strip() for part in override.split(",") if part.strip()]
    return [LOCAL_RELAY, *PUBLIC_RELAYS]


def source_ids() -> list[str]:
    return [source.id for source in SOURCES]
