"""Relay-aware HTTP transports and the first-success fallback chain."""

from __future__ import annotations

import logging
from typing import Callable, Protocol
from urllib.parse import quote, urlsplit

import requests

from config import DIRECT, REQUEST_TIMEOUT_SECONDS, USER_AGENT, relay_prefixes
from models import PaperRecord

LOGGER = logging.getLogger(__name__)


class TransportError(RuntimeError):
    """Raised when a single transport candidate cannot deliver a usable body."""


class Transport(Protocol):
    name: str

    def fetch(self, url: str) -> bytes:
        """Return the raw response body for url or raise TransportError."""
        ...


class RelayTransport:
    """Fetch a target URL through a relay that takes it as a query parameter.

    An empty prefix means the target is requested directly.
    """

    def __init__(self, prefix: str, timeout: float = REQUEST_TIMEOUT_SECONDS) -> None:
        self.prefix = "" if prefix == DIRECT else prefix
        self.timeout = timeout
        self.name = urlsplit(self.prefix).netloc or DIRECT

    def request_url(self, url: str) -> str:
        if not self.prefix:
            return url
        return self.prefix + quote(url, safe="")

    def fetch(self, url: str) -> bytes:
        try:
            response = requests.get(
                self.request_url(url),
                headers={"User-Agent": USER_AGENT},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise TransportError(f"{self.name}: {exc}") from exc

        # Raw bytes let feedparser honour the encoding declared in the XML prolog.
        body = response.content
        if not body or not body.strip():
            raise TransportError(f"{self.name}: empty response body")
        return body

    def __repr__(self) -> str:
        return f"RelayTransport({self.name!r})"


class TransportChain:
    """Try transports in a fixed order until one yields parseable records."""

    def __init__(self, transports: list[Transport]) -> None:
        self.transports = list(transports)

    @classmethod
    def from_config(cls) -> TransportChain:
        return cls([RelayTransport(prefix) for prefix in relay_prefixes()])

    def fetch_records(
        self,
        url: str,
        parse: Callable[[bytes], list[PaperRecord]],
        label: str = "",
    ) -> list[PaperRecord]:
        """Return the records parsed from the first transport that succeeds.

        A candidate is skipped on network or status errors, on an empty body,
        and when its body parses to zero records. Exhausting every candidate
        returns an empty list instead of raising.
        """
        label = label or url
        for transport in self.transports:
            try:
                body = transport.fetch(url)
            except TransportError as exc:
                LOGGER.warning("Transport failed for %s: %s", label, exc)
                continue

            records = parse(body)
            if records:
                LOGGER.info(
                    "Fetched %s papers from %s via %s", len(records), label, transport.name
                )
                return records
            LOGGER.warning("Transport %s returned no papers for %s", transport.name, label)

        LOGGER.error("All transports failed for %s", label)
        return []
