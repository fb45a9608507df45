"""Local relay that forwards GET requests to arXiv hosts with permissive CORS headers.

Run standalone:
    python relay.py
then fetch e.g. http://localhost:3001/?url=https://export.arxiv.org/rss/cs.LG
"""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

import requests
from flask import Flask, Response, jsonify, request

from config import RELAY_ALLOWED_HOSTS, RELAY_PORT, REQUEST_TIMEOUT_SECONDS, USER_AGENT

LOGGER = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def create_app(allowed_hosts: frozenset[str] = RELAY_ALLOWED_HOSTS) -> Flask:
    """Create the relay Flask application."""
    app = Flask(__name__)

    @app.after_request
    def add_cors_headers(response: Response) -> Response:
        response.headers.update(CORS_HEADERS)
        return response

    @app.route("/", methods=["GET", "OPTIONS"])
    def relay() -> tuple[Response, int] | Response:
        if request.method == "OPTIONS":
            return Response(status=204)

        target = request.args.get("url")
        if not target:
            return jsonify({"error": "Missing url parameter"}), 400

        parsed = urlsplit(target)
        if parsed.scheme not in {"http", "https"} or not parsed.hostname:
            return jsonify({"error": "Invalid URL"}), 400

        if parsed.hostname not in allowed_hosts:
            LOGGER.warning("Relay: rejected host=%s", parsed.hostname)
            return jsonify({"error": "Host not allowed"}), 403

        LOGGER.info("Relay: fetching %s", target)
        try:
            upstream = requests.get(
                target,
                headers={"User-Agent": USER_AGENT},
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except requests.RequestException as exc:
            LOGGER.error("Relay: fetch error for %s: %s", target, exc)
            return jsonify({"error": str(exc)}), 500

        return Response(
            upstream.content,
            status=upstream.status_code,
            content_type=upstream.headers.get("Content-Type", "application/xml"),
        )

    return app


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    LOGGER.info("Relay listening on http://localhost:%s", RELAY_PORT)
    create_app().run(host="127.0.0.1", port=RELAY_PORT)


if __name__ == "__main__":
    main()
