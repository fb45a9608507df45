from datetime import UTC

import pytest

from arxiv_parsers import (
    _first_creator,
    clean_text,
    extract_arxiv_id,
    parse_api_response,
    parse_rss_feed,
)

RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss xmlns:dc="http://purl.org/dc/elements/1.1/" version="2.0">
  <channel>
    <title>cs.LG updates on arXiv.org</title>
    <link>http://rss.arxiv.org/rss/cs.LG</link>
    <description>cs.LG updates on the arXiv.org e-print archive.</description>
    <item>
      <title>(cs.LG) Scaling GPT Models Efficiently</title>
      <link>http://arxiv.org/abs/2401.00001</link>
      <description><![CDATA[<p>We   study <b>scaling</b>.</p>]]></description>
      <dc:creator>Alice Smith, Bob Jones</dc:creator>
    </item>
    <item>
      <title>Missing Link Paper</title>
      <description>No link here.</description>
    </item>
    <item>
      <title>Paper Without Abs Path</title>
      <link>https://example.org/listing/42</link>
      <description>Elsewhere.</description>
    </item>
  </channel>
</rss>
"""

ATOM_RESPONSE = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>ArXiv Query: cat:cs.CL</title>
  <id>http://arxiv.org/api/query-id</id>
  <updated>2026-01-17T00:00:00-05:00</updated>
  <entry>
    <id>http://arxiv.org/abs/2401.00002v1</id>
    <updated>2026-01-16T18:00:00Z</updated>
    <title>Retrieval-Augmented
      Generation at Scale</title>
    <summary>  We present a RAG
      system.  </summary>
    <author><name>Alice Smith</name></author>
    <author><name>Bob Jones</name></author>
    <link href="http://arxiv.org/abs/2401.00002v1" rel="alternate" type="text/html"/>
    <link title="pdf" href="http://arxiv.org/pdf/2401.00002v1" rel="related" type="application/pdf"/>
  </entry>
  <entry>
    <id>http://arxiv.org/abs/2401.00003v2</id>
    <updated>2026-01-16T18:00:00Z</updated>
    <title>Alternate Only</title>
    <summary>Summary.</summary>
    <author><name>Carol White</name></author>
    <link href="http://arxiv.org/abs/2401.00003v2" rel="alternate" type="text/html"/>
  </entry>
  <entry>
    <id>http://arxiv.org/abs/2401.00004v1</id>
    <updated>2026-01-16T18:00:00Z</updated>
    <title></title>
    <summary>Untitled entries are dropped.</summary>
  </entry>
</feed>
"""


def test_parse_rss_feed_smoke() -> None:
    papers = parse_rss_feed(RSS_FEED, "cs.LG")

    assert len(papers) == 2
    first = papers[0]
    assert first.id == "2401.00001"
    assert first.title == "Scaling GPT Models Efficiently"
    assert first.link == "https://arxiv.org/abs/2401.00001"
    assert first.abstract == "We study scaling."
    assert first.authors == "Alice Smith, Bob Jones"
    assert first.category == "cs.LG"
    assert first.fetched_at.tzinfo == UTC


def test_parse_rss_feed_drops_items_without_link() -> None:
    titles = [paper.title for paper in parse_rss_feed(RSS_FEED, "cs.LG")]
    assert "Missing Link Paper" not in titles


def test_parse_rss_feed_positional_fallback_id() -> None:
    """Index counts every item in the document, including dropped ones."""
    papers = parse_rss_feed(RSS_FEED, "cs.LG")
    assert papers[1].id == "cs.LG-2"
    assert papers[1].link == "https://example.org/listing/42"


def test_parse_api_response_smoke() -> None:
    papers = parse_api_response(ATOM_RESPONSE, "cs.CL")

    assert [paper.id for paper in papers] == ["2401.00002v1", "2401.00003v2"]
    first = papers[0]
    assert first.title == "Retrieval-Augmented Generation at Scale"
    assert first.abstract == "We present a RAG system."
    assert first.authors == "Alice Smith, Bob Jones"
    assert first.link == "https://arxiv.org/pdf/2401.00002v1"
    assert first.category == "cs.CL"


def test_parse_api_response_falls_back_to_alternate_link() -> None:
    papers = parse_api_response(ATOM_RESPONSE, "cs.CL")
    assert papers[1].link == "https://arxiv.org/abs/2401.00003v2"
    assert papers[1].authors == "Carol White"


def test_parse_api_response_skips_error_entries() -> None:
    body = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <entry>
    <id>http://arxiv.org/api/errors#incorrect_id_format</id>
    <title>Error</title>
    <summary>incorrect id format</summary>
  </entry>
</feed>
"""
    assert parse_api_response(body, "cs.CL") == []


@pytest.mark.parametrize("body", ["", "<<<not xml at all", "<html><body>Bad gateway</body></html>"])
def test_parsers_return_empty_list_for_malformed_documents(body: str) -> None:
    assert parse_rss_feed(body, "cs.LG") == []
    assert parse_api_response(body, "cs.LG") == []


def test_no_parser_output_has_empty_title_or_link() -> None:
    papers = parse_rss_feed(RSS_FEED, "cs.LG") + parse_api_response(ATOM_RESPONSE, "cs.CL")
    assert papers
    assert all(paper.title and paper.link for paper in papers)


def test_first_creator_prefers_plain_field() -> None:
    assert _first_creator({"creator": "Plain Name", "author": "Dc Name"}) == "Plain Name"
    assert _first_creator({"creator": "", "author": "Dc Name"}) == "Dc Name"
    assert _first_creator({}) == ""


def test_clean_text_strips_tags_and_entities() -> None:
    assert clean_text("<p>A &lt;b&gt; &amp;\n\n  C</p>") == "A <b> & C"
    assert clean_text(None) == ""


@pytest.mark.parametrize("url, expected", [
    ("https://arxiv.org/abs/2401.00001", "2401.00001"),
    ("http://arxiv.org/abs/2401.00001v3?context=cs", "2401.00001v3"),
    ("http://arxiv.org/abs/hep-th/9901001v1", "hep-th/9901001v1"),
    ("https://example.org/paper/1", ""),
])
def test_extract_arxiv_id(url: str, expected: str) -> None:
    assert extract_arxiv_id(url) == expected


def test_parse_api_response_falls_back_to_entry_id_url() -> None:
    body = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <entry>
    <id>http://arxiv.org/whatever/xyz123</id>
    <title>No Links Here</title>
    <summary>Neither pdf nor alternate.</summary>
  </entry>
</feed>
"""
    papers = parse_api_response(body, "cs.IR")

    assert len(papers) == 1
    assert papers[0].id == "xyz123"
    assert papers[0].link == "https://arxiv.org/whatever/xyz123"


def test_parse_rss_feed_prefers_plain_creator_over_dublin_core() -> None:
    body = """<?xml version="1.0" encoding="UTF-8"?>
<rss xmlns:dc="http://purl.org/dc/elements/1.1/" version="2.0">
  <channel>
    <title>cs.AI updates on arXiv.org</title>
    <item>
      <title>Both Creator Fields</title>
      <link>https://arxiv.org/abs/2401.00010</link>
      <creator>Plain Creator</creator>
      <dc:creator>Namespaced Creator</dc:creator>
    </item>
  </channel>
</rss>
"""
    papers = parse_rss_feed(body, "cs.AI")
    assert papers[0].authors == "Plain Creator"


def test_parse_rss_feed_honours_declared_encoding_of_raw_bytes() -> None:
    body = """<?xml version="1.0" encoding="ISO-8859-1"?>
<rss xmlns:dc="http://purl.org/dc/elements/1.1/" version="2.0">
  <channel>
    <title>stat.ML updates on arXiv.org</title>
    <item>
      <title>Kernel Methods</title>
      <link>https://arxiv.org/abs/2401.00011</link>
      <dc:creator>Jürgen Müller</dc:creator>
    </item>
  </channel>
</rss>
""".encode("iso-8859-1")

    papers = parse_rss_feed(body, "stat.ML")
    assert papers[0].authors == "Jürgen Müller"
