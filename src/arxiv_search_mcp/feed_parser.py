"""Normalization of arXiv Atom feeds into `SearchResult` objects."""

import re
import xml.sax
from typing import Any, List, Optional

import feedparser

from .exceptions import ParseError
from .models import ArxivPaper, SearchResult
from .utils import collapse_whitespace, safe_int_conversion
from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_PDF_BASE_URL = "http://arxiv.org/pdf"
DEFAULT_ABS_BASE_URL = "http://arxiv.org/abs"

NO_TITLE = "No title"
NO_ABSTRACT = "No abstract available"

_ABS_ID_PATTERN = re.compile(r"abs/(.+?)(?:v\d+)?$")
_VERSION_SUFFIX = re.compile(r"v\d+$")


def extract_arxiv_id(raw_id: Optional[str]) -> str:
    """
    Reduce an entry identifier URI to the bare arXiv ID.

    ``http://arxiv.org/abs/2301.07041v2`` becomes ``2301.07041`` and
    ``http://arxiv.org/abs/hep-th/9901001v1`` becomes ``hep-th/9901001``.

    Args:
        raw_id: Identifier as found in the feed entry

    Returns:
        Bare identifier, or an empty string when there is none
    """
    raw_id = (raw_id or '').strip()
    if not raw_id:
        return ''

    match = _ABS_ID_PATTERN.search(raw_id)
    if match:
        arxiv_id = match.group(1)
    else:
        arxiv_id = _VERSION_SUFFIX.sub('', raw_id.rstrip('/').rsplit('/', 1)[-1])

    return arxiv_id or raw_id


def _find_link(links: List[Any], link_type: str) -> Optional[str]:
    for link in links:
        if link.get('type') == link_type and link.get('href'):
            return link['href']
    return None


def _parse_entry(entry: Any, pdf_base_url: str, abs_base_url: str) -> ArxivPaper:
    arxiv_id = extract_arxiv_id(entry.get('id'))

    authors = [
        collapse_whitespace(author.get('name'))
        for author in entry.get('authors', [])
    ]
    categories = [
        (tag.get('term') or '').strip()
        for tag in entry.get('tags', [])
    ]

    published = entry.get('published') or ''
    # Checked explicitly: feedparser aliases a missing 'updated' to 'published' with a warning
    updated = entry['updated'] if 'updated' in entry else ''

    links = entry.get('links', [])
    pdf_url = _find_link(links, 'application/pdf') or f"{pdf_base_url}/{arxiv_id}.pdf"
    abs_url = _find_link(links, 'text/html') or f"{abs_base_url}/{arxiv_id}"

    return ArxivPaper(
        id=arxiv_id,
        title=collapse_whitespace(entry.get('title')) or NO_TITLE,
        authors=[name for name in authors if name],
        abstract=collapse_whitespace(entry.get('summary')) or NO_ABSTRACT,
        published=published,
        updated=updated or published,
        categories=[term for term in categories if term],
        pdf_url=pdf_url,
        abs_url=abs_url,
    )


def normalize_feed(
    raw_body: str,
    query: str = "",
    pdf_base_url: str = DEFAULT_PDF_BASE_URL,
    abs_base_url: str = DEFAULT_ABS_BASE_URL,
) -> SearchResult:
    """
    Parse an arXiv API response body into a SearchResult.

    Missing entry fields fall back to documented defaults; a body that is
    not a well-formed Atom feed is an error and yields no partial results.

    Args:
        raw_body: Atom XML returned by the arXiv API
        query: The query that produced the body, kept on the result
        pdf_base_url: Base used to build PDF links absent from an entry
        abs_base_url: Base used to build abstract page links absent from an entry

    Returns:
        SearchResult with normalized papers and pagination metadata

    Raises:
        ParseError: If the body is not well-formed Atom XML
    """
    # feedparser treats non-markup strings as URLs or file names
    if not raw_body or not raw_body.lstrip().startswith('<'):
        raise ParseError(
            "Invalid XML response from arXiv: body is not XML",
            body_preview=(raw_body or '')[:200]
        )

    feed = feedparser.parse(raw_body)

    bozo_exception = feed.get('bozo_exception')

    # feedparser recovers from broken XML; a truncated body must not yield partial entries
    if isinstance(bozo_exception, xml.sax.SAXException):
        raise ParseError(
            f"Invalid XML response from arXiv: {bozo_exception}",
            body_preview=raw_body[:200]
        )

    if not feed.get('version', '').startswith('atom'):
        reason = bozo_exception or "no Atom feed element found"
        raise ParseError(
            f"Invalid XML response from arXiv: {reason}",
            body_preview=(raw_body or '')[:200]
        )

    if feed.get('bozo'):
        logger.warning(f"Feed parsing warning: {bozo_exception}")

    metadata = feed.feed
    papers = [_parse_entry(entry, pdf_base_url, abs_base_url) for entry in feed.entries]

    return SearchResult(
        papers=papers,
        total_results=safe_int_conversion(metadata.get('opensearch_totalresults'), default=0, min_val=0),
        start_index=safe_int_conversion(metadata.get('opensearch_startindex'), default=0, min_val=0),
        items_per_page=safe_int_conversion(metadata.get('opensearch_itemsperpage'), default=0, min_val=0),
        query=query,
    )
