"""Utility functions for the arXiv search MCP server."""

import re
from typing import Optional, Dict, Any, List

from .exceptions import ValidationError
from .models import ArxivPaper, SearchResult
from .logging_config import get_logger

logger = get_logger(__name__)

VALID_SORT_BY = ("relevance", "lastUpdatedDate", "submittedDate")
VALID_SORT_ORDER = ("ascending", "descending")

ABSTRACT_PREVIEW_LENGTH = 300

_WHITESPACE = re.compile(r'\s+')
_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f-\x9f]')


def collapse_whitespace(value: Optional[str]) -> str:
    """Collapse whitespace runs to single spaces and trim; None becomes ''."""
    if not value:
        return ""
    return _WHITESPACE.sub(' ', value).strip()


def truncate_text(text: str, limit: int = ABSTRACT_PREVIEW_LENGTH) -> str:
    """Cut text to `limit` characters, marking the cut with '...'."""
    if len(text) > limit:
        return text[:limit] + '...'
    return text


def sanitize_string(value: Any, max_length: int = 1000) -> str:
    """
    Sanitize a string input by removing control characters and excess whitespace.

    Args:
        value: Input value to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized string

    Raises:
        ValidationError: If input is too long
    """
    if value is None:
        return ""

    if not isinstance(value, str):
        value = str(value)

    value = _CONTROL_CHARS.sub(' ', value)
    value = collapse_whitespace(value)

    if len(value) > max_length:
        raise ValidationError(f"Input too long (max {max_length} characters)")

    return value


def validate_search_params(
    query: Any = None,
    max_results: Any = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    max_results_limit: int = 50
) -> Dict[str, Any]:
    """
    Validate search tool parameters.

    Args:
        query: Natural-language query
        max_results: Requested number of results
        sort_by: Sort field
        sort_order: Sort direction
        max_results_limit: Largest accepted max_results

    Returns:
        Dictionary of validated parameters (only those that were given)

    Raises:
        ValidationError: If any parameter is invalid
    """
    validated = {}

    if query is not None:
        if not isinstance(query, str):
            raise ValidationError(
                "Query parameter is required and must be a string", field="query", value=query
            )

        query = sanitize_string(query)
        if not query:
            raise ValidationError("Query parameter is required and must be a string", field="query")

        validated['query'] = query

    if max_results is not None:
        if isinstance(max_results, bool) or (isinstance(max_results, float) and not max_results.is_integer()):
            raise ValidationError("max_results must be an integer", field="max_results", value=max_results)
        try:
            max_results = int(max_results)
        except (ValueError, TypeError):
            raise ValidationError("max_results must be an integer", field="max_results", value=max_results)

        if max_results < 1 or max_results > max_results_limit:
            raise ValidationError(
                f"max_results must be between 1 and {max_results_limit}",
                field="max_results",
                value=max_results
            )

        validated['max_results'] = max_results

    if sort_by is not None:
        if sort_by not in VALID_SORT_BY:
            raise ValidationError(
                f"sort_by must be one of {', '.join(VALID_SORT_BY)}", field="sort_by", value=sort_by
            )
        validated['sort_by'] = sort_by

    if sort_order is not None:
        if sort_order not in VALID_SORT_ORDER:
            raise ValidationError(
                f"sort_order must be one of {', '.join(VALID_SORT_ORDER)}", field="sort_order", value=sort_order
            )
        validated['sort_order'] = sort_order

    return validated


def validate_arxiv_id(arxiv_id: Any) -> str:
    """
    Check that an arXiv identifier was supplied.

    Args:
        arxiv_id: Identifier from the caller

    Returns:
        The sanitized identifier

    Raises:
        ValidationError: If the identifier is missing or not a string
    """
    if not isinstance(arxiv_id, str) or not sanitize_string(arxiv_id):
        raise ValidationError(
            "arxiv_id parameter is required and must be a string", field="arxiv_id", value=arxiv_id
        )
    return sanitize_string(arxiv_id)


def safe_int_conversion(value: Any, default: int = 0, min_val: Optional[int] = None, max_val: Optional[int] = None) -> int:
    """
    Safely convert a value to integer with bounds checking.

    Args:
        value: Value to convert
        default: Default value if conversion fails
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        Converted integer value
    """
    if value is None:
        return default

    try:
        result = int(str(value).strip())
    except (ValueError, TypeError):
        logger.warning(f"Failed to convert '{value}' to int, using default {default}")
        return default

    if min_val is not None and result < min_val:
        logger.warning(f"Value {result} below minimum {min_val}, using minimum")
        return min_val

    if max_val is not None and result > max_val:
        logger.warning(f"Value {result} above maximum {max_val}, using maximum")
        return max_val

    return result


def _date_part(timestamp: str) -> str:
    return timestamp.split('T')[0] if timestamp else "Unknown date"


def _authors_text(paper: ArxivPaper) -> str:
    return ', '.join(paper.authors) if paper.authors else "Unknown authors"


def _categories_text(paper: ArxivPaper) -> str:
    return ', '.join(paper.categories) if paper.categories else "No categories"


def format_search_results(query: str, result: SearchResult) -> str:
    """
    Format search results as the text returned to the agent.

    Args:
        query: The caller's natural-language query
        result: Search result with at least one paper

    Returns:
        Summary line followed by one numbered block per paper
    """
    blocks: List[str] = []
    for i, paper in enumerate(result.papers, 1):
        blocks.append(
            f"{i}. **{paper.title}**\n"
            f"   - **Authors:** {_authors_text(paper)}\n"
            f"   - **arXiv ID:** {paper.id}\n"
            f"   - **Published:** {_date_part(paper.published)}\n"
            f"   - **Categories:** {_categories_text(paper)}\n"
            f"   - **Abstract:** {truncate_text(paper.abstract)}\n"
            f"   - **PDF:** {paper.pdf_url}\n"
            f"   - **arXiv URL:** {paper.abs_url}"
        )

    summary = (
        f'Found {len(result.papers)} papers (out of {result.total_results} total results) '
        f'for query: "{query}"'
    )
    return summary + "\n\n" + "\n\n".join(blocks)


def format_no_results(query: str) -> str:
    """Message returned when a search matched nothing."""
    return (
        f'No papers found for query: "{query}"\n\n'
        "Try:\n"
        "- Using different keywords\n"
        "- Broadening your search terms\n"
        "- Checking spelling\n"
        "- Using author names or arXiv categories"
    )


def format_paper_details(paper: ArxivPaper) -> str:
    """
    Format a single paper with its full abstract.

    Args:
        paper: Normalized paper

    Returns:
        Detailed, human-readable description
    """
    return f"""**{paper.title}**

**Authors:** {_authors_text(paper)}

**arXiv ID:** {paper.id}

**Published:** {_date_part(paper.published)}
**Last Updated:** {_date_part(paper.updated)}

**Categories:** {_categories_text(paper)}

**Abstract:**
{paper.abstract}

**Links:**
- **PDF:** {paper.pdf_url}
- **arXiv Page:** {paper.abs_url}"""


def format_paper_not_found(arxiv_id: str) -> str:
    """Message returned when no paper has the requested identifier."""
    return f'Paper with arXiv ID "{arxiv_id}" not found. Please check the ID and try again.'
