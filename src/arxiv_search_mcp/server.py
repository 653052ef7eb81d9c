"""arXiv search MCP server - tool definitions and entry point."""

from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from .arxiv_client import ArxivClient
from .config import get_config
from .exceptions import ArxivSearchError, ValidationError, format_error_for_user
from .logging_config import setup_logging, get_logger, log_function_call_decorator as log_function_call
from .models import SortBy, SortOrder
from .utils import (
    format_no_results,
    format_paper_details,
    format_paper_not_found,
    format_search_results,
    validate_arxiv_id,
    validate_search_params,
)

# Initialize configuration and logging
config = get_config()
setup_logging(config.logging)
logger = get_logger(__name__)

mcp = FastMCP(config.server.name)

# Global client instance
arxiv_client: Optional[ArxivClient] = None


async def get_client() -> ArxivClient:
    """Get or create the arXiv client instance."""
    global arxiv_client
    if arxiv_client is None:
        arxiv_client = ArxivClient(config.arxiv_api)
    return arxiv_client


def _tool_error(error: Exception) -> ToolError:
    # FastMCP prefixes "Error executing tool <name>: " and reports it as an isError result
    return ToolError(format_error_for_user(error))


@mcp.tool()
@log_function_call(logger)
async def search_arxiv_papers(
    query: str,
    max_results: int = 10,
    sort_by: SortBy = "relevance",
    sort_order: SortOrder = "descending"
) -> str:
    """
    Search for academic papers on arXiv using natural language queries.

    You can search by keywords, authors, categories, or date ranges.

    Args:
        query: Natural language description of what papers to search for. Examples:
            "machine learning papers by Geoffrey Hinton", "recent deep learning research",
            "quantum computing papers from 2023"
        max_results: Maximum number of papers to return (1-50, default 10)
        sort_by: How to sort the results: 'relevance', 'lastUpdatedDate' or 'submittedDate'
        sort_order: Sort order for results: 'ascending' or 'descending'

    Returns:
        Formatted list of matching papers
    """
    try:
        validated = validate_search_params(
            query=query,
            max_results=max_results,
            sort_by=sort_by,
            sort_order=sort_order,
            max_results_limit=config.arxiv_api.max_results_limit
        )
    except ValidationError as e:
        logger.warning(f"Validation error in search_arxiv_papers: {e}")
        raise _tool_error(e) from e

    try:
        client = await get_client()

        logger.info(f"Searching papers with query: '{validated['query']}', max_results: {validated['max_results']}")
        result = await client.search_natural_language(
            validated['query'],
            max_results=validated['max_results'],
            sort_by=validated.get('sort_by'),
            sort_order=validated.get('sort_order'),
        )
    except ValidationError as e:
        logger.warning(f"Validation error in search_arxiv_papers: {e}")
        raise _tool_error(e) from e
    except ArxivSearchError as e:
        logger.error(f"Search failed in search_arxiv_papers: {e}")
        raise _tool_error(e) from e

    if not result.papers:
        logger.info(f"No papers found for query: '{query}'")
        return format_no_results(query)

    logger.info(f"Successfully returned {len(result.papers)} papers")
    return format_search_results(query, result)


@mcp.tool()
@log_function_call(logger)
async def get_arxiv_paper(arxiv_id: str) -> str:
    """
    Get detailed information about a specific arXiv paper by its ID.

    Args:
        arxiv_id: The arXiv ID of the paper (e.g., "1706.03762", "2301.07041")

    Returns:
        Detailed paper information including the full abstract, or a not-found message
    """
    try:
        arxiv_id = validate_arxiv_id(arxiv_id)
    except ValidationError as e:
        logger.warning(f"Invalid arXiv ID: {e}")
        raise _tool_error(e) from e

    try:
        client = await get_client()

        logger.info(f"Fetching paper details for arXiv ID: {arxiv_id}")
        paper = await client.get_paper_by_id(arxiv_id)
    except ArxivSearchError as e:
        logger.error(f"Lookup failed in get_arxiv_paper: {e}")
        raise _tool_error(e) from e

    if paper is None:
        logger.warning(f"Paper not found: {arxiv_id}")
        return format_paper_not_found(arxiv_id)

    logger.info(f"Successfully retrieved paper: {paper.title}")
    return format_paper_details(paper)


def main():
    """Main entry point for the arXiv search MCP server."""
    try:
        logger.info(f"Starting {config.server.name} {config.server.version}")
        logger.debug(f"Configuration loaded: {config.model_dump()}")
        mcp.run(transport='stdio')
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
    except Exception as e:
        logger.error(f"Fatal error in main: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
