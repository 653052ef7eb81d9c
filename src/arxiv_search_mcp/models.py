"""Data models for query intents, arXiv papers and search results."""

from typing import Optional, List, Literal, Tuple
from pydantic import BaseModel, ConfigDict, Field

SortBy = Literal["relevance", "lastUpdatedDate", "submittedDate"]
SortOrder = Literal["ascending", "descending"]


class DateRange(BaseModel):
    """Date constraint extracted from a natural-language query."""
    model_config = ConfigDict(frozen=True)

    start: Optional[str] = Field(default=None, description="ISO date (YYYY-MM-DD)")
    end: Optional[str] = Field(default=None, description="ISO date (YYYY-MM-DD)")


class SearchIntent(BaseModel):
    """Structured interpretation of a natural-language search request."""
    model_config = ConfigDict(frozen=True)

    search_terms: Tuple[str, ...] = ()
    authors: Tuple[str, ...] = ()
    categories: Tuple[str, ...] = ()
    date_range: Optional[DateRange] = None
    max_results: Optional[int] = None


class ArxivPaper(BaseModel):
    """Normalized arXiv entry."""
    id: str = Field(description="arXiv identifier without version (e.g., 2301.07041)")
    title: str
    authors: List[str] = Field(default_factory=list)
    abstract: str
    published: str = Field(description="Publication timestamp as sent by arXiv")
    updated: str = Field(description="Last update timestamp, falls back to published")
    categories: List[str] = Field(default_factory=list)
    pdf_url: str
    abs_url: str


class SearchResult(BaseModel):
    """Represents search results from arXiv."""
    papers: List[ArxivPaper] = Field(default_factory=list)
    total_results: int = Field(default=0, ge=0)
    start_index: int = Field(default=0, ge=0)
    items_per_page: int = Field(default=0, ge=0)
    query: str = ""


class SearchParams(BaseModel):
    """Parameters for one arXiv search request."""
    query: str = Field(description="Search query using arXiv query syntax")
    max_results: int = Field(default=10, ge=1, description="Maximum number of results to return")
    start: int = Field(default=0, ge=0, description="Starting index for pagination")
    sort_by: Optional[SortBy] = Field(default=None, description="relevance, lastUpdatedDate or submittedDate")
    sort_order: Optional[SortOrder] = Field(default=None, description="ascending or descending")
