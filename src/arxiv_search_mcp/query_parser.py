"""Natural-language query interpretation and arXiv query construction.

`parse_query` turns a free-form request such as
"recent deep learning papers by Geoffrey Hinton" into a `SearchIntent`;
`build_arxiv_query` turns that intent into an arXiv ``search_query``
expression. Both functions are pure and never raise on user text: an input
with no recognizable signal simply produces an empty intent.
"""

import re
from datetime import date
from types import MappingProxyType
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from .models import DateRange, SearchIntent
from .logging_config import get_logger

logger = get_logger(__name__)

MATCH_ALL_QUERY = "all:*"

# Keyword (English or Japanese) -> arXiv category code, checked in this order.
CATEGORY_KEYWORDS = MappingProxyType({
    'machine learning': 'cs.LG',
    '機械学習': 'cs.LG',
    'artificial intelligence': 'cs.AI',
    '人工知能': 'cs.AI',
    'computer vision': 'cs.CV',
    'コンピュータビジョン': 'cs.CV',
    '画像認識': 'cs.CV',
    'natural language processing': 'cs.CL',
    '自然言語処理': 'cs.CL',
    'nlp': 'cs.CL',
    'deep learning': 'cs.LG',
    '深層学習': 'cs.LG',
    'ディープラーニング': 'cs.LG',
    'neural networks': 'cs.NE',
    'ニューラルネットワーク': 'cs.NE',
    '神経回路網': 'cs.NE',
    'physics': 'physics',
    '物理学': 'physics',
    '物理': 'physics',
    'mathematics': 'math',
    '数学': 'math',
    'quantum': 'quant-ph',
    '量子': 'quant-ph',
    '量子コンピューティング': 'quant-ph',
    '量子計算': 'quant-ph',
    'biology': 'q-bio',
    '生物学': 'q-bio',
    'chemistry': 'physics.chem-ph',
    '化学': 'physics.chem-ph',
    'astronomy': 'astro-ph',
    '天文学': 'astro-ph',
    'cryptography': 'cs.CR',
    '暗号': 'cs.CR',
    'robotics': 'cs.RO',
    'ロボティクス': 'cs.RO',
    'ロボット': 'cs.RO',
    'databases': 'cs.DB',
    'データベース': 'cs.DB',
    'algorithms': 'cs.DS',
    'アルゴリズム': 'cs.DS',
    'graphics': 'cs.GR',
    'グラフィックス': 'cs.GR',
    'hci': 'cs.HC',
    'human computer interaction': 'cs.HC',
    'ヒューマンコンピュータインタラクション': 'cs.HC',
    'information theory': 'cs.IT',
    '情報理論': 'cs.IT',
    'networking': 'cs.NI',
    'ネットワーク': 'cs.NI',
    'operating systems': 'cs.OS',
    'オペレーティングシステム': 'cs.OS',
    'programming languages': 'cs.PL',
    'プログラミング言語': 'cs.PL',
    'software engineering': 'cs.SE',
    'ソフトウェア工学': 'cs.SE',
    'systems': 'cs.SY',
    'システム': 'cs.SY',
})

STOP_WORDS = frozenset({
    'papers', 'paper', 'research', 'about', 'on', 'in', 'the', 'a', 'an',
    'and', 'or', 'but', 'for', 'with', 'to', 'of', 'at', 'by', 'from',
    'find', 'search', 'look', 'get', 'show', 'give', 'me', 'i', 'want',
    'need', 'related', 'regarding', 'concerning', 'involving',
    '論文', '研究', 'について', 'に関する', 'の', 'が', 'を', 'で', 'は', 'も',
    '探す', '検索', '見つける', '取得', '表示', '欲しい', '必要', '関連', 'する',
})

# A name runs until a connecting word or the end of the query.
_AUTHOR_NAME = r"([a-z\s,]+?)(?:\s+(?:and|on|in|about|papers?|research)\b|$)"

AUTHOR_PATTERNS = (
    re.compile(r"\b(?:by|from|author:?)\s+" + _AUTHOR_NAME),
    re.compile(r"\bpapers?\s+by\s+" + _AUTHOR_NAME),
)

_AUTHOR_SEPARATOR = re.compile(r",|\sand\s")

YEAR_PATTERN = re.compile(r"(?:\b(?:from|since|after|in|year)|から|以降|年)\s*(\d{4})(?!\d)")
# "2023年以降", "2021年から"
YEAR_SUFFIX_PATTERN = re.compile(r"(?<!\d)(\d{4})\s*年")

RECENT_PATTERN = re.compile(
    r"\b(?:recent(?:ly)?|latest|newest|new|current(?:ly)?|past\s+(?:year|month|week))\b"
    r"|最新|最近|新しい|現在|今年|去年"
)

LIMIT_PATTERN = re.compile(r"\b(?:top|first|show|find|get)\s+(\d+)")

_NON_WORD = re.compile(r"[^\w]", re.ASCII)

_MIN_TERM_LENGTH = 3


def _keyword_pattern(keyword: str) -> "re.Pattern[str]":
    # Word boundaries only make sense for space-delimited scripts.
    escaped = re.escape(keyword)
    if keyword.isascii():
        return re.compile(rf"\b{escaped}\b")
    return re.compile(escaped)


_CATEGORY_PATTERNS = tuple(_keyword_pattern(keyword) for keyword in CATEGORY_KEYWORDS)


def _extract_authors(query: str) -> List[str]:
    authors = []
    for pattern in AUTHOR_PATTERNS:
        for match in pattern.finditer(query):
            for name in _AUTHOR_SEPARATOR.split(match.group(1)):
                name = name.strip()
                if name:
                    authors.append(name)
    return authors


def _extract_categories(query: str) -> List[str]:
    return [code for keyword, code in CATEGORY_KEYWORDS.items() if keyword in query]


def _extract_date_range(query: str, today: date) -> Optional[DateRange]:
    date_range = None

    year_match = YEAR_PATTERN.search(query) or YEAR_SUFFIX_PATTERN.search(query)
    if year_match:
        date_range = DateRange(start=f"{year_match.group(1)}-01-01")

    # Recency wins over an explicit year
    if RECENT_PATTERN.search(query):
        date_range = DateRange(start=(today - relativedelta(years=1)).isoformat())

    return date_range


def _extract_search_terms(query: str) -> List[str]:
    clean = query
    for pattern in AUTHOR_PATTERNS:
        clean = pattern.sub(' ', clean)
    for pattern in _CATEGORY_PATTERNS:
        clean = pattern.sub(' ', clean)
    for pattern in (YEAR_PATTERN, YEAR_SUFFIX_PATTERN, RECENT_PATTERN, LIMIT_PATTERN):
        clean = pattern.sub(' ', clean)

    terms = []
    for token in clean.split():
        term = _NON_WORD.sub('', token)
        if len(term) >= _MIN_TERM_LENGTH and term not in STOP_WORDS:
            terms.append(term)

    # Dedupe, keeping first occurrence
    return list(dict.fromkeys(terms))


def parse_query(natural_language_query: str, today: Optional[date] = None) -> SearchIntent:
    """
    Interpret a natural-language request as a structured search intent.

    Args:
        natural_language_query: Free-form text, English or Japanese
        today: Reference date for recency keywords (defaults to today)

    Returns:
        SearchIntent with whatever authors, categories, dates, result
        count and residual search terms could be recognized
    """
    query = natural_language_query.lower()
    today = today or date.today()

    limit_match = LIMIT_PATTERN.search(query)

    intent = SearchIntent(
        search_terms=_extract_search_terms(query),
        authors=_extract_authors(query),
        categories=_extract_categories(query),
        date_range=_extract_date_range(query, today),
        max_results=int(limit_match.group(1)) if limit_match else None,
    )

    logger.debug(f"Interpreted query {natural_language_query!r} as {intent.model_dump(exclude_none=True)}")
    return intent


def build_arxiv_query(intent: SearchIntent) -> str:
    """
    Convert a search intent into an arXiv search_query expression.

    Terms are ANDed inside one ``all:`` clause; authors and categories are
    ORed inside their own parenthesized clauses; clauses are ANDed together.

    Args:
        intent: Parsed search intent

    Returns:
        arXiv query string, ``all:*`` when the intent carries nothing to match on
    """
    query_parts = []

    if intent.search_terms:
        query_parts.append(f"all:{' AND '.join(intent.search_terms)}")

    if intent.authors:
        authors_query = ' OR '.join(f'au:"{author}"' for author in intent.authors)
        query_parts.append(f"({authors_query})")

    if intent.categories:
        categories_query = ' OR '.join(f"cat:{category}" for category in intent.categories)
        query_parts.append(f"({categories_query})")

    if not query_parts:
        return MATCH_ALL_QUERY

    return ' AND '.join(query_parts)
