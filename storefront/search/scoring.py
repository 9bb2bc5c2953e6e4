"""
scoring.py

Heuristic relevance scoring of candidate strings against a free-text query,
and the suggestion ranking built on it.

The score is a weighted sum of independent signals (exact, prefix and
substring matches on raw and normalized forms, token coverage, per-word
prefix hits, keyword-table membership, length heuristics and domain-term
boosts). Weights live in config.py. The score is a ranking signal only:
it is unbounded and may be negative.
"""

from typing import Callable, Iterable, List, Optional, Sequence, Set, Tuple, TypeVar
import math

from .dictionary import KeywordTables
from .preprocess import normalize
from . import config

T = TypeVar("T")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def token_coverage(normalized_candidate: str, normalized_query: str) -> float:
    """
    Fraction of query tokens found in the candidate's token set.
    Every query token counts, repeated ones included; a query without
    tokens has coverage 0.
    """
    query_tokens = [t for t in normalized_query.split() if t]
    if not query_tokens:
        return 0.0
    candidate_tokens = set(normalized_candidate.split())
    overlap = sum(1 for t in query_tokens if t in candidate_tokens)
    return overlap / len(query_tokens)


def _length_adjustment(length: int) -> int:
    if length < config.SHORT_CANDIDATE_LENGTH:
        return config.SHORT_CANDIDATE_BONUS
    if length > config.LONG_CANDIDATE_LENGTH:
        over = (length - config.LONG_CANDIDATE_LENGTH) // config.LONG_CANDIDATE_STEP
        return -min(config.LONG_CANDIDATE_MAX_PENALTY, over)
    return 0


def calculate_relevance_score(candidate: str, query: str, tables: Optional[KeywordTables] = None) -> int:
    """
    Score a single candidate against a query.

    Args:
        candidate: searchable text (product name, brand, composite text ...)
        query: raw or normalized user query
        tables: keyword tables; built-in tables when omitted

    Returns:
        integer score, higher is more relevant
    """
    tables = tables or KeywordTables.default()
    candidate = candidate or ""
    query = query or ""

    candidate_lower = candidate.lower()
    query_lower = query.lower()
    norm_candidate = normalize(candidate_lower)
    norm_query = normalize(query_lower)

    score = 0

    # 1-2) exact match
    if candidate_lower == query_lower:
        score += config.EXACT_MATCH_WEIGHT
    if norm_candidate == norm_query:
        score += config.NORMALIZED_EXACT_MATCH_WEIGHT

    # 3-4) prefix match
    if candidate_lower.startswith(query_lower):
        score += config.STARTS_WITH_WEIGHT
    if norm_candidate.startswith(norm_query):
        score += config.NORMALIZED_STARTS_WITH_WEIGHT

    # 5-6) substring match
    if query_lower in candidate_lower:
        score += config.CONTAINS_WEIGHT
    if norm_query in norm_candidate:
        score += config.NORMALIZED_CONTAINS_WEIGHT

    # 7) token coverage
    score += _round_half_up(token_coverage(norm_candidate, norm_query) * config.COVERAGE_WEIGHT)

    # 8) one bonus per candidate word starting with the whole query
    for word in norm_candidate.split(" "):
        if word.startswith(norm_query):
            score += config.WORD_PREFIX_WEIGHT

    # 9) keyword table membership
    if any(k in candidate_lower for k in tables.product_keywords):
        score += config.PRODUCT_KEYWORD_WEIGHT
    if any(k in candidate_lower for k in tables.brand_keywords):
        score += config.BRAND_KEYWORD_WEIGHT
    if any(k in candidate_lower for k in tables.category_keywords):
        score += config.CATEGORY_KEYWORD_WEIGHT

    # 10) short candidates are more specific, very long ones are penalized
    score += _length_adjustment(len(candidate))

    # 11) domain terms, once per distinct term
    for term in set(tables.domain_terms):
        if term in norm_candidate:
            score += config.DOMAIN_TERM_WEIGHT

    return score


def rank_candidates(
    candidates: Iterable[T],
    query: str,
    max_results: Optional[int] = config.DEFAULT_MAX_SUGGESTIONS,
    tables: Optional[KeywordTables] = None,
    text: Optional[Callable[[T], str]] = None,
) -> List[Tuple[T, int]]:
    """
    Score candidates against the normalized query and return (candidate, score)
    pairs with a positive score, best first. Ties keep input order.

    Queries that normalize to fewer than two characters rank nothing.

    Args:
        candidates: strings, or arbitrary items when `text` is given
        query: raw user query
        max_results: truncate to this many pairs (None keeps all)
        tables: keyword tables
        text: maps an item to its searchable text (identity by default)
    """
    norm_query = normalize(query)
    if len(norm_query) < config.MIN_QUERY_LENGTH:
        return []

    get_text = text or (lambda item: item)
    scored = []
    for item in candidates:
        score = calculate_relevance_score(get_text(item), norm_query, tables)
        if score > 0:
            scored.append((item, score))

    # sorted() is stable: equal scores keep their input order
    scored = sorted(scored, key=lambda pair: -pair[1])
    if max_results is not None:
        scored = scored[:max(0, max_results)]
    return scored


def generate_suggestions(
    candidates: Iterable[str],
    query: str,
    max_results: int = config.DEFAULT_MAX_SUGGESTIONS,
    tables: Optional[KeywordTables] = None,
) -> List[str]:
    """
    Return up to max_results candidates ranked by relevance to query.
    Example: generate_suggestions(["Arduino Uno R3", "USB Cable"], "ardu") -> ["Arduino Uno R3", "USB Cable"]
    """
    if not query:
        return []
    return [c for c, _ in rank_candidates(candidates, query, max_results, tables)]


def expand_search_terms(terms: Sequence[str]) -> Set[str]:
    """
    Expand terms with board/module/shield variants and a naive plural toggle.
    Example: {"board"} -> {"board", "module", "shield", "boards"}
    """
    expanded: Set[str] = set()
    for term in terms:
        expanded.add(term)

        if "board" in term:
            expanded.add(term.replace("board", "module", 1))
            expanded.add(term.replace("board", "shield", 1))

        if "module" in term:
            expanded.add(term.replace("module", "board", 1))
            expanded.add(term.replace("module", "shield", 1))

        if term.endswith("s"):
            expanded.add(term[:-1])
        else:
            expanded.add(term + "s")

    return expanded
