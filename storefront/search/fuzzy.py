"""
fuzzy.py

Typo-tolerant product search built on rapidfuzz.

Each product field carries a weight (config.FUZZY_FIELD_WEIGHTS). A term's
similarity to a product is the best field similarity scaled by the field's
weight relative to the heaviest field, so a perfect name hit scores 1.0 and
a perfect description hit scores 1/3. A field only matches when its ratio
reaches FUZZY_MATCH_THRESHOLD, and terms shorter than three characters
must occur verbatim. Queries are expanded with synonyms and the best
score per product wins.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence
import logging

from rapidfuzz import fuzz, utils

from .catalog import Product
from .synonyms import expand_query_with_synonyms
from . import config

logger = logging.getLogger(__name__)

_MAX_FIELD_WEIGHT = max(config.FUZZY_FIELD_WEIGHTS.values())


@dataclass
class ScoredProduct:
    product: Product
    score: float


def _field_values(product: Product) -> Dict[str, str]:
    return {
        "name": product.name,
        "brand": product.brand,
        "category": product.category,
        "description": product.description,
        "tags": " ".join(product.tags),
        "sku": product.sku,
        "model": product.model,
    }


def _field_ratio(term: str, value: str) -> float:
    """
    Similarity (0..100) of a processed term to a processed field value.
    A verbatim occurrence anywhere in the field is a full match. Otherwise
    the term is compared with each field word (typos) and with the field as
    a token set (multi-word terms); short terms get no approximate match.
    """
    if term in value:
        return 100.0
    if len(term) < config.FUZZY_APPROX_MIN_LENGTH:
        return 0.0

    best = fuzz.token_set_ratio(term, value)
    for word in value.split():
        best = max(best, fuzz.ratio(term, word))
    return best


def field_similarity(term: str, product: Product) -> float:
    """
    Weighted similarity in [0, 1] between a search term and a product.
    Fields shorter than the minimum match length, and fields whose ratio is
    under FUZZY_MATCH_THRESHOLD, do not match at all.
    """
    term = utils.default_process(term or "")
    if len(term) < config.FUZZY_MIN_MATCH_CHARS:
        return 0.0

    best = 0.0
    for field_name, value in _field_values(product).items():
        value = utils.default_process(value or "")
        if len(value) < config.FUZZY_MIN_MATCH_CHARS:
            continue
        ratio = _field_ratio(term, value)
        if ratio < config.FUZZY_MATCH_THRESHOLD:
            continue
        weighted = (ratio / 100.0) * (config.FUZZY_FIELD_WEIGHTS[field_name] / _MAX_FIELD_WEIGHT)
        best = max(best, weighted)
    return best


def fuzzy_search_products(
    products: Sequence[Product],
    query: str,
    max_results: int = config.FUZZY_MAX_RESULTS,
    min_score: float = config.FUZZY_MIN_SCORE,
    use_synonyms: bool = True,
) -> List[ScoredProduct]:
    """
    Search products with typo tolerance and synonym expansion.

    An empty query returns the first max_results products with score 0.0.
    Otherwise products scoring at least min_score are returned best first;
    equal scores keep catalog order.
    """
    if not query or not query.strip():
        return [ScoredProduct(p, 0.0) for p in products[:max_results]]

    terms = expand_query_with_synonyms(query) if use_synonyms else [query.lower().strip()]

    best: Dict[str, ScoredProduct] = {}
    for term in terms:
        for product in products:
            score = field_similarity(term, product)
            current = best.get(product.id)
            if current is None or score > current.score:
                best[product.id] = ScoredProduct(product, score)

    results = [r for r in best.values() if r.score >= min_score]
    results = sorted(results, key=lambda r: -r.score)
    logger.debug(f"Fuzzy search '{query}': {len(terms)} terms, {len(results)} hits")
    return results[:max_results]


def get_search_suggestions(products: Sequence[Product], partial_query: str, max_suggestions: int = 10) -> List[str]:
    """
    Autocomplete strings for a partial query: names, brands and categories of
    the best fuzzy hits, plus name words that start with the partial query.
    """
    if not partial_query or len(partial_query.strip()) < config.MIN_QUERY_LENGTH:
        return []

    prefix = partial_query.strip().lower()
    hits = fuzzy_search_products(products, partial_query, max_results=max_suggestions * 2, use_synonyms=False)

    suggestions: Dict[str, None] = {}
    for hit in hits:
        product = hit.product
        suggestions.setdefault(product.name, None)
        if product.brand:
            suggestions.setdefault(product.brand, None)
        if product.category:
            suggestions.setdefault(product.category, None)
        for word in product.name.split():
            if word.lower().startswith(prefix):
                suggestions.setdefault(word, None)

    return list(suggestions)[:max_suggestions]
