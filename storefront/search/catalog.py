"""
catalog.py

Product catalog snapshot used as the source of search candidates, and the
image-assisted search that runs detected keywords through the relevance
scorer.

A product is searched through one composite candidate string built from
its own fields and every variant's sku, name and attribute values.
"""

from typing import Any, Dict, Iterable, List, Optional
import json
import logging
import os

import pandas as pd
from pydantic import AliasChoices, BaseModel, Field, field_validator

from .dictionary import KeywordTables
from .scoring import rank_candidates
from . import config

logger = logging.getLogger(__name__)


class Variant(BaseModel):
    """
    A purchasable variant. Primary values may be plain values or
    {"value": ...} objects; multi-values map an attribute to one value or
    a list of values. Both snake_case and camelCase keys are accepted.
    """
    name: str = ""
    sku: str = ""
    attributes: Dict[str, Any] = Field(default_factory=dict)
    primary_values: List[Any] = Field(
        default_factory=list, validation_alias=AliasChoices("primary_values", "primaryValues")
    )
    multi_values: Dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("multi_values", "multiValues")
    )

    def primary_value_list(self) -> List[Any]:
        return [pv.get("value") if isinstance(pv, dict) else pv for pv in self.primary_values]

    def multi_value_list(self) -> List[Any]:
        values: List[Any] = []
        for value in self.multi_values.values():
            if isinstance(value, list):
                values.extend(value)
            else:
                values.append(value)
        return values


class Product(BaseModel):
    id: str
    name: str
    description: str = ""
    category: str = ""
    brand: str = ""
    sku: str = ""
    model: str = ""
    price: float = 0.0
    tags: List[str] = Field(default_factory=list)
    variants: List[Variant] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v: Any) -> str:
        return str(v)


def build_candidate_text(product: Product) -> str:
    """
    Concatenate every searchable field of a product and its variants.
    Empty fields are skipped.
    """
    parts: List[Any] = [
        product.name,
        product.description,
        product.category,
        product.brand,
        product.sku,
        product.model,
    ]
    parts.extend(v.sku for v in product.variants)
    parts.extend(v.name for v in product.variants)
    for v in product.variants:
        parts.extend(v.attributes.values())
    for v in product.variants:
        parts.extend(v.primary_value_list())
    for v in product.variants:
        parts.extend(v.multi_value_list())
    return " ".join(str(p) for p in parts if p)


def _parse_json_list(raw: str, column: str, product_id: str) -> List[Any]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        logger.warning(f"Product {product_id}: invalid JSON in '{column}', ignored")
        return []
    return value if isinstance(value, list) else []


class CatalogStore:
    """
    Holds the products that search runs over and provides:
      - products: id → Product
      - candidate text per product id (built once on add)
      - suggestion candidates (names, brands, categories, variant values)
    """
    def __init__(self):
        self.products: Dict[str, Product] = {}
        self._candidate_text: Dict[str, str] = {}

    # ----------------------------
    # Load CSV and populate store
    # ----------------------------
    def load_csv(self, path: str) -> int:
        """
        Load a product catalog snapshot.

        CSV must contain 'id' and 'name' columns. Optional columns:
        description, category, brand, sku, model, price, and JSON-encoded
        'tags' and 'variants' lists.

        Returns:
            number of products loaded
        """
        if not os.path.exists(path):
            raise FileNotFoundError(f"CSV not found: {path}")

        df = pd.read_csv(path, dtype=str, keep_default_na=False)

        for column in ("id", "name"):
            if column not in df.columns:
                raise ValueError(f"CSV {path} missing '{column}' column")

        loaded = 0
        for _, row in df.iterrows():
            record = {k: str(v).strip() for k, v in row.to_dict().items()}
            if not record["id"] or not record["name"]:
                continue

            product_id = record["id"]
            record["tags"] = _parse_json_list(record.get("tags", ""), "tags", product_id)
            record["variants"] = _parse_json_list(record.get("variants", ""), "variants", product_id)
            record["price"] = record.get("price") or 0.0

            self.add(Product(**record))
            loaded += 1

        logger.info(f"Loaded {loaded} products from {path}")
        return loaded

    def add(self, product: Product) -> None:
        self.products[product.id] = product
        self._candidate_text[product.id] = build_candidate_text(product)

    def add_many(self, products: Iterable[Product]) -> None:
        for product in products:
            self.add(product)

    # ----------------------------
    # Accessors
    # ----------------------------
    def get(self, product_id: str) -> Optional[Product]:
        return self.products.get(str(product_id))

    def all_products(self) -> List[Product]:
        return list(self.products.values())

    def candidate_text(self, product_id: str) -> str:
        return self._candidate_text.get(str(product_id), "")

    def candidates(self) -> Dict[str, str]:
        """Product id → composite candidate text."""
        return dict(self._candidate_text)

    def suggestion_candidates(self) -> List[str]:
        """Unique names, brands, categories and variant values, first seen first."""
        seen: Dict[str, None] = {}
        for product in self.products.values():
            for value in (product.name, product.brand, product.category):
                if value:
                    seen.setdefault(value, None)
            for variant in product.variants:
                if variant.name:
                    seen.setdefault(variant.name, None)
                for value in variant.primary_value_list() + variant.multi_value_list():
                    if isinstance(value, str):
                        seen.setdefault(value, None)
        return [s for s in seen if s]

    def size(self) -> int:
        return len(self.products)


def search_by_keywords(
    store: CatalogStore,
    keywords: List[str],
    keyword_limit: int = config.IMAGE_SEARCH_KEYWORD_LIMIT,
    max_results: int = config.IMAGE_SEARCH_MAX_RESULTS,
    per_keyword: Optional[int] = None,
    tables: Optional[KeywordTables] = None,
) -> List[Product]:
    """
    Rank catalog products for each of the first keyword_limit keywords,
    merge the rankings in keyword order without duplicates and cap the
    result at max_results.

    Keywords typically come from an image analyser (detected text, objects,
    labels) and are searched like ordinary text queries.
    """
    per_keyword = max_results if per_keyword is None else per_keyword
    product_ids = list(store.products.keys())

    merged: List[Product] = []
    seen = set()
    for keyword in keywords[:max(0, keyword_limit)]:
        ranked = rank_candidates(
            product_ids,
            keyword,
            max_results=per_keyword,
            tables=tables,
            text=store.candidate_text,
        )
        for product_id, _score in ranked:
            if product_id in seen:
                continue
            seen.add(product_id)
            merged.append(store.products[product_id])

    return merged[:max(0, max_results)]
