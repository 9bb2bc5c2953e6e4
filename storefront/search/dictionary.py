"""
dictionary.py

Static keyword tables used by the relevance scorer: product, brand and
category keywords, the stop-word set and the domain terms that earn an
extra boost.

The built-in tables can be overridden from a directory of CSV files, one
per table, each with a 'phrase' column:

    product_keywords.csv, brand_keywords.csv,
    category_keywords.csv, domain_terms.csv
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Tuple
import logging
import os

import pandas as pd

logger = logging.getLogger(__name__)


PRODUCT_KEYWORDS: Tuple[str, ...] = (
    "arduino", "raspberry pi", "sensor", "led", "resistor", "capacitor",
    "breadboard", "motor", "servo", "camera", "display", "screen",
    "battery", "power", "usb", "wireless", "bluetooth", "wifi",
    "microcontroller", "development", "kit", "starter", "beginner",
    "electronic", "component", "module", "shield", "board",
    "digital", "analog", "prototype", "project", "diy",
)

BRAND_KEYWORDS: Tuple[str, ...] = (
    "arduino", "raspberry pi", "esp32", "esp8266", "nodemcu",
    "stm32", "atmega", "pic", "intel", "amd", "nvidia",
    "samsung", "apple", "sony", "lg", "panasonic", "philips",
)

CATEGORY_KEYWORDS: Tuple[str, ...] = (
    "electronics", "computers", "phones", "accessories", "components",
    "tools", "kits", "boards", "modules", "sensors", "actuators",
    "power", "communication", "storage", "display", "input",
)

DOMAIN_TERMS: Tuple[str, ...] = (
    "lora", "rf", "transceiver", "transceiver module", "rf module",
    "rf transceiver", "rf transceiver module",
)

STOP_WORDS: FrozenSet[str] = frozenset([
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "must", "can", "this", "that", "these",
    "those", "i", "you", "he", "she", "it", "we", "they", "me", "him",
    "her", "us", "them", "my", "your", "his", "its", "our", "their",
])

_CSV_TABLES = {
    "product_keywords": "product_keywords.csv",
    "brand_keywords": "brand_keywords.csv",
    "category_keywords": "category_keywords.csv",
    "domain_terms": "domain_terms.csv",
}


@dataclass(frozen=True)
class KeywordTables:
    """
    Read-only tables consulted by calculate_relevance_score.
    Keyword entries are matched as lowercase substrings.
    """
    product_keywords: Tuple[str, ...] = PRODUCT_KEYWORDS
    brand_keywords: Tuple[str, ...] = BRAND_KEYWORDS
    category_keywords: Tuple[str, ...] = CATEGORY_KEYWORDS
    domain_terms: Tuple[str, ...] = DOMAIN_TERMS

    @classmethod
    def default(cls) -> "KeywordTables":
        return _DEFAULT_TABLES

    @classmethod
    def from_csv_dir(cls, path: str) -> "KeywordTables":
        """
        Build tables from a directory of keyword CSVs.
        Tables without a CSV file keep their built-in values.

        Raises:
            FileNotFoundError: if the directory does not exist
            ValueError: if a CSV is missing its 'phrase' column
        """
        if not os.path.isdir(path):
            raise FileNotFoundError(f"Keyword directory not found: {path}")

        overrides = {}
        for field_name, filename in _CSV_TABLES.items():
            csv_path = os.path.join(path, filename)
            if not os.path.exists(csv_path):
                continue
            overrides[field_name] = load_phrases(csv_path)
            logger.info(f"Loaded {len(overrides[field_name])} {field_name} from {csv_path}")

        return cls(**overrides)


def load_phrases(path: str) -> Tuple[str, ...]:
    """Read the 'phrase' column of a CSV, lowercased, blanks and duplicates dropped."""
    df = pd.read_csv(path)

    if "phrase" not in df.columns:
        raise ValueError(f"CSV {path} missing 'phrase' column")

    return _unique_lower(str(p) for p in df["phrase"].dropna())


def _unique_lower(phrases: Iterable[str]) -> Tuple[str, ...]:
    seen = []
    for phrase in phrases:
        p = phrase.strip().lower()
        if p and p not in seen:
            seen.append(p)
    return tuple(seen)


_DEFAULT_TABLES = KeywordTables()
