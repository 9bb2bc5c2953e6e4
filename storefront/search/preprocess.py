"""
preprocess.py

Normalization and keyword extraction utilities used by the relevance scorer.

Functions provided:
- normalize(text) -> str
- tokenize(text) -> List[str]
- is_stop_word(word) -> bool
- extract_keywords(text) -> Iterator[str]
- create_dictionary_from_text(texts) -> Dict[str, int]

All functions are total: None and empty strings are accepted and produce
empty results.
"""

from typing import Dict, Iterable, Iterator, List, Optional
import re

from .dictionary import STOP_WORDS
from . import config

# separators treated uniformly: slash, underscore, hyphen, comma, colon
_separator_re = re.compile(r"[/_\-,:]+")
# anything left that is not a lowercase letter, digit or whitespace
_non_alphanum_re = re.compile(r"[^a-z0-9\s]")
_multiple_spaces_re = re.compile(r"\s+")
_digits_only_re = re.compile(r"^[0-9]+$")


def normalize(text: Optional[str]) -> str:
    """
    Normalize a string for comparisons:
    - lowercases
    - turns runs of '/', '_', '-', ',' and ':' into a single space
    - removes every other non-alphanumeric character
    - collapses whitespace to single spaces and trims

    normalize(normalize(s)) == normalize(s) for every s.
    """
    if not text:
        return ""

    text = text.lower()
    text = _separator_re.sub(" ", text)
    text = _non_alphanum_re.sub("", text)
    text = _multiple_spaces_re.sub(" ", text).strip()
    return text


def tokenize(text: Optional[str]) -> List[str]:
    """Whitespace tokens of the normalized text."""
    norm = normalize(text)
    return norm.split(" ") if norm else []


def is_stop_word(word: str) -> bool:
    return word.lower() in STOP_WORDS


def _is_keyword(token: str) -> bool:
    if len(token) < config.MIN_KEYWORD_LENGTH:
        return False
    if is_stop_word(token):
        return False
    if _digits_only_re.match(token):
        return False
    return True


def extract_keywords(text: Optional[str]) -> Iterator[str]:
    """
    Yield the keywords of text in input order.

    A keyword is a normalized token of at least two characters that is
    neither a stop word nor purely digits. Call again to restart.
    """
    for token in tokenize(text):
        if _is_keyword(token):
            yield token


def create_dictionary_from_text(texts: Iterable[str]) -> Dict[str, int]:
    """
    Count keyword occurrences across texts.
    Example: ["Arduino Uno", "Arduino Nano"] -> {"arduino": 2, "uno": 1, "nano": 1}
    """
    dictionary: Dict[str, int] = {}
    for text in texts:
        for keyword in extract_keywords(text):
            dictionary[keyword] = dictionary.get(keyword, 0) + 1
    return dictionary
