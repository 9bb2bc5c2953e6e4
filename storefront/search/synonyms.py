"""
synonyms.py

Synonym map for storefront queries and helpers that expand a query into
the set of terms the fuzzy product search tries.
"""

from dataclasses import dataclass, field
from typing import Dict, List

SEARCH_SYNONYMS: Dict[str, List[str]] = {
    # power
    "adapter": ["charger", "power supply", "psu", "power adapter", "ac adapter", "dc adapter"],
    "charger": ["adapter", "power supply", "charging cable", "power cord"],
    "power supply": ["psu", "adapter", "charger", "power brick"],
    "psu": ["power supply", "adapter", "power unit"],

    # cables
    "cable": ["cord", "wire", "lead"],
    "cord": ["cable", "wire", "lead"],
    "usb": ["usb cable", "usb cord", "charging cable"],
    "hdmi": ["hdmi cable", "hdmi cord", "video cable"],
    "aux": ["audio cable", "3.5mm cable", "headphone cable"],

    # phones
    "phone": ["smartphone", "mobile", "cell phone", "mobile phone"],
    "smartphone": ["phone", "mobile", "cell phone"],
    "mobile": ["phone", "smartphone", "cell phone"],
    "iphone": ["apple phone", "ios phone"],
    "android": ["android phone", "samsung", "google phone"],

    # computers
    "laptop": ["notebook", "portable computer", "laptop computer"],
    "notebook": ["laptop", "portable computer"],
    "pc": ["computer", "desktop", "personal computer"],
    "computer": ["pc", "desktop", "laptop"],
    "desktop": ["pc", "computer", "tower"],
    "monitor": ["screen", "display", "lcd", "led display"],
    "keyboard": ["keypad", "keys"],
    "mouse": ["mice", "pointer", "trackball"],

    # storage
    "hard drive": ["hdd", "hard disk", "storage drive"],
    "hdd": ["hard drive", "hard disk"],
    "ssd": ["solid state drive", "solid state disk", "flash drive"],
    "usb drive": ["flash drive", "thumb drive", "usb stick", "pen drive"],
    "flash drive": ["usb drive", "thumb drive", "pen drive"],
    "memory": ["ram", "storage", "memory card"],
    "ram": ["memory", "system memory"],
    "sd card": ["memory card", "flash card", "sd"],

    # audio
    "headphones": ["earphones", "headset", "earbuds", "earpiece"],
    "earphones": ["headphones", "earbuds", "earpiece"],
    "earbuds": ["earphones", "headphones", "in-ear headphones"],
    "speaker": ["speakers", "audio system", "sound system"],
    "microphone": ["mic", "microphone system"],
    "mic": ["microphone"],

    # cameras
    "camera": ["cam", "webcam", "digital camera"],
    "webcam": ["web camera", "camera", "video camera"],

    # networking
    "router": ["wifi router", "wireless router", "network router"],
    "wifi": ["wireless", "wi-fi", "wlan"],
    "wireless": ["wifi", "wi-fi"],
    "ethernet": ["lan cable", "network cable", "cat5", "cat6"],
    "modem": ["internet modem", "broadband modem"],

    # gaming
    "controller": ["gamepad", "game controller", "joystick"],
    "gamepad": ["controller", "game controller"],
    "console": ["gaming console", "game console"],
    "playstation": ["ps", "ps4", "ps5", "sony console"],
    "xbox": ["microsoft console", "xbox one", "xbox series"],

    # electronics
    "tv": ["television", "smart tv", "led tv"],
    "television": ["tv", "smart tv"],
    "remote": ["remote control", "controller"],
    "battery": ["batteries", "cell", "power cell"],
    "batteries": ["battery", "cells", "power cells"],

    # accessories
    "case": ["cover", "protective case", "shell"],
    "cover": ["case", "protective cover", "skin"],
    "screen protector": ["tempered glass", "glass protector", "screen guard"],
    "stand": ["holder", "mount", "bracket"],
    "holder": ["stand", "mount", "cradle"],

    # brands
    "apple": ["iphone", "ipad", "macbook", "mac"],
    "samsung": ["galaxy", "samsung phone"],
    "sony": ["playstation", "sony tv"],
    "microsoft": ["xbox", "surface"],
    "google": ["pixel", "google phone"],
    "huawei": ["honor"],

    # misspellings
    "adaptor": ["adapter", "charger"],
    "adapters": ["adapter", "charger"],
    "chargeur": ["charger"],
    "labtop": ["laptop"],
    "mobil": ["mobile"],
    "fone": ["phone"],
}


@dataclass
class SearchVariations:
    exact: str
    expanded: List[str] = field(default_factory=list)
    fuzzy_terms: List[str] = field(default_factory=list)


def _add(terms: List[str], term: str) -> None:
    if term and term not in terms:
        terms.append(term)


def expand_query_with_synonyms(query: str) -> List[str]:
    """
    Expand a query into itself, its words and their synonyms.

    Example:
        expand_query_with_synonyms("usb cable")
        -> ["usb cable", "usb", "cable", "usb cord", "cord", "charging cable", "charging", "wire", "lead"]
    """
    terms: List[str] = []
    normalized_query = (query or "").lower().strip()
    if not normalized_query:
        return terms

    _add(terms, normalized_query)

    words = normalized_query.split()
    for word in words:
        _add(terms, word)

    for synonym in SEARCH_SYNONYMS.get(normalized_query, []):
        _add(terms, synonym)

    for word in words:
        for synonym in SEARCH_SYNONYMS.get(word, []):
            _add(terms, synonym)
            # individual words of multi-word synonyms
            for sub_word in synonym.split():
                _add(terms, sub_word)

    return terms


def get_search_variations(query: str) -> SearchVariations:
    """
    Exact query, synonym expansion, and common typo variants
    (one missing letter, two adjacent letters swapped) of every expanded term.
    """
    exact = (query or "").lower().strip()
    expanded = expand_query_with_synonyms(exact)

    fuzzy_terms = list(expanded)
    for term in expanded:
        for i in range(len(term)):
            _add(fuzzy_terms, term[:i] + term[i + 1:])
        for i in range(len(term) - 1):
            _add(fuzzy_terms, term[:i] + term[i + 1] + term[i] + term[i + 2:])

    return SearchVariations(exact=exact, expanded=expanded, fuzzy_terms=fuzzy_terms)
