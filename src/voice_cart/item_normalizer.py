"""Shared item name normalization utilities."""

import re

_WHITESPACE = re.compile(r"\s+")
_IRREGULAR_PLURALS = {
    "tomatoes": "tomato",
    "potatoes": "potato",
    "mangoes": "mango",
    "loaves": "loaf",
    "knives": "knife",
    "leaves": "leaf",
}
_NO_SINGULAR = {"hummus", "couscous", "asparagus", "molasses", "swiss", "chips", "grass"}


def normalize_item_name(item_name: str) -> str:
    """Normalize an item name into the cart identity key."""
    if not isinstance(item_name, str):
        return ""
    return _WHITESPACE.sub(" ", item_name.strip().lower())


def singularize(word: str) -> str:
    """Best-effort singular form of a lowercase word."""
    if word in _IRREGULAR_PLURALS:
        return _IRREGULAR_PLURALS[word]
    if word in _NO_SINGULAR or len(word) <= 3:
        return word
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith(("ches", "shes", "sses", "xes")):
        return word[:-2]
    if word.endswith("s") and not word.endswith("ss"):
        return word[:-1]
    return word


def lookup_keys(item_name: str) -> list[str]:
    """Candidate table keys for an item name, most specific first.

    "Green Apples" yields ["green apples", "green apple", "apples", "apple"].
    """
    canonical = normalize_item_name(item_name)
    if not canonical:
        return []

    tokens = canonical.split(" ")
    singular_phrase = " ".join(tokens[:-1] + [singularize(tokens[-1])])

    keys = [canonical, singular_phrase]
    if len(tokens) > 1:
        keys.extend([tokens[-1], singularize(tokens[-1])])

    return list(dict.fromkeys(keys))


def display_item_name(item_name: str) -> str:
    """Trim and collapse whitespace while keeping the original casing."""
    return _WHITESPACE.sub(" ", item_name.strip())
