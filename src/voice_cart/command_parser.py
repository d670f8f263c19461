"""Free-form command interpretation.

Commands are read with a small explicit grammar:

1. tokenize: split on whitespace, strip surrounding punctuation
2. classify: the first add/remove verb decides the intent
3. quantity: a number right after the verb, or the last token
4. remainder: what is left, minus filler words at either edge, is the item

Matching is case-insensitive; the item keeps the casing it was spoken with.
"""

import re
from typing import NamedTuple

import structlog

from .models import AddCommand, Command, Intent, RemoveCommand, UnrecognizedCommand

logger = structlog.get_logger(__name__)

ADD_VERBS = frozenset({"add", "buy", "get", "need", "want", "put", "include", "purchase"})
REMOVE_VERBS = frozenset({"remove", "delete", "cancel", "drop", "discard", "erase"})
REMOVE_PHRASES = frozenset({("take", "out"), ("take", "off")})

STOP_WORDS = frozenset(
    {
        "a",
        "an",
        "the",
        "some",
        "of",
        "to",
        "my",
        "from",
        "cart",
        "list",
        "basket",
        "please",
        "me",
        "i",
        "also",
        "and",
        "more",
        "in",
        "into",
        "shopping",
    }
)

NUMBER_WORDS = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
    "couple": 2,
    "pair": 2,
    "dozen": 12,
}

_NUMERIC = re.compile(r"^[+-]?\d+(?:\.\d+)?$")
_EDGE_PUNCTUATION = ".,!?;:\"'()[]{}"


class Token(NamedTuple):
    """A word of the utterance with its original spelling."""

    raw: str
    lower: str


def tokenize(text: str) -> list[Token]:
    """Split text into tokens, dropping punctuation around each word."""
    tokens = []
    for word in text.split():
        cleaned = word.strip(_EDGE_PUNCTUATION)
        if cleaned:
            tokens.append(Token(cleaned, cleaned.lower()))
    return tokens


def classify_verb(tokens: list[Token]) -> tuple[Intent, int, int]:
    """Find the first recognized verb.

    Returns:
        Tuple of (intent, verb index, verb length in tokens). Index is -1
        when no verb is present.
    """
    for i, token in enumerate(tokens):
        if token.lower in ADD_VERBS:
            return Intent.ADD, i, 1
        if token.lower in REMOVE_VERBS:
            return Intent.REMOVE, i, 1
        if i + 1 < len(tokens) and (token.lower, tokens[i + 1].lower) in REMOVE_PHRASES:
            return Intent.REMOVE, i, 2
    return Intent.UNRECOGNIZED, -1, 0


def strip_filler(tokens: list[Token]) -> list[Token]:
    """Drop stop-words from both edges of a token run."""
    start, end = 0, len(tokens)
    while start < end and tokens[start].lower in STOP_WORDS:
        start += 1
    while end > start and tokens[end - 1].lower in STOP_WORDS:
        end -= 1
    return tokens[start:end]


def quantity_value(token: Token) -> int | None:
    """Interpret a token as a quantity.

    Returns:
        The quantity, 0 for a number that is not a usable quantity
        (negative, zero, fractional), or None when the token is not a number.
    """
    if token.lower in NUMBER_WORDS:
        return NUMBER_WORDS[token.lower]
    if not _NUMERIC.match(token.lower):
        return None
    if "." in token.lower:
        return 0
    return max(int(token.lower), 0)


def extract_quantity(tokens: list[Token]) -> tuple[int | None, list[Token]]:
    """Take a leading or trailing quantity off a token run.

    Returns:
        Tuple of (quantity or None, remaining tokens).
    """
    body = strip_filler(tokens)
    if not body:
        return None, body

    leading = quantity_value(body[0])
    if leading is not None:
        return leading, strip_filler(body[1:])

    trailing = quantity_value(body[-1])
    if trailing is not None and len(body) > 1:
        return trailing, strip_filler(body[:-1])

    return None, body


def _is_verb(token: Token) -> bool:
    return token.lower in ADD_VERBS or token.lower in REMOVE_VERBS


def item_clause(tokens: list[Token]) -> list[Token]:
    """Narrow the text after the verb to the clause naming the item.

    Repeated verbs ("want to get apples") are skipped, and a later verb ends
    the clause ("add milk and remove eggs" keeps "milk").
    """
    body = strip_filler(tokens)
    while body and _is_verb(body[0]):
        body = strip_filler(body[1:])
    for i, token in enumerate(body):
        if i > 0 and _is_verb(token):
            head = strip_filler(body[:i])
            if head:
                return head
    return body


def _parse(text: str) -> Command:
    tokens = tokenize(text)
    intent, verb_index, verb_length = classify_verb(tokens)
    if intent == Intent.UNRECOGNIZED:
        return UnrecognizedCommand()

    body = tokens[verb_index + verb_length :]
    if not strip_filler(body):
        body = tokens[:verb_index]

    quantity, remainder = extract_quantity(item_clause(body))
    if not remainder:
        return UnrecognizedCommand()

    item = " ".join(token.raw for token in remainder)
    if intent == Intent.REMOVE:
        return RemoveCommand(item=item)
    return AddCommand(item=item, quantity=quantity if quantity and quantity > 0 else 1)


def parse(text: str) -> Command:
    """Interpret a spoken or typed command.

    Args:
        text: Raw utterance, e.g. "add two apples" or "remove milk"

    Returns:
        AddCommand, RemoveCommand or UnrecognizedCommand. Never raises.
    """
    if not isinstance(text, str) or not text.strip():
        return UnrecognizedCommand()
    try:
        return _parse(text)
    except Exception as e:
        logger.debug("command_parse_failed", text=text, error=str(e))
        return UnrecognizedCommand()
