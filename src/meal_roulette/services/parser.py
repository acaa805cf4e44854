"""Parse free-text command arguments into weighted menu entries."""

import re
from collections.abc import Iterable

from meal_roulette.domain.errors import InvalidArgumentFormatError
from meal_roulette.domain.menu import Category, WeightedEntry

FORMAT_HINT = (
    "Wrong format! Use: name1(weight) name2(weight) ...\n"
    "The weight goes in parentheses right after the food name. "
    "It can be omitted but must be greater than 0."
)

_WEIGHTED_TOKEN = re.compile(r"^(?P<name>[^()]+)\((?P<weight>\d+(?:\.\d+)?|\.\d+)\)$")
_BARE_TOKEN = re.compile(r"^[^()]+$")
_SEPARATORS = re.compile(r"[，、,|]")
_FULL_WIDTH = str.maketrans({"（": "(", "）": ")"})


def split_tokens(tokens: Iterable[str]) -> list[str]:
    """Normalize parentheses and expand tokens that contain separators."""
    pieces: list[str] = []
    for token in tokens:
        normalized = token.translate(_FULL_WIDTH)
        for piece in _SEPARATORS.split(normalized):
            cleaned = piece.strip()
            if cleaned:
                pieces.append(cleaned)
    return pieces


def parse_token(token: str) -> tuple[str, float]:
    """Return the food name and weight encoded in a single token."""
    match = _WEIGHTED_TOKEN.match(token)
    if match:
        name = match.group("name").strip()
        if not name:
            raise InvalidArgumentFormatError(FORMAT_HINT)
        return name, float(match.group("weight"))
    if _BARE_TOKEN.match(token):
        return token, 1.0
    raise InvalidArgumentFormatError(FORMAT_HINT)


def parse_entries(
    category: Category, tokens: Iterable[str], owner: str | None = None
) -> list[WeightedEntry]:
    """Build entries for every token, rejecting the batch on the first error."""
    pieces = split_tokens(tokens)
    if not pieces:
        raise InvalidArgumentFormatError(FORMAT_HINT)
    parsed = [parse_token(piece) for piece in pieces]
    return [
        WeightedEntry(owner=owner, name=name, category=category, weight=weight)
        for name, weight in parsed
    ]
