"""
Parser for plain-text decklists.

Format:
    <quantity>[x] <card name> [(<set_code>) <collector_number>]

Example:
    Deck
    4 Lightning Bolt
    4x Monastery Swiftspear (BRO) 144

    Sideboard
    2 Pyroblast

Section headers (Deck, Sideboard, Commander, Companion) and blank lines are
skipped. A card listed more than once is counted once with the copies summed.
"""

import re
from pathlib import Path

from metacollector.models.card import canonical_name
from metacollector.models.failure import ConfigurationError, FailureKind

# Pattern: "4 Lightning Bolt" or "4x Lightning Bolt"
# Groups: (quantity, rest of line)
DECK_LINE_PATTERN = re.compile(r"^(\d+)x?\s+(.+)$", re.IGNORECASE)

# Arena-style "(SET) 123" suffix after the card name
SET_SUFFIX_PATTERN = re.compile(r"\s+\([A-Z0-9]+\)\s+\S+$")

SECTION_HEADERS = frozenset({"deck", "sideboard", "commander", "companion"})


def parse_deck_text(text: str) -> dict[str, int]:
    """
    Parse decklist text into card counts.

    Args:
        text: Decklist text

    Returns:
        Dict mapping canonical card names to copies, in first-seen order

    Raises:
        ConfigurationError: If a line is not "<count> <card name>".
    """
    cards: dict[str, int] = {}

    for number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.lower() in SECTION_HEADERS:
            continue

        match = DECK_LINE_PATTERN.match(line)
        if not match:
            raise ConfigurationError(
                kind=FailureKind.PARSE_ERROR,
                message=f"Line {number}: expected '<count> <card name>', got {line!r}",
            )

        name = canonical_name(SET_SUFFIX_PATTERN.sub("", match.group(2)))
        cards[name] = cards.get(name, 0) + int(match.group(1))

    return cards


def load_deck_file(path: Path) -> dict[str, int]:
    """
    Read and parse a decklist file.

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(
            kind=FailureKind.INVALID_INPUT,
            message=f"Cannot read decklist {path}",
            detail=str(e),
        ) from e
    return parse_deck_text(text)
