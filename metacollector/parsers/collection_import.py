"""
Parser for collection files.

Supports:
- Simple format: "4 Lightning Bolt" or "4x Lightning Bolt"
- CSV format: "Card Name",Quantity,Set (MTGGoldfish style)
- JSON format: {"Lightning Bolt": 4} or {"Lightning Bolt": ["m10", "2xm"]},
  where a list holds one set code per owned copy

Entries come back in file order, duplicates included; build_collection
decides what a duplicate means.
"""

import csv
import json
import logging
import re
from io import StringIO
from pathlib import Path
from typing import Literal

from metacollector.models.card import CardIdentity
from metacollector.models.collection import Collection, OwnedEntry, build_collection
from metacollector.models.failure import ConfigurationError, FailureKind, ValidationWarning

logger = logging.getLogger(__name__)

# Pattern: "4 Lightning Bolt" or "4x Lightning Bolt" or "4X Lightning Bolt"
# Groups: (quantity, card_name)
SIMPLE_PATTERN = re.compile(r"^(\d+)x?\s+(.+)$", re.IGNORECASE)

ParseResult = tuple[list[OwnedEntry], list[ValidationWarning]]


def _unparseable(line: str, reason: str) -> ValidationWarning:
    warning = ValidationWarning(kind=FailureKind.PARSE_ERROR, card_name=line, message=reason)
    logger.warning("Skipping collection line %s", warning)
    return warning


def parse_simple_format(text: str) -> ParseResult:
    """
    Parse simple "quantity card_name" format.

    Accepts:
        - "4 Lightning Bolt"
        - "4x Lightning Bolt"
        - "4X Lightning Bolt"

    Lines starting with "#" are comments.

    Returns:
        (entries, warnings for lines that could not be read)
    """
    entries: list[OwnedEntry] = []
    warnings: list[ValidationWarning] = []

    for line in text.strip().split("\n"):
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        match = SIMPLE_PATTERN.match(line)
        if not match:
            warnings.append(_unparseable(line, "expected '<quantity> <card name>'"))
            continue

        entries.append(OwnedEntry(CardIdentity.from_name(match.group(2)), int(match.group(1))))

    return entries, warnings


def parse_csv_format(text: str) -> ParseResult:
    """
    Parse CSV collection export format.

    Expected columns (flexible ordering):
        - Card Name / Name / Card
        - Quantity / Count / Qty
        - Set (optional, ignored: printings share an identity)

    Returns:
        (entries, warnings for rows that could not be read)
    """
    entries: list[OwnedEntry] = []
    warnings: list[ValidationWarning] = []

    reader = csv.DictReader(StringIO(text.strip()))
    if not reader.fieldnames:
        return entries, warnings

    name_col = next(
        (col for col in reader.fieldnames if col.strip().lower() in ("card name", "name", "card")),
        None,
    )
    qty_col = next(
        (col for col in reader.fieldnames if col.strip().lower() in ("quantity", "count", "qty")),
        None,
    )
    if not name_col:
        warnings.append(_unparseable(",".join(reader.fieldnames), "no card name column"))
        return entries, warnings

    for row in reader:
        name = (row.get(name_col) or "").strip()
        if not name:
            continue

        # Default to 1 if no quantity column
        qty_str = (row.get(qty_col) or "1").strip() if qty_col else "1"
        try:
            quantity = int(qty_str)
        except ValueError:
            warnings.append(_unparseable(name, f"invalid quantity {qty_str!r}"))
            continue
        if quantity < 0:
            warnings.append(_unparseable(name, f"negative quantity {quantity}"))
            continue

        entries.append(OwnedEntry(CardIdentity.from_name(name), quantity))

    return entries, warnings


def parse_json_format(text: str) -> ParseResult:
    """
    Parse a JSON object mapping card names to owned copies.

    A value is either a quantity or a list of printings, one per copy.

    Raises:
        ConfigurationError: If the text is not a JSON object.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            kind=FailureKind.PARSE_ERROR,
            message="Collection file is not valid JSON",
            detail=str(e),
        ) from e
    if not isinstance(payload, dict):
        raise ConfigurationError(
            kind=FailureKind.PARSE_ERROR,
            message="Collection JSON must be an object mapping card names to copies",
        )

    entries: list[OwnedEntry] = []
    warnings: list[ValidationWarning] = []

    for name, value in payload.items():
        if isinstance(value, list):
            quantity = len(value)
        elif isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            quantity = value
        else:
            warnings.append(_unparseable(name, f"unsupported value {value!r}"))
            continue
        entries.append(OwnedEntry(CardIdentity.from_name(name), quantity))

    return entries, warnings


def detect_format(text: str) -> Literal["simple", "csv", "json"]:
    """
    Auto-detect the format of collection text.

    Returns:
        - "json" if text starts with an object
        - "csv" if text appears to be CSV (comma-separated with header)
        - "simple" otherwise
    """
    text = text.strip()
    if text.startswith("{"):
        return "json"

    first_line = text.split("\n", 1)[0].strip().lower()
    if "," in first_line and any(
        h in first_line for h in ("card name", "name", "quantity", "count")
    ):
        return "csv"

    return "simple"


def parse_collection_text(
    text: str, format_hint: Literal["auto", "simple", "csv", "json"] = "auto"
) -> ParseResult:
    """
    Parse collection text in any supported format.

    Args:
        text: Raw collection text
        format_hint: Format to use, or "auto" to detect

    Returns:
        (entries in file order, warnings)
    """
    if not text or not text.strip():
        return [], []

    if format_hint == "auto":
        format_hint = detect_format(text)

    if format_hint == "json":
        return parse_json_format(text)
    elif format_hint == "csv":
        return parse_csv_format(text)
    else:
        return parse_simple_format(text)


def load_collection(path: Path) -> tuple[Collection, list[ValidationWarning]]:
    """
    Load a collection file.

    A missing file is an empty collection, not an error: everything in the
    meta simply shows up as missing.

    Returns:
        (collection, parse and duplicate warnings)

    Raises:
        ConfigurationError: If the file exists but cannot be read as UTF-8 text
    """
    if not path.exists():
        logger.warning("Collection file %s not found, starting from an empty collection", path)
        return Collection(), []

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(
            kind=FailureKind.INVALID_INPUT,
            message=f"Cannot read collection {path}",
            detail=str(e),
        ) from e

    entries, warnings = parse_collection_text(text)
    collection, duplicates = build_collection(entries)
    logger.info(
        "Loaded %d cards (%d unique) from %s",
        collection.total_cards(),
        collection.unique_cards(),
        path,
    )
    return collection, warnings + duplicates
