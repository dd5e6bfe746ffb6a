"""
Scryfall card catalog loader.

Looks up card metadata (mana cost, type line, colors, legality, image) for
the names played in the meta, using the collection endpoint in batches.
Respects Scryfall rate limits (10 requests/second).

API: https://scryfall.com/docs/api/cards/collection
"""

import logging
import time
from collections.abc import Iterable
from typing import Any

import httpx

from metacollector.models.card import CardCatalog, CardIdentity, CardInfo, parse_type_tags

logger = logging.getLogger(__name__)

SCRYFALL_API = "https://api.scryfall.com"
USER_AGENT = "MetaCollector/1.0"

# Maximum identifiers per /cards/collection request
COLLECTION_BATCH_SIZE = 75

# Rate limit: max 10 requests per second, so delay 100ms between requests
_RATE_LIMIT_DELAY = 0.1


def _front_face(card: dict[str, Any]) -> dict[str, Any]:
    faces = card.get("card_faces") or []
    return faces[0] if faces else {}


def extract_image_url(card: dict[str, Any]) -> str | None:
    """Large image of the card, or of its front face for double-faced cards."""
    image_uris = card.get("image_uris") or _front_face(card).get("image_uris") or {}
    url = image_uris.get("large") or image_uris.get("normal")
    return str(url) if url else None


def parse_card(card: dict[str, Any]) -> CardInfo:
    """
    Convert a Scryfall card object into CardInfo.

    Double-faced cards take mana cost and colors from the front face when the
    card object itself has none.
    """
    face = _front_face(card)
    type_line = card.get("type_line") or face.get("type_line") or ""
    colors = card.get("colors")
    if colors is None:
        colors = face.get("colors") or []

    return CardInfo(
        identity=CardIdentity.from_name(card["name"]),
        display_name=card["name"],
        mana_cost=card.get("mana_cost") or face.get("mana_cost") or "",
        type_line=type_line,
        type_tags=parse_type_tags(type_line),
        colors=tuple(colors),
        legalities=dict(card.get("legalities") or {}),
        image_url=extract_image_url(card),
    )


def fetch_cards_by_name(
    names: Iterable[str],
    client: httpx.Client,
    base_url: str = SCRYFALL_API,
) -> list[dict[str, Any]]:
    """
    Fetch Scryfall card objects for card names.

    Args:
        names: Card names to look up
        client: httpx client for connection reuse
        base_url: Scryfall API root

    Returns:
        Card objects for every name Scryfall knows; unknown names are logged
        and left out

    Raises:
        httpx.HTTPError: If a request fails
    """
    unique = list(dict.fromkeys(names))
    cards: list[dict[str, Any]] = []

    for start in range(0, len(unique), COLLECTION_BATCH_SIZE):
        if start:
            time.sleep(_RATE_LIMIT_DELAY)

        batch = unique[start : start + COLLECTION_BATCH_SIZE]
        response = client.post(
            f"{base_url}/cards/collection",
            json={"identifiers": [{"name": name} for name in batch]},
        )
        response.raise_for_status()
        data = response.json()

        cards.extend(data.get("data", []))
        for missing in data.get("not_found", []):
            logger.warning("Scryfall has no card named %s", missing.get("name", missing))

    logger.info("Fetched %d of %d cards from Scryfall", len(cards), len(unique))
    return cards


def fetch_catalog(
    format_name: str,
    names: Iterable[str],
    client: httpx.Client,
    base_url: str = SCRYFALL_API,
) -> CardCatalog:
    """
    Build the card catalog for a format from Scryfall.

    Args:
        format_name: Format used for legality checks
        names: Card names to include
        client: httpx client for connection reuse
        base_url: Scryfall API root

    Returns:
        CardCatalog of the named cards

    Raises:
        httpx.HTTPError: If a request fails
        KeyError: If a card object has no name
    """
    cards = fetch_cards_by_name(names, client, base_url)
    return CardCatalog.from_cards((parse_card(card) for card in cards), format_name=format_name)
