"""
MTGGoldfish metagame scraper.

The metagame page lists archetypes with their share of the field. Each
archetype page links sample decks, and every deck has a plain-text download
that needs no JavaScript. A format's meta is one sample deck per archetype,
weighted by the archetype's share.

Scraping depends on page markup that MTGGoldfish can change at any time, so
parsing is kept in small functions that can be tested against saved pages.
"""

import logging
import re
from dataclasses import dataclass

import httpx

from metacollector.config import SupportedFormat
from metacollector.models.card import canonical_name
from metacollector.models.deck import DeckList

logger = logging.getLogger(__name__)

MTGGOLDFISH_BASE = "https://www.mtggoldfish.com"
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

VALID_FORMATS = frozenset(fmt.value for fmt in SupportedFormat)

# <a href="/archetype/pauper-affinity#paper">Affinity</a> ... 12.5%
ARCHETYPE_PATTERN = re.compile(
    r'href="(?P<path>/archetype/[^"#]+)[^"]*"[^>]*>\s*'
    r"(?P<name>[^<]+?)\s*</a>"
    r".*?"
    r"(?P<share>\d+(?:\.\d+)?)%",
    re.DOTALL,
)

# Sample deck links look like /deck/7496197
DECK_LINK_PATTERN = re.compile(r"/deck/(\d+)")

DOWNLOAD_LINE_PATTERN = re.compile(r"^(\d+)\s+(.+)$", re.MULTILINE)
BLANK_LINE_PATTERN = re.compile(r"\n\s*\n")

_ARCHETYPE_KEYWORDS = (
    ("aggro", ("aggro", "burn", "red deck", "sligh", "stompy")),
    ("control", ("control", "blue", "esper", "azorius", "tron")),
    ("combo", ("combo", "storm", "ramp", "walls")),
)


@dataclass
class DeckSummary:
    """An archetype row of the metagame page."""

    name: str
    url: str
    meta_share: float
    format: str


def _get(url: str, client: httpx.Client) -> str:
    response = client.get(url, headers={"User-Agent": USER_AGENT}, follow_redirects=True)
    response.raise_for_status()
    return response.text


def fetch_metagame_page(
    format_name: str,
    client: httpx.Client,
    base_url: str = MTGGOLDFISH_BASE,
) -> str:
    """
    Download the full metagame page of a format.

    Raises:
        ValueError: If the format has no metagame page
        httpx.HTTPError: If the download fails
    """
    if format_name not in VALID_FORMATS:
        raise ValueError(f"Invalid format: {format_name}. Must be one of {sorted(VALID_FORMATS)}")

    return _get(f"{base_url}/metagame/{format_name}/full", client)


def parse_metagame_page(
    html: str,
    format_name: str,
    base_url: str = MTGGOLDFISH_BASE,
) -> list[DeckSummary]:
    """
    Read the archetype list off a metagame page.

    The page shows each archetype twice (paper and online tabs); only the
    first occurrence counts. Archetypes without meta share carry no weight
    and are left out.

    Args:
        html: Metagame page markup
        format_name: Format the page belongs to
        base_url: Site root for archetype links

    Returns:
        Archetypes in page order, most played first
    """
    summaries: list[DeckSummary] = []
    seen: set[str] = set()

    for match in ARCHETYPE_PATTERN.finditer(html):
        name = match["name"].strip()
        if name in seen:
            continue
        seen.add(name)

        meta_share = float(match["share"]) / 100.0
        if meta_share <= 0:
            logger.debug("Skipping archetype %s with no meta share", name)
            continue

        summaries.append(
            DeckSummary(
                name=name,
                url=f"{base_url}{match['path']}",
                meta_share=meta_share,
                format=format_name,
            )
        )

    return summaries


def extract_deck_id_from_archetype(html: str) -> str | None:
    """ID of the first sample deck linked from an archetype page."""
    match = DECK_LINK_PATTERN.search(html)
    return match.group(1) if match else None


def _count_cards(section: str) -> dict[str, int]:
    cards: dict[str, int] = {}
    for match in DOWNLOAD_LINE_PATTERN.finditer(section):
        name = canonical_name(match.group(2))
        cards[name] = cards.get(name, 0) + int(match.group(1))
    return cards


def parse_deck_download(text: str, summary: DeckSummary) -> DeckList:
    """
    Build a DeckList from a deck download.

    Downloads hold "<count> <name>" lines; the first blank line separates
    the maindeck from the sideboard:

        4 Lightning Bolt
        16 Mountain

        2 Pyroblast

    Names are canonicalised, so both faces of a double-faced card count
    toward the front face.
    """
    sections = BLANK_LINE_PATTERN.split(text.strip(), maxsplit=1)
    main = sections[0]
    side = sections[1] if len(sections) > 1 else ""

    return DeckList(
        name=summary.name,
        archetype=_infer_archetype(summary.name),
        format=summary.format,
        cards=_count_cards(main),
        sideboard=_count_cards(side),
        meta_share=summary.meta_share,
        source_url=summary.url,
    )


def _infer_archetype(deck_name: str) -> str:
    """Guess the play style from keywords in the deck name."""
    lowered = deck_name.lower()
    for archetype, keywords in _ARCHETYPE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return archetype
    return "midrange"


def fetch_meta_decks(
    format_name: str,
    client: httpx.Client,
    limit: int = 15,
    base_url: str = MTGGOLDFISH_BASE,
) -> list[DeckList]:
    """
    Download one sample deck for each of the top archetypes of a format.

    An archetype whose page or download fails is logged and skipped; the
    rest of the meta is still returned.

    Args:
        format_name: Format to scrape
        client: Shared httpx client
        limit: Number of archetypes to visit
        base_url: Site root

    Returns:
        Decklists in metagame order, empty decks left out

    Raises:
        ValueError: If the format has no metagame page
        httpx.HTTPError: If the metagame page cannot be downloaded
    """
    summaries = parse_metagame_page(
        fetch_metagame_page(format_name, client, base_url), format_name, base_url
    )
    logger.info("Found %d %s archetypes", len(summaries), format_name)

    decks: list[DeckList] = []
    for summary in summaries[:limit]:
        try:
            deck_id = extract_deck_id_from_archetype(_get(summary.url, client))
            if deck_id is None:
                logger.warning("No sample deck on archetype page %s", summary.url)
                continue
            download = _get(f"{base_url}/deck/download/{deck_id}", client)
        except httpx.HTTPError as e:
            logger.warning("Skipping %s: %s", summary.name, e)
            continue

        deck = parse_deck_download(download, summary)
        if deck.cards:
            decks.append(deck)

    logger.info("Downloaded %d %s decks", len(decks), format_name)
    return decks
