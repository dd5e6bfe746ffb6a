"""
Card and meta data provider.

The provider is the only part of the application that talks to the
network. Everything it returns is a finished value; everything that goes
wrong leaves it as a DataFetchError.

INVARIANT: raw httpx, JSON and payload-shape exceptions never escape a
provider method.
"""

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Protocol

import httpx

from metacollector.config import settings
from metacollector.models.card import CardCatalog
from metacollector.models.deck import DeckList
from metacollector.models.failure import DataFetchError, FailureKind
from metacollector.parsers import scryfall
from metacollector.scrapers import mtggoldfish

logger = logging.getLogger(__name__)


class DataProvider(Protocol):
    """Source of meta decklists and card metadata for a format."""

    def fetch_meta_decks(self, format_name: str) -> list[DeckList]:
        """Top decklists of the format, unresolved."""
        ...

    def fetch_catalog(self, format_name: str, names: Iterable[str]) -> CardCatalog:
        """Catalog entries for the named cards."""
        ...


@contextmanager
def _translate_errors(what: str) -> Iterator[None]:
    """Re-raise collaborator failures as DataFetchError."""
    try:
        yield
    except httpx.HTTPStatusError as e:
        raise DataFetchError(
            f"Failed to fetch {what}: HTTP {e.response.status_code}",
            detail=str(e.request.url),
        ) from e
    except httpx.HTTPError as e:
        raise DataFetchError(f"Failed to fetch {what}: {e}") from e
    except (ValueError, KeyError, TypeError) as e:
        # json.JSONDecodeError is a ValueError
        raise DataFetchError(
            f"Unexpected response while fetching {what}",
            detail=str(e),
            kind=FailureKind.PARSE_ERROR,
        ) from e


class WebDataProvider:
    """
    Provider backed by MTGGoldfish (decklists) and Scryfall (card data).

    Usage:
        with WebDataProvider() as provider:
            decks = provider.fetch_meta_decks("pauper")
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        goldfish_base_url: str | None = None,
        scryfall_api_url: str | None = None,
        decks_per_format: int | None = None,
    ) -> None:
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=settings.http_timeout)
        self.goldfish_base_url = goldfish_base_url or settings.goldfish_base_url
        self.scryfall_api_url = scryfall_api_url or settings.scryfall_api_url
        self.decks_per_format = decks_per_format or settings.decks_per_format

    def __enter__(self) -> "WebDataProvider":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def fetch_meta_decks(self, format_name: str) -> list[DeckList]:
        """
        Fetch the top decklists of a format.

        Raises:
            DataFetchError: If the metagame cannot be read or yields no decks.
        """
        with _translate_errors(f"{format_name} meta decks"):
            decks = mtggoldfish.fetch_meta_decks(
                format_name,
                self.client,
                limit=self.decks_per_format,
                base_url=self.goldfish_base_url,
            )
        if not decks:
            raise DataFetchError(
                f"No {format_name} meta decks found",
                kind=FailureKind.PARSE_ERROR,
            )
        return decks

    def fetch_catalog(self, format_name: str, names: Iterable[str]) -> CardCatalog:
        """
        Fetch card metadata for the named cards.

        Raises:
            DataFetchError: If Scryfall cannot be queried.
        """
        with _translate_errors("card data"):
            return scryfall.fetch_catalog(
                format_name, names, self.client, base_url=self.scryfall_api_url
            )
