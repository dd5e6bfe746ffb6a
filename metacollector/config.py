from enum import Enum
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from metacollector.models.failure import ConfigurationError, FailureKind


class SupportedFormat(str, Enum):
    """Formats with a scrapeable metagame."""

    PAUPER = "pauper"
    LEGACY = "legacy"
    PIONEER = "pioneer"
    MODERN = "modern"
    STANDARD = "standard"

    @classmethod
    def parse(cls, value: str) -> "SupportedFormat":
        """
        Resolve a user-supplied format name.

        Accepts an exact name or an unambiguous prefix, case-insensitive.

        Raises:
            ConfigurationError: If the value names no format or several.
        """
        wanted = value.strip().lower()
        if not wanted:
            raise _unknown_format(value)

        for fmt in cls:
            if fmt.value == wanted:
                return fmt

        matches = [fmt for fmt in cls if fmt.value.startswith(wanted)]
        if len(matches) == 1:
            return matches[0]

        raise _unknown_format(value)


def _unknown_format(value: str) -> ConfigurationError:
    choices = ", ".join(fmt.value for fmt in SupportedFormat)
    return ConfigurationError(
        kind=FailureKind.INVALID_FORMAT,
        message=f"Unknown format: {value!r}",
        suggestion=f"Choose one of: {choices}",
    )


class RequiredCopiesPolicy(str, Enum):
    """How copies requested by several meta decks combine into one requirement."""

    MAX = "max"  # enough for the most demanding single deck
    SUM = "sum"  # enough to build every deck at once


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="METACOLLECTOR_")

    app_name: str = "Meta Collector"
    debug: bool = False

    default_format: SupportedFormat = SupportedFormat.PAUPER

    # Copies per deck that count toward playability (keeps basics from dominating)
    copy_cap: int = 4
    required_policy: RequiredCopiesPolicy = RequiredCopiesPolicy.MAX
    exclude_basic_lands: bool = True

    collection_path: Path = Path.home() / ".config" / "metacollector" / "collection.txt"
    log_file: Path = Path.home() / ".cache" / "metacollector" / "metacollector.log"
    export_path: Path = Path("wishlist.txt")

    goldfish_base_url: str = "https://www.mtggoldfish.com"
    scryfall_api_url: str = "https://api.scryfall.com"
    http_timeout: float = 30.0
    decks_per_format: int = 15

    viewport_rows: int = 20
    search_type_tags: bool = True


settings = Settings()


# =============================================================================
# ENGINE CONSTANTS
# =============================================================================

DEFAULT_COPY_CAP = 4
