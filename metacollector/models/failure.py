"""
Failure classification.

Every failure the application can produce falls into one of four groups:

- ConfigurationError: bad startup parameters or corrupt weight data. Fatal,
  raised before any session starts.
- DataFetchError: the card/meta data provider could not deliver. Fatal at
  startup, recoverable on a refresh inside a running session.
- ValidationWarning: a single input record was dropped or overwritten during
  ingestion. Logged and collected, processing continues.
- InputNoOp: a command that makes no sense in the current session state.
  Absorbed by the state machine, never shown to the user.

INVARIANT: collaborator errors (network, parsing) are translated into
DataFetchError at the provider boundary. Raw transport exceptions never reach
the session state machine.
"""

from dataclasses import dataclass
from enum import Enum


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Startup configuration
    INVALID_FORMAT = "invalid_format"
    INVALID_WEIGHT = "invalid_weight"

    # Data provider failures
    NETWORK_ERROR = "network_error"
    PARSE_ERROR = "parse_error"

    # Ingestion warnings
    UNRESOLVED_CARD = "unresolved_card"
    DUPLICATE_ENTRY = "duplicate_entry"
    INVALID_INPUT = "invalid_input"


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        super().__init__(message)

    def user_message(self) -> str:
        """Single line suitable for a status bar or stderr."""
        text = self.message
        if self.detail:
            text = f"{text} ({self.detail})"
        if self.suggestion:
            text = f"{text}. {self.suggestion}"
        return text


class ConfigurationError(KnownError):
    """Startup configuration or ingested weight data is invalid."""


class DataFetchError(KnownError):
    """
    The data provider failed to deliver a catalog or meta corpus.

    Covers both transport failures and payloads that could not be parsed.
    """

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        kind: FailureKind = FailureKind.NETWORK_ERROR,
    ):
        super().__init__(
            kind=kind,
            message=message,
            detail=detail,
            suggestion="Check your connection and try again",
        )


class InputNoOp(Exception):
    """A command is not applicable in the current session state."""


@dataclass(frozen=True, slots=True)
class ValidationWarning:
    """
    A recoverable problem found while ingesting one input record.

    Attributes:
        kind: What went wrong (unresolved card, duplicate entry, ...)
        card_name: Name of the offending card as it appeared in the input
        message: Human-readable explanation
    """

    kind: FailureKind
    card_name: str
    message: str

    def __str__(self) -> str:
        return f"{self.card_name}: {self.message}"
