"""
Decklist check.

Compares a decklist against the collection: how many copies of each card
are owned, and what is still missing to build it.
"""

from dataclasses import dataclass
from enum import Enum

from rich.console import Console
from rich.table import Table

from metacollector.models.card import BASIC_LAND_NAMES, CardIdentity
from metacollector.models.collection import Collection


class CheckStatus(str, Enum):
    """How much of a card's count the collection covers."""

    COMPLETE = "complete"
    PARTIAL = "partial"
    MISSING = "missing"


STATUS_MARKS = {
    CheckStatus.COMPLETE: "[green]✅[/green]",
    CheckStatus.PARTIAL: "[yellow]🟡[/yellow]",
    CheckStatus.MISSING: "[red]❌[/red]",
}


@dataclass(frozen=True, slots=True)
class DeckCheckLine:
    """Ownership of one decklist card."""

    name: str
    count: int
    owned: int

    @property
    def missing(self) -> int:
        return max(0, self.count - self.owned)

    @property
    def status(self) -> CheckStatus:
        if self.missing == 0:
            return CheckStatus.COMPLETE
        if self.missing < self.count:
            return CheckStatus.PARTIAL
        return CheckStatus.MISSING


def check_deck(cards: dict[str, int], collection: Collection) -> list[DeckCheckLine]:
    """
    Check decklist counts against the collection.

    Basic lands are always owned. Owned copies are capped at the count the
    deck needs.

    Returns:
        One line per card, sorted by name
    """
    lines = []
    for name, count in cards.items():
        if name in BASIC_LAND_NAMES:
            owned = count
        else:
            owned = min(count, collection.get_quantity(CardIdentity.from_name(name)))
        lines.append(DeckCheckLine(name=name, count=count, owned=owned))
    lines.sort(key=lambda line: line.name)
    return lines


def print_deck_check(lines: list[DeckCheckLine], console: Console) -> None:
    """Print the ownership table followed by the missing cards as a want list."""
    table = Table(title="Deck check")
    table.add_column("Owned", justify="right", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Card")
    for line in lines:
        table.add_row(f"{line.owned}/{line.count}", STATUS_MARKS[line.status], line.name)
    console.print(table)

    console.print("\n[bold]Wishlist missing:[/bold]")
    for line in lines:
        if line.missing:
            console.print(f"{line.missing} {line.name}", markup=False, highlight=False)
