"""
Row filtering for the search prompt.

Queries are case-insensitive substring matches against the card name and,
optionally, its type line. A query starting with "re:" is a regular
expression; a pattern that does not compile is matched literally instead,
so a half-typed pattern never interrupts browsing.
"""

import logging
import re
from collections.abc import Callable, Sequence

from metacollector.models.card import CardCatalog
from metacollector.models.wishlist import WishlistRow

logger = logging.getLogger(__name__)

REGEX_PREFIX = "re:"

Matcher = Callable[[str], bool]


def compile_query(query: str) -> Matcher:
    """
    Turn query text into a predicate over searchable strings.

    Returns:
        Function returning True for strings the query matches. The empty
        query matches everything.
    """
    if not query:
        return lambda _: True

    if query.startswith(REGEX_PREFIX):
        pattern = query[len(REGEX_PREFIX) :]
        try:
            compiled = re.compile(pattern, re.IGNORECASE)
        except re.error as e:
            logger.debug("Pattern %r does not compile (%s), matching literally", pattern, e)
            return _literal(pattern)
        return lambda text: compiled.search(text) is not None

    return _literal(query)


def _literal(needle: str) -> Matcher:
    folded = needle.casefold()
    return lambda text: folded in text.casefold()


def filter_rows(
    rows: Sequence[WishlistRow],
    query: str,
    catalog: CardCatalog,
    match_type_tags: bool = True,
) -> tuple[int, ...]:
    """
    Indices of the rows matching a query, in row order.

    Args:
        rows: Rows of the active dataset
        query: Search text
        catalog: Source of display names and type lines
        match_type_tags: Also match against the type line

    Returns:
        Tuple of matching row indices
    """
    if not query:
        return tuple(range(len(rows)))

    matches = compile_query(query)
    result: list[int] = []
    for index, row in enumerate(rows):
        info = catalog.get(row.identity)
        name = info.display_name if info is not None else row.identity.name
        if matches(name):
            result.append(index)
        elif match_type_tags and info is not None and info.type_line and matches(info.type_line):
            result.append(index)
    return tuple(result)
