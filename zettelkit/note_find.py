"""Options used to filter, match and sort notes."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import IntEnum


@dataclass
class LinkFilter:
    """Selects notes linking to, or linked by, other notes."""

    hrefs: list[str] = field(default_factory=list)
    negate: bool = False
    recursive: bool = False
    max_distance: int = 0


class NoteSortField(IntEnum):
    """Note field used to sort a list of notes."""

    CREATED = 1
    MODIFIED = 2
    PATH = 3
    RANDOM = 4
    TITLE = 5
    WORD_COUNT = 6


@dataclass(frozen=True)
class NoteSorter:
    """Order term used to sort a list of notes."""

    field: NoteSortField
    ascending: bool


class MatchStrategy(IntEnum):
    """Text matching strategy used when filtering notes."""

    FTS = 1
    EXACT = 2
    RE = 3


@dataclass
class NoteFindOpts:
    """Filtering and sorting options used to find notes."""

    match: list[str] = field(default_factory=list)
    match_strategy: MatchStrategy | None = None
    include_hrefs: list[str] = field(default_factory=list)
    exclude_hrefs: list[str] = field(default_factory=list)
    allow_partial_hrefs: bool = False
    include_ids: list[int] | None = None
    exclude_ids: list[int] | None = None
    tags: list[str] = field(default_factory=list)
    mention: list[str] = field(default_factory=list)
    mentioned_by: list[str] = field(default_factory=list)
    linked_by: LinkFilter | None = None
    link_to: LinkFilter | None = None
    related: list[str] = field(default_factory=list)
    orphan: bool = False
    tagless: bool = False
    created_start: datetime | None = None
    created_end: datetime | None = None
    modified_start: datetime | None = None
    modified_end: datetime | None = None
    limit: int = 0
    sorters: list[NoteSorter] = field(default_factory=list)

    def including_ids(self, ids: Iterable[int]) -> NoteFindOpts:
        """Copy of these options with ids added to the included note IDs."""
        return replace(self, include_ids=[*(self.include_ids or []), *ids])

    def excluding_ids(self, ids: Iterable[int]) -> NoteFindOpts:
        """Copy of these options with ids added to the excluded note IDs."""
        return replace(self, exclude_ids=[*(self.exclude_ids or []), *ids])


_DEFAULT_SORTERS = {
    "created": NoteSorter(NoteSortField.CREATED, False),
    "c": NoteSorter(NoteSortField.CREATED, False),
    "modified": NoteSorter(NoteSortField.MODIFIED, False),
    "m": NoteSorter(NoteSortField.MODIFIED, False),
    "path": NoteSorter(NoteSortField.PATH, True),
    "p": NoteSorter(NoteSortField.PATH, True),
    "title": NoteSorter(NoteSortField.TITLE, True),
    "t": NoteSorter(NoteSortField.TITLE, True),
    "random": NoteSorter(NoteSortField.RANDOM, True),
    "r": NoteSorter(NoteSortField.RANDOM, True),
    "word-count": NoteSorter(NoteSortField.WORD_COUNT, True),
    "wc": NoteSorter(NoteSortField.WORD_COUNT, True),
}


def note_sorter_from_string(text: str) -> NoteSorter:
    """Parse a sorter such as ``created`` or ``title-``.

    A ``+`` suffix sorts ascending, ``-`` descending; without a suffix the
    field's default order is used. Raises ValueError for unknown terms.
    """
    order_symbol = text[-1:]
    term = text.rstrip("+-")

    try:
        sorter = _DEFAULT_SORTERS[term]
    except KeyError:
        raise ValueError(
            f"{term}: unknown sorting term\n"
            "try created, modified, path, title, random or word-count"
        ) from None

    if order_symbol == "+":
        return NoteSorter(sorter.field, True)
    if order_symbol == "-":
        return NoteSorter(sorter.field, False)
    return sorter


def note_sorters_from_strings(strs: Iterable[str]) -> list[NoteSorter]:
    """Parse sorters in reverse order, so later terms take precedence."""
    return [note_sorter_from_string(text) for text in reversed(list(strs))]


_MATCH_STRATEGIES = {
    "fts": MatchStrategy.FTS,
    "f": MatchStrategy.FTS,
    "": MatchStrategy.FTS,
    "re": MatchStrategy.RE,
    "grep": MatchStrategy.RE,
    "r": MatchStrategy.RE,
    "exact": MatchStrategy.EXACT,
    "e": MatchStrategy.EXACT,
}


def match_strategy_from_string(text: str) -> MatchStrategy:
    """Parse a match strategy name, raising ValueError when unknown."""
    try:
        return _MATCH_STRATEGIES[text]
    except KeyError:
        raise ValueError(
            f"{text}: unknown match strategy\n"
            "try fts (full-text search), re (regular expression) or exact"
        ) from None