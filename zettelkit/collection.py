"""Note collections such as tags, their sorting and formatting."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import IntEnum, StrEnum

from zettelkit.template import Template


class CollectionKind(StrEnum):
    """Kind of note collection."""

    TAG = "tag"


@dataclass
class Collection:
    """A collection of notes, such as a tag."""

    id: int = 0
    kind: CollectionKind = CollectionKind.TAG
    name: str = ""
    note_count: int = 0


class CollectionSortField(IntEnum):
    """Collection field used to sort a list of collections."""

    NAME = 1
    NOTE_COUNT = 2


@dataclass(frozen=True)
class CollectionSorter:
    """Order term used to sort a list of collections."""

    field: CollectionSortField
    ascending: bool


_DEFAULT_SORTERS = {
    "name": CollectionSorter(CollectionSortField.NAME, True),
    "n": CollectionSorter(CollectionSortField.NAME, True),
    "note-count": CollectionSorter(CollectionSortField.NOTE_COUNT, False),
    "nc": CollectionSorter(CollectionSortField.NOTE_COUNT, False),
}


def collection_sorter_from_string(text: str) -> CollectionSorter:
    """Parse a sorter such as ``name`` or ``note-count+``.

    A ``+`` suffix sorts ascending, ``-`` descending; without a suffix the
    field's default order is used. Raises ValueError for unknown terms.
    """
    order_symbol = text[-1:]
    term = text.rstrip("+-")

    try:
        sorter = _DEFAULT_SORTERS[term]
    except KeyError:
        raise ValueError(f"{term}: unknown sorting term\ntry name or note-count") from None

    if order_symbol == "+":
        return CollectionSorter(sorter.field, True)
    if order_symbol == "-":
        return CollectionSorter(sorter.field, False)
    return sorter


def collection_sorters_from_strings(strs: Iterable[str]) -> list[CollectionSorter]:
    """Parse sorters in reverse order, so later terms take precedence."""
    return [collection_sorter_from_string(text) for text in reversed(list(strs))]


@dataclass
class CollectionFormatRenderContext:
    """Variables available to the collection formatting templates."""

    id: int = 0
    kind: CollectionKind = CollectionKind.TAG
    name: str = ""
    note_count: int = 0


CollectionFormatter = Callable[[Collection], str]


def new_collection_formatter(template: Template) -> CollectionFormatter:
    """Formatter rendering collections with the given template."""

    def format_collection(collection: Collection) -> str:
        return template.render(
            CollectionFormatRenderContext(
                id=collection.id,
                kind=collection.kind,
                name=collection.name,
                note_count=collection.note_count,
            )
        )

    return format_collection