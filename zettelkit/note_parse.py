"""Parsing of note files into their components."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from zettelkit.link import Link
from zettelkit.note import Note

_URL_REGEX = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.\-]*://\S+|mailto:\S+)$")
_DATE_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M")


@dataclass
class NoteContent:
    """Data parsed from the content of a note; None means absent."""

    title: str | None = None
    lead: str | None = None
    body: str | None = None
    tags: list[str] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


class NoteContentParser(ABC):
    """Splits the raw content of a note into its components."""

    @abstractmethod
    def parse_note_content(self, content: str) -> NoteContent:
        """Parse the raw content of a note."""


class NoteParser(ABC):
    """Parses a note file into a Note."""

    @abstractmethod
    def parse_note_at(self, abs_path: str) -> Note | None:
        """Parse the note stored at the given absolute path."""


def is_url(text: str) -> bool:
    """Whether text is an absolute URL, such as an HTTP or mailto link."""
    return _URL_REGEX.match(text) is not None


def _as_utc_if_naive(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def _parse_date(text: str) -> datetime | None:
    try:
        return _as_utc_if_naive(datetime.fromisoformat(text))
    except ValueError:
        pass
    for date_format in _DATE_FORMATS:
        try:
            return datetime.strptime(text, date_format).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    return None


def creation_date_from(
    metadata: Mapping[str, Any] | None, birth_time: datetime | None
) -> datetime:
    """Creation date of a note.

    Taken from the frontmatter ``date`` key when it holds a parsable date
    string, otherwise from the file birth time, otherwise the current time.
    """
    date_value = (metadata or {}).get("date")
    if isinstance(date_value, str):
        parsed = _parse_date(date_value)
        if parsed is not None:
            return parsed

    if birth_time is not None:
        return _as_utc_if_naive(birth_time).astimezone(timezone.utc)

    return datetime.now(timezone.utc)