"""Links between notes and to external resources."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class LinkType(StrEnum):
    """Kind of link markup."""

    IMPLICIT = "implicit"
    MARKDOWN = "markdown"
    WIKI_LINK = "wiki-link"


class LinkRelation(StrEnum):
    """Relationship between a link's source and its target."""

    DOWN = "down"
    UP = "up"


def _relation(name: str) -> str:
    try:
        return LinkRelation(name)
    except ValueError:
        return name


def link_rels(*args: str) -> list[str]:
    """List of link relations from their names; unknown names are kept as is."""
    return [_relation(name) for name in args]


@dataclass
class Link:
    """Link in a note to another note or an external resource."""

    title: str = ""
    href: str = ""
    type: LinkType = LinkType.MARKDOWN
    is_external: bool = False
    rels: list[str] = field(default_factory=list)
    snippet: str = ""
    snippet_start: int = 0
    snippet_end: int = 0


@dataclass
class ResolvedLink(Link):
    """Link between two indexed notes."""

    id: int = 0
    source_id: int = 0
    source_path: str = ""
    target_id: int = 0
    target_path: str = ""