"""Notes and paths of files inside a notebook."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from zettelkit.fs import _base, _ext, _join, _relative_path
from zettelkit.link import Link


def drop_ext(path: str) -> str:
    """Path without the extension of its last element."""
    ext = _ext(path)
    return path[: len(path) - len(ext)] if ext else path


def filename_stem(path: str) -> str:
    """Filename of path without its extension."""
    base = _base(path)
    ext = _ext(path)
    if ext and base.endswith(ext):
        return base[: len(base) - len(ext)]
    return base


@dataclass
class MinimalNote:
    """Title and path of a note, for display purposes."""

    id: int = 0
    path: str = ""
    title: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class Note:
    """Metadata and content of a single note."""

    id: int = 0
    path: str = ""
    title: str = ""
    lead: str = ""
    body: str = ""
    raw_content: str = ""
    word_count: int = 0
    links: list[Link] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    created: datetime | None = None
    modified: datetime | None = None
    checksum: str = ""

    def as_minimal_note(self) -> MinimalNote:
        return MinimalNote(id=self.id, path=self.path, title=self.title, metadata=self.metadata)

    def filename(self) -> str:
        """Filename portion of the note path."""
        return _base(self.path)

    def filename_stem(self) -> str:
        """Filename portion of the note path, without its extension."""
        return filename_stem(self.path)


@dataclass
class ContextualNote(Note):
    """Note with context-sensitive excerpts, such as search matches."""

    snippets: list[str] = field(default_factory=list)


@dataclass
class NotebookPath:
    """Path of a notebook file along with the notebook root and working dir."""

    path: str
    base_path: str = ""
    working_dir: str = ""

    def filename(self) -> str:
        return _base(self.path)

    def abs_path(self) -> str:
        return _join(self.base_path, self.path)

    def path_rel_to_working_dir(self) -> str:
        """Path relative to the working dir, or to the notebook when it is unset.

        Raises ValueError when the path cannot be made relative.
        """
        if not self.working_dir:
            return self.path
        return _relative_path(self.working_dir, self.abs_path())