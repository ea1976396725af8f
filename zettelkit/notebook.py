"""Queries and commands performed on an opened notebook."""

from __future__ import annotations

import hashlib
import logging
import os
import posixpath
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from zettelkit.collection import (
    Collection,
    CollectionFormatter,
    CollectionKind,
    CollectionSorter,
    new_collection_formatter,
)
from zettelkit.config import Config
from zettelkit.fs import FileStorage, _join, _relative_path
from zettelkit.ids import IDGenerator, IDGeneratorFactory
from zettelkit.link import LinkType, ResolvedLink
from zettelkit.link_format import LinkFormatter, new_link_formatter
from zettelkit.note import ContextualNote, MinimalNote, Note
from zettelkit.note_find import NoteFindOpts
from zettelkit.note_format import NoteFormatter, new_note_formatter
from zettelkit.note_new import Dir, NewNoteTask
from zettelkit.note_parse import (
    NoteContentParser,
    NoteParser,
    creation_date_from,
    is_url,
)
from zettelkit.template import TemplateLoaderFactory


class NotebookError(Exception):
    """Raised when a notebook path or directory is invalid."""


class NoteIndex(ABC):
    """Persists and grants access to indexed information about the notes."""

    @abstractmethod
    def find(self, opts: NoteFindOpts) -> list[ContextualNote]:
        """Notes matching the given filtering and sorting criteria."""

    @abstractmethod
    def find_minimal(self, opts: NoteFindOpts) -> list[MinimalNote]:
        """Lightweight metadata of the notes matching the given criteria."""

    @abstractmethod
    def find_link_match(self, base_dir: str, href: str, link_type: LinkType) -> int:
        """ID of the best note match for a link href, relative to base_dir."""

    @abstractmethod
    def find_links_between_notes(self, ids: Iterable[int]) -> list[ResolvedLink]:
        """Links between the given notes."""

    @abstractmethod
    def find_collections(
        self, kind: CollectionKind, sorters: list[CollectionSorter]
    ) -> list[Collection]:
        """All the collections of the given kind."""

    @abstractmethod
    def add(self, note: Note) -> int:
        """Index a new note and return its ID."""

    @abstractmethod
    def update(self, note: Note) -> None:
        """Reset the metadata of an already indexed note."""

    @abstractmethod
    def remove(self, path: str) -> None:
        """Delete a note from the index."""


def _os_environ() -> dict[str, str]:
    return dict(os.environ)


@dataclass
class NotebookPorts:
    """Collaborators used by a notebook."""

    note_index: NoteIndex | None = None
    note_content_parser: NoteContentParser | None = None
    template_loader_factory: TemplateLoaderFactory | None = None
    id_generator_factory: IDGeneratorFactory | None = None
    fs: FileStorage | None = None
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("zettelkit"))
    os_env: Callable[[], dict[str, str]] = _os_environ


@dataclass
class NewNoteOpts:
    """Options used to create a new note; None means unset."""

    title: str | None = None
    content: str = ""
    directory: str | None = None
    group: str | None = None
    template: str | None = None
    extra: dict[str, str] = field(default_factory=dict)
    date: datetime | None = None
    dry_run: bool = False
    id: str = ""


class Notebook(NoteParser):
    """Handles queries and commands performed on an opened notebook."""

    def __init__(self, path: str, config: Config, ports: NotebookPorts) -> None:
        self.path = path
        self.config = config
        self.parser = ports.note_content_parser
        self._index = ports.note_index
        self._template_loader_factory = ports.template_loader_factory
        self._id_generator_factory = ports.id_generator_factory
        self._fs = ports.fs
        self._logger = ports.logger
        self._os_env = ports.os_env

    # Parsing

    def parse_note_at(self, abs_path: str) -> Note:
        """Read and parse the note file at abs_path."""
        try:
            content = self._fs.read(abs_path)
        except Exception as err:
            err.add_note(abs_path)
            raise
        return self.parse_note_with_content(abs_path, content)

    def parse_note_with_content(self, abs_path: str, content: bytes) -> Note:
        """Parse a note located at abs_path with the given raw content."""
        rel_path = self.rel_path(abs_path)
        text = content.decode("utf-8", errors="replace")
        parts = self.parser.parse_note_content(text)

        note = Note(
            path=rel_path,
            title=parts.title or "",
            lead=parts.lead or "",
            body=parts.body or "",
            raw_content=text,
            word_count=len(text.split()),
            links=[],
            tags=parts.tags,
            metadata=parts.metadata,
            checksum=hashlib.sha256(content).hexdigest(),
        )

        for link in parts.links:
            if not is_url(link.href) and link.type == LinkType.MARKDOWN:
                # Make the href relative to the notebook root.
                href = _join(posixpath.dirname(abs_path), link.href)
                try:
                    link = replace(link, href=self.rel_path(href))
                except NotebookError as err:
                    self._logger.error("%s", err)
                    continue
            note.links.append(link)

        try:
            stat = os.stat(abs_path)
        except OSError:
            pass
        else:
            note.modified = datetime.fromtimestamp(stat.st_mtime, timezone.utc)
            birth = getattr(stat, "st_birthtime", None)
            birth_time = (
                datetime.fromtimestamp(birth, timezone.utc) if birth is not None else None
            )
            note.created = creation_date_from(note.metadata, birth_time)

        return note

    # Creation

    def new_note(self, opts: NewNoteOpts) -> Note:
        """Generate a new note in the notebook, index it and return it.

        Raises NoteExistsError if no free filename can be generated.
        """
        try:
            return self._new_note(opts)
        except Exception as err:
            err.add_note("new note")
            raise

    def _new_note(self, opts: NewNoteOpts) -> Note:
        directory = opts.directory if opts.directory is not None else self.path
        dir = self.require_dir_at(directory)

        group = opts.group if opts.group is not None else dir.group
        config = self.config.group_config_named(group)

        extra = {**config.extra, **opts.extra}
        templates = self._template_loader_factory(config.note.lang)

        id_generator: IDGenerator
        if opts.id:
            fixed_id = opts.id
            id_generator = lambda: fixed_id  # noqa: E731
        else:
            id_generator = self._id_generator_factory(config.note.id_options)

        task = NewNoteTask(
            dir=dir,
            title=opts.title if opts.title is not None else config.note.default_title,
            content=opts.content,
            date=opts.date,
            extra=extra,
            env=self._os_env(),
            fs=self._fs,
            filename_template=f"{config.note.filename_template}.{config.note.extension}",
            body_template_path=(
                opts.template if opts.template is not None else config.note.body_template_path
            ),
            templates=templates,
            gen_id=id_generator,
            dry_run=opts.dry_run,
        )
        path, content = task.execute()

        note = self.parse_note_with_content(path, content.encode("utf-8"))
        if not opts.dry_run:
            note.id = self._index.add(note)
        return note

    # Queries

    def find_notes(self, opts: NoteFindOpts) -> list[ContextualNote]:
        """Notes matching the given filtering options."""
        return self._index.find(opts)

    def find_note(self, opts: NoteFindOpts) -> Note | None:
        """First note matching the given filtering options, if any."""
        notes = self.find_notes(replace(opts, limit=1))
        return notes[0] if notes else None

    def find_minimal_notes(self, opts: NoteFindOpts) -> list[MinimalNote]:
        """Lightweight metadata of the notes matching the given options."""
        return self._index.find_minimal(opts)

    def find_minimal_note(self, opts: NoteFindOpts) -> MinimalNote | None:
        """Lightweight metadata of the first matching note, if any."""
        notes = self.find_minimal_notes(replace(opts, limit=1))
        return notes[0] if notes else None

    def find_by_href(self, href: str, allow_partial_href: bool) -> MinimalNote | None:
        """First note matching the given link href.

        With allow_partial_href, the href may match any unique portion of a path.
        """
        return self.find_minimal_note(
            NoteFindOpts(include_hrefs=[href], allow_partial_hrefs=allow_partial_href)
        )

    def find_links_between_notes(self, ids: Iterable[int]) -> list[ResolvedLink]:
        """Links between the given notes."""
        return self._index.find_links_between_notes(ids)

    def find_collections(
        self, kind: CollectionKind, sorters: list[CollectionSorter]
    ) -> list[Collection]:
        """All the collections of the given kind."""
        return self._index.find_collections(kind, sorters)

    # Paths and directories

    def rel_path(self, original_path: str) -> str:
        """Path relative to the notebook root; '' for the root itself."""
        try:
            path = self._fs.abs(original_path)
            path = _relative_path(self.path, path)
        except (OSError, ValueError) as err:
            raise NotebookError(f"{original_path}: not a valid notebook path: {err}") from err
        if path.startswith(".."):
            raise NotebookError(
                f"{original_path}: path is outside the notebook at {self.path}"
            )
        return "" if path == "." else path

    def root_dir(self) -> Dir:
        """Root directory of this notebook."""
        return Dir(name="", path=self.path, group="")

    def dir_at(self, path: str) -> Dir:
        """Notebook directory at the given path."""
        abs_path = self._fs.abs(path)
        name = self.rel_path(abs_path)
        group = self.config.group_name_for_path(name)
        return Dir(name=name, path=abs_path, group=group)

    def require_dir_at(self, path: str) -> Dir:
        """Same as dir_at, but raises NotebookError if the directory is missing."""
        dir = self.dir_at(path)
        if not self._fs.dir_exists(dir.path):
            raise NotebookError(f"{path}: directory not found")
        return dir

    # Formatters

    def new_note_formatter(self, template_string: str) -> NoteFormatter:
        """Formatter rendering notes with the given template string."""
        templates = self._template_loader_factory(self.config.note.lang)
        template = templates.load_template(template_string)
        link_formatter = new_link_formatter(self.config.format.markdown, templates)
        return new_note_formatter(self.path, template, link_formatter, self._os_env(), self._fs)

    def new_collection_formatter(self, template_string: str) -> CollectionFormatter:
        """Formatter rendering collections with the given template string."""
        templates = self._template_loader_factory(self.config.note.lang)
        return new_collection_formatter(templates.load_template(template_string))

    def new_link_formatter(self) -> LinkFormatter:
        """Formatter of internal links between notes."""
        templates = self._template_loader_factory(self.config.note.lang)
        return new_link_formatter(self.config.format.markdown, templates)