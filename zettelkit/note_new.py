"""Generation of a new note file from templates."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime

from zettelkit.fs import FileStorage, _base, _join
from zettelkit.ids import IDGenerator
from zettelkit.note import filename_stem
from zettelkit.template import NULL_TEMPLATE, Template, TemplateLoader

_MAX_ATTEMPTS = 50


@dataclass
class Dir:
    """Directory inside a notebook."""

    name: str = ""
    path: str = ""
    group: str = ""


class NoteExistsError(Exception):
    """Raised when no free filename can be generated for a new note."""

    def __init__(self, name: str, path: str) -> None:
        super().__init__(f"{path}: note already exists")
        self.name = name
        self.path = path


@dataclass
class NewNoteTemplateContext:
    """Placeholder values expanded in the new note templates."""

    id: str = ""
    title: str = ""
    content: str = ""
    dir: str = ""
    filename: str = ""
    filename_stem: str = ""
    extra: dict[str, str] = field(default_factory=dict)
    now: datetime | None = None
    env: dict[str, str] = field(default_factory=dict)


@dataclass
class NewNoteTask:
    """Renders and writes a new note into a notebook directory."""

    dir: Dir
    title: str
    content: str
    date: datetime | None
    extra: dict[str, str]
    env: dict[str, str]
    fs: FileStorage
    filename_template: str
    body_template_path: str | None
    templates: TemplateLoader
    gen_id: IDGenerator
    dry_run: bool = False

    def execute(self) -> tuple[str, str]:
        """Generate the note; returns its absolute path and content.

        Raises NoteExistsError when no free filename can be found.
        """
        filename_template = self.templates.load_template(self.filename_template)

        content_template: Template = NULL_TEMPLATE
        if self.body_template_path:
            content_template = self.templates.load_template_at(self.body_template_path)

        context = NewNoteTemplateContext(
            title=self.title,
            content=self.content,
            dir=self.dir.name,
            extra=self.extra,
            now=self.date,
            env=self.env,
        )

        path, context = self._generate_path(context, filename_template)
        content = content_template.render(context)

        if not self.dry_run:
            self.fs.write(path, content.encode("utf-8"))

        return path, content

    def _generate_path(
        self, context: NewNoteTemplateContext, filename_template: Template
    ) -> tuple[str, NewNoteTemplateContext]:
        filename = ""
        path = ""
        for _ in range(_MAX_ATTEMPTS):
            context = replace(context, id=self.gen_id())
            filename = filename_template.render(context)
            path = _join(self.dir.path, filename)
            if not self.fs.file_exists(path):
                return path, replace(
                    context, filename=_base(path), filename_stem=filename_stem(path)
                )

        raise NoteExistsError(name=_join(self.dir.name, filename), path=path)