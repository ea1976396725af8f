"""Formatting of internal links between notes."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import quote

from zettelkit.config import MarkdownConfig
from zettelkit.note import NotebookPath, drop_ext
from zettelkit.template import TemplateLoader


@dataclass
class LinkFormatterContext:
    """Metadata of a note used to generate a link to it."""

    filename: str = ""
    path: str = ""
    abs_path: str = ""
    rel_path: str = ""
    title: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_path(
        cls, path: NotebookPath, title: str, metadata: dict[str, Any]
    ) -> LinkFormatterContext:
        """Context for the note at the given notebook path."""
        return cls(
            filename=path.filename(),
            path=path.path,
            abs_path=path.abs_path(),
            rel_path=path.path_rel_to_working_dir(),
            title=title,
            metadata=metadata,
        )


LinkFormatter = Callable[[LinkFormatterContext], str]


def new_link_formatter(config: MarkdownConfig, template_loader: TemplateLoader) -> LinkFormatter:
    """Link formatter matching the configured link format."""
    if config.link_format in ("markdown", ""):
        return new_markdown_link_formatter(config, False)
    if config.link_format == "wiki":
        return new_wiki_link_formatter(config)
    return new_custom_link_formatter(config, template_loader)


def new_markdown_link_formatter(config: MarkdownConfig, only_href: bool) -> LinkFormatter:
    """Formatter of Markdown links, or only their ``(href)`` part."""

    def format_link(context: LinkFormatterContext) -> str:
        path = _format_path(context.rel_path, config)
        if not config.link_encode_path:
            path = path.replace("\\", "\\\\").replace(")", "\\)")
        if only_href:
            return f"({path})"
        title = context.title.replace("\\", "\\\\").replace("]", "\\]")
        return f"[{title}]({path})"

    return format_link


def new_wiki_link_formatter(config: MarkdownConfig) -> LinkFormatter:
    """Formatter of ``[[wiki links]]``."""

    def format_link(context: LinkFormatterContext) -> str:
        path = _format_path(context.path, config)
        if not config.link_encode_path:
            path = path.replace("\\", "\\\\").replace("]]", "\\]]")
        return f"[[{path}]]"

    return format_link


def new_custom_link_formatter(
    config: MarkdownConfig, template_loader: TemplateLoader
) -> LinkFormatter:
    """Formatter rendering the link format as a template."""
    try:
        template = template_loader.load_template(config.link_format)
    except Exception as err:
        err.add_note(f"failed to render custom link with format: {config.link_format}")
        raise

    def format_link(context: LinkFormatterContext) -> str:
        formatted = replace(
            context,
            filename=_format_path(context.filename, config),
            path=_format_path(context.path, config),
            rel_path=_format_path(context.rel_path, config),
            abs_path=_format_path(context.abs_path, config),
        )
        return template.render(formatted)

    return format_link


def _format_path(path: str, config: MarkdownConfig) -> str:
    if config.link_drop_extension:
        path = drop_ext(path)
    if config.link_encode_path:
        path = quote(path, safe="$&+:=@").replace("%2F", "/")
    return path