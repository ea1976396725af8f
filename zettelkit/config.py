"""User configuration of a notebook, read from TOML files."""

from __future__ import annotations

import copy
import os
import re
import tomllib
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from zettelkit.fs import FileStorage, _join
from zettelkit.ids import (
    CHARSET_ALPHANUM,
    CHARSET_HEX,
    CHARSET_LETTERS,
    CHARSET_NUMBERS,
    Case,
    IDOptions,
)


class ConfigError(Exception):
    """Raised when a configuration cannot be read or queried."""


class LSPDiagnosticSeverity(IntEnum):
    """Severity of a diagnostic reported by the language server."""

    NONE = 0
    ERROR = 1
    WARNING = 2
    INFO = 3
    HINT = 4


@dataclass
class NotebookConfig:
    """Configuration about the default notebook."""

    dir: str | None = None


@dataclass
class NoteConfig:
    """Settings used when generating new notes."""

    filename_template: str = "{{id}}"
    extension: str = "md"
    body_template_path: str | None = None
    lang: str = "en"
    default_title: str = "Untitled"
    id_options: IDOptions = field(default_factory=IDOptions)
    exclude: list[str] = field(default_factory=list)


@dataclass
class GroupConfig:
    """Settings for a group of notes."""

    paths: list[str] = field(default_factory=list)
    note: NoteConfig = field(default_factory=NoteConfig)
    extra: dict[str, str] = field(default_factory=dict)

    def exclude_globs(self) -> list[str]:
        """Exclude globs of the group, relative to the notebook root."""
        if not self.paths:
            return list(self.note.exclude)
        return [_join(p, glob) for p in self.paths for glob in self.note.exclude]

    def clone(self) -> GroupConfig:
        """Independent copy of this group configuration."""
        return copy.deepcopy(self)

    def _merged(self, table: dict[str, Any], name: str) -> GroupConfig:
        result = self.clone()

        if "paths" in table:
            result.paths.extend(_string_list(table, "paths"))
        else:
            # Without `paths`, the group name is used as its path.
            result.paths.append(name)

        note = _table(table, "note")
        template = _get(note, "template", str, "a string")
        if template:
            result.note.body_template_path = template
        _merge_note(result.note, note)

        result.extra.update(_string_map(table, "extra"))
        return result


@dataclass
class MarkdownConfig:
    """Settings for Markdown documents."""

    hashtags: bool = True
    colon_tags: bool = False
    multiword_tags: bool = False
    link_format: str = "markdown"
    link_encode_path: bool = True
    link_drop_extension: bool = True


@dataclass
class FormatConfig:
    """Settings for document formats."""

    markdown: MarkdownConfig = field(default_factory=MarkdownConfig)


@dataclass
class ToolConfig:
    """External tooling settings; None means unset."""

    editor: str | None = None
    shell: str | None = None
    pager: str | None = None
    fzf_preview: str | None = None
    fzf_line: str | None = None
    fzf_options: str | None = None
    fzf_bind_new: str | None = None


@dataclass
class LSPCompletionTemplates:
    """Completion templates for one kind of completion item."""

    label: str | None = None
    filter_text: str | None = None
    detail: str | None = None


@dataclass
class LSPCompletionConfig:
    """Auto-completion settings of the language server."""

    note: LSPCompletionTemplates = field(default_factory=LSPCompletionTemplates)
    use_additional_text_edits: bool | None = None


@dataclass
class LSPDiagnosticConfig:
    """Diagnostics settings of the language server."""

    wiki_title: LSPDiagnosticSeverity = LSPDiagnosticSeverity.NONE
    dead_link: LSPDiagnosticSeverity = LSPDiagnosticSeverity.ERROR


@dataclass
class LSPConfig:
    """Language server settings."""

    completion: LSPCompletionConfig = field(default_factory=LSPCompletionConfig)
    diagnostics: LSPDiagnosticConfig = field(default_factory=LSPDiagnosticConfig)


@dataclass
class Config:
    """Whole user configuration."""

    notebook: NotebookConfig = field(default_factory=NotebookConfig)
    note: NoteConfig = field(default_factory=NoteConfig)
    groups: dict[str, GroupConfig] = field(default_factory=dict)
    format: FormatConfig = field(default_factory=FormatConfig)
    tool: ToolConfig = field(default_factory=ToolConfig)
    lsp: LSPConfig = field(default_factory=LSPConfig)
    filters: dict[str, str] = field(default_factory=dict)
    aliases: dict[str, str] = field(default_factory=dict)
    extra: dict[str, str] = field(default_factory=dict)

    def root_group_config(self) -> GroupConfig:
        """Group configuration of the notebook root and its descendants."""
        return GroupConfig(paths=[], note=copy.deepcopy(self.note), extra=dict(self.extra))

    def group_config_for_path(self, path: str) -> GroupConfig:
        """Group configuration matching a notebook-relative path, or the root one."""
        return self.group_config_named(self.group_name_for_path(path))

    def group_config_named(self, name: str) -> GroupConfig:
        """Group configuration with the given name; an empty name is the root."""
        if not name:
            return self.root_group_config()
        try:
            return self.groups[name]
        except KeyError:
            raise ConfigError(f"no group named `{name}` found in the config") from None

    def group_name_for_path(self, path: str) -> str:
        """Name of the group matching a notebook-relative path, or ''."""
        for name, group in self.groups.items():
            for group_path in group.paths:
                try:
                    matches = _glob_match(group_path, path)
                except ValueError as err:
                    raise ConfigError(
                        f"failed to match group {name} to {path}: {err}"
                    ) from err
                if matches or path.startswith(group_path + "/"):
                    return name
        return ""


def new_default_config() -> Config:
    """Configuration with the default settings."""
    return Config()


def open_config(
    path: str, parent_config: Config, fs: FileStorage, is_global: bool
) -> Config:
    """Read the TOML configuration at path; a missing file yields the parent."""
    try:
        exists = fs.file_exists(path)
    except OSError:
        exists = True
    if not exists:
        return parent_config

    try:
        content = fs.read(path)
    except OSError as err:
        raise ConfigError(f"failed to open config file at {path}: {err}") from err

    return parse_config(content, path, parent_config, is_global)


def parse_config(
    content: bytes | str, path: str, parent_config: Config, is_global: bool
) -> Config:
    """Build a configuration from TOML content, inheriting from parent_config.

    The parent is left untouched. Raises ConfigError on invalid content.
    """
    config = copy.deepcopy(parent_config)
    try:
        _apply_toml(config, content, is_global)
    except ValueError as err:
        raise ConfigError(f"failed to read config: {err}") from err
    return config


def _apply_toml(config: Config, content: bytes | str, is_global: bool) -> None:
    text = content.decode("utf-8") if isinstance(content, bytes) else content
    data = tomllib.loads(text)

    # Notebook
    notebook_dir = _get(_table(data, "notebook"), "dir", str, "a string")
    if notebook_dir:
        if not is_global:
            raise ValueError("notebook.dir should not be set on local configuration")
        config.notebook.dir = notebook_dir

    # Note
    note = _table(data, "note")
    template = _get(note, "template", str, "a string")
    if template:
        config.note.body_template_path = _expand_tilde(template)
    _merge_note(config.note, note)
    config.extra.update(_string_map(data, "extra"))

    # Groups
    for name, group_table in _table(data, "group").items():
        if not isinstance(group_table, dict):
            raise ValueError(f"group.{name}: expected a table")
        parent = config.groups.get(name)
        if parent is None:
            parent = config.root_group_config()
        config.groups[name] = parent._merged(group_table, name)

    # Format
    markdown = _table(_table(data, "format"), "markdown")
    md_config = config.format.markdown
    hashtags = _get(markdown, "hashtags", bool, "a boolean")
    if hashtags is not None:
        md_config.hashtags = hashtags
    colon_tags = _get(markdown, "colon-tags", bool, "a boolean")
    if colon_tags is not None:
        md_config.colon_tags = colon_tags
    multiword_tags = _get(markdown, "multiword-tags", bool, "a boolean")
    if multiword_tags is not None:
        md_config.multiword_tags = multiword_tags
    link_format = _get(markdown, "link-format", str, "a string")
    if link_format == "":
        link_format = "markdown"
    if link_format is not None:
        md_config.link_format = link_format
    encode_path = _get(markdown, "link-encode-path", bool, "a boolean")
    if encode_path is not None:
        md_config.link_encode_path = encode_path
    elif link_format is not None:
        md_config.link_encode_path = link_format == "markdown"
    drop_extension = _get(markdown, "link-drop-extension", bool, "a boolean")
    if drop_extension is not None:
        md_config.link_drop_extension = drop_extension

    # Tool
    tool = _table(data, "tool")
    tool_config = config.tool
    for key, attribute, allow_empty in (
        ("editor", "editor", False),
        ("shell", "shell", False),
        ("pager", "pager", True),
        ("fzf-preview", "fzf_preview", True),
        ("fzf-line", "fzf_line", False),
        ("fzf-options", "fzf_options", False),
        ("fzf-bind-new", "fzf_bind_new", True),
    ):
        value = _get(tool, key, str, "a string")
        if value is not None:
            setattr(tool_config, attribute, value if allow_empty else (value or None))

    # LSP completion
    lsp = _table(data, "lsp")
    completion = _table(lsp, "completion")
    templates = config.lsp.completion.note
    for key, attribute in (
        ("note-label", "label"),
        ("note-filter-text", "filter_text"),
        ("note-detail", "detail"),
    ):
        value = _get(completion, key, str, "a string")
        if value is not None:
            setattr(templates, attribute, value or None)
    config.lsp.completion.use_additional_text_edits = _get(
        completion, "use-additional-text-edits", bool, "a boolean"
    )

    # LSP diagnostics
    diagnostics = _table(lsp, "diagnostics")
    wiki_title = _get(diagnostics, "wiki-title", str, "a string")
    if wiki_title is not None:
        config.lsp.diagnostics.wiki_title = _severity_from_string(wiki_title)
    dead_link = _get(diagnostics, "dead-link", str, "a string")
    if dead_link is not None:
        config.lsp.diagnostics.dead_link = _severity_from_string(dead_link)

    config.filters.update(_string_map(data, "filter"))
    config.aliases.update(_string_map(data, "alias"))


def _merge_note(note: NoteConfig, table: dict[str, Any]) -> None:
    """Apply the note settings of a TOML table, except the body template."""
    filename = _get(table, "filename", str, "a string")
    if filename:
        note.filename_template = filename
    extension = _get(table, "extension", str, "a string")
    if extension:
        note.extension = extension
    id_length = _get(table, "id-length", int, "an integer")
    if id_length:
        note.id_options.length = id_length
    id_charset = _get(table, "id-charset", str, "a string")
    if id_charset:
        note.id_options.charset = _charset_from_string(id_charset)
    id_case = _get(table, "id-case", str, "a string")
    if id_case:
        note.id_options.case = _case_from_string(id_case)
    lang = _get(table, "language", str, "a string")
    if lang:
        note.lang = lang
    default_title = _get(table, "default-title", str, "a string")
    if default_title:
        note.default_title = default_title
    note.exclude = [
        *note.exclude,
        *_string_list(table, "exclude"),
        *_string_list(table, "ignore"),
    ]


def _get(table: dict[str, Any], key: str, kind: type, label: str) -> Any:
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ValueError(f"{key}: expected {label}")
    return value


def _table(table: dict[str, Any], key: str) -> dict[str, Any]:
    return _get(table, key, dict, "a table") or {}


def _string_list(table: dict[str, Any], key: str) -> list[str]:
    values = _get(table, key, list, "a list of strings") or []
    if not all(isinstance(value, str) for value in values):
        raise ValueError(f"{key}: expected a list of strings")
    return list(values)


def _string_map(table: dict[str, Any], key: str) -> dict[str, str]:
    values = _table(table, key)
    for name, value in values.items():
        if not isinstance(value, str):
            raise ValueError(f"{key}.{name}: expected a string")
    return dict(values)


def _expand_tilde(path: str) -> str:
    if path == "~" or path.startswith("~/"):
        return os.path.expanduser(path)
    return path


_CHARSETS = {
    "alphanum": CHARSET_ALPHANUM,
    "hex": CHARSET_HEX,
    "letters": CHARSET_LETTERS,
    "numbers": CHARSET_NUMBERS,
}


def _charset_from_string(charset: str) -> str:
    return _CHARSETS.get(charset, charset)


_CASES = {"lower": Case.LOWER, "upper": Case.UPPER, "mixed": Case.MIXED}


def _case_from_string(name: str) -> Case:
    return _CASES.get(name, Case.LOWER)


_SEVERITIES = {
    "": LSPDiagnosticSeverity.NONE,
    "none": LSPDiagnosticSeverity.NONE,
    "error": LSPDiagnosticSeverity.ERROR,
    "warning": LSPDiagnosticSeverity.WARNING,
    "info": LSPDiagnosticSeverity.INFO,
    "hint": LSPDiagnosticSeverity.HINT,
}


def _severity_from_string(name: str) -> LSPDiagnosticSeverity:
    try:
        return _SEVERITIES[name]
    except KeyError:
        raise ValueError(
            f"{name}: unknown LSP diagnostic severity - "
            "may be none, hint, info, warning or error"
        ) from None


def _glob_match(pattern: str, name: str) -> bool:
    """Shell pattern match where wildcards never cross a '/'.

    Raises ValueError on a malformed pattern.
    """
    return _glob_to_regex(pattern).fullmatch(name) is not None


def _glob_to_regex(pattern: str) -> re.Pattern[str]:
    out: list[str] = []
    i, n = 0, len(pattern)

    def escaped_char(index: int) -> tuple[str, int]:
        char = pattern[index]
        if char == "\\":
            index += 1
            if index >= n:
                raise ValueError("syntax error in pattern")
            return pattern[index], index + 1
        if char in "-]":
            raise ValueError("syntax error in pattern")
        return char, index + 1

    while i < n:
        char = pattern[i]
        i += 1
        if char == "*":
            out.append("[^/]*")
        elif char == "?":
            out.append("[^/]")
        elif char == "\\":
            if i >= n:
                raise ValueError("syntax error in pattern")
            out.append(re.escape(pattern[i]))
            i += 1
        elif char == "[":
            negate = i < n and pattern[i] == "^"
            if negate:
                i += 1
            items: list[str] = []
            while True:
                if i >= n:
                    raise ValueError("syntax error in pattern")
                if pattern[i] == "]" and items:
                    i += 1
                    break
                low, i = escaped_char(i)
                if i < n and pattern[i] == "-":
                    if i + 1 >= n:
                        raise ValueError("syntax error in pattern")
                    high, i = escaped_char(i + 1)
                    if low > high:
                        # An inverted range matches nothing.
                        items.append("(?!)")
                    else:
                        items.append(f"{re.escape(low)}-{re.escape(high)}")
                else:
                    items.append(re.escape(low))
            if any(item == "(?!)" for item in items):
                items = [item for item in items if item != "(?!)"]
                if not items:
                    out.append("[^\\s\\S]" if not negate else "[\\s\\S]")
                    continue
            out.append(("[^" if negate else "[") + "".join(items) + "]")
        else:
            out.append(re.escape(char))

    try:
        return re.compile("".join(out), re.DOTALL)
    except re.error as err:
        raise ValueError(f"syntax error in pattern: {err}") from err