"""Locating, opening and creating notebooks."""

from __future__ import annotations

import posixpath
from collections.abc import Callable
from dataclasses import dataclass

from zettelkit.config import Config, open_config
from zettelkit.fs import FileStorage, _join
from zettelkit.notebook import Notebook, NotebookError
from zettelkit.template import TemplateLoader

NOTEBOOK_DIR = ".zk"
CONFIG_PATH = f"{NOTEBOOK_DIR}/config.toml"
DEFAULT_TEMPLATE_PATH = f"{NOTEBOOK_DIR}/templates/default.md"

NotebookFactory = Callable[[str, Config], Notebook]


class NotebookNotFoundError(Exception):
    """Raised when no notebook contains the given path or its parents."""

    def __init__(self, path: str) -> None:
        super().__init__(f"no notebook found in {path} or a parent directory")
        self.path = path


@dataclass
class InitOpts:
    """User preferences when creating a new notebook."""

    wiki_links: bool = True
    hashtags: bool = True
    colon_tags: bool = False
    multiword_tags: bool = False


def _is_windows_abs(path: str) -> bool:
    return len(path) >= 3 and path[1] == ":" and path[2] in "\\/"


def _is_windows_root(path: str) -> bool:
    return len(path) == 3 and path[1] == ":" and path[2] == "\\"


def _is_top(path: str) -> bool:
    return path in ("/", ".", "") or _is_windows_root(path)


class NotebookStore:
    """Retrieves existing notebooks or creates new ones, caching opened ones."""

    def __init__(
        self,
        config: Config,
        notebook_factory: NotebookFactory,
        template_loader: TemplateLoader,
        fs: FileStorage,
    ) -> None:
        self._config = config
        self._notebook_factory = notebook_factory
        self._template_loader = template_loader
        self._fs = fs
        self._notebooks: dict[str, Notebook] = {}

    def open(self, path: str) -> Notebook:
        """Notebook containing the given path.

        Raises NotebookNotFoundError when no notebook contains it.
        """
        try:
            canonical = self._fs.canonical(path)
            cached = self._cached(canonical)
            if cached is not None:
                return cached

            root = self._find_root(self._fs.abs(canonical))
            local_config = open_config(
                _join(root, CONFIG_PATH), self._config, self._fs, False
            )
            notebook = self._notebook_factory(root, local_config)
        except Exception as err:
            err.add_note("failed to open notebook")
            raise

        self._notebooks[root] = notebook
        return notebook

    def _cached(self, path: str) -> Notebook | None:
        try:
            target = self._fs.abs(path)
        except Exception:
            return None

        for root, notebook in self._notebooks.items():
            try:
                contained = self._fs.is_descendant_of(root, target)
            except Exception:
                contained = False
            if contained:
                return notebook
        return None

    def init(self, path: str, options: InitOpts) -> Notebook:
        """Create a new notebook at path and open it.

        Raises NotebookError when a notebook already contains path.
        """
        try:
            root = self._fs.abs(path)
            try:
                existing: str | None = self._find_root(root)
            except Exception:
                existing = None
            if existing is not None:
                raise NotebookError(f"a notebook already exists in {existing}")

            rendered = self._template_loader.load_template(DEFAULT_CONFIG).render(options)
            self._fs.write(_join(root, CONFIG_PATH), rendered.encode("utf-8"))
            self._fs.write(
                _join(root, DEFAULT_TEMPLATE_PATH), DEFAULT_TEMPLATE.encode("utf-8")
            )
        except Exception as err:
            err.add_note("init")
            raise

        return self.open(root)

    def _find_root(self, path: str) -> str:
        """Root of the notebook containing the absolute path."""
        if not posixpath.isabs(path) and not _is_windows_abs(path):
            raise ValueError(f"absolute path expected: {path}")

        current = path
        while not _is_top(current):
            if self._fs.dir_exists(_join(current, NOTEBOOK_DIR)):
                return current
            parent = posixpath.dirname(current.rstrip("/")) or "/"
            if parent == current:
                break
            current = parent
        raise NotebookNotFoundError(path)


DEFAULT_CONFIG = """# Settings of this notebook.
# Entries starting with # are inactive: remove the # to change a value.

[note]
# Language of the notes, used for slugs and dates.
#language = "en"
# Title given to notes created without one.
#default-title = "Untitled"
# Filename pattern of new notes, extension excluded.
#filename = "\\{{id}}"
#extension = "md"
# Body template, looked up in .zk/templates/ unless the path is absolute
# or starts with ~/.
template = "default.md"
# Globs of paths left out of the index.
#exclude = ["drafts/*", "log.md"]
# Random IDs: the charset is letters, numbers, alphanum, hex or any list
# of characters; the case is lower, upper or mixed.
#id-charset = "alphanum"
#id-length = 4
#id-case = "lower"

[extra]
# Free variables, available to templates as \\{{extra.<key>}}.
#key = "value"

# A group overrides [note] and [extra] for the notes under its paths; a
# group without paths covers the directory of the same name.
#[group."<NAME>"]
#paths = ["<DIR1>", "<DIR2>"]
#[group."<NAME>".note]
#filename = "\\{{format-date now}}"
#[group."<NAME>".extra]
#key = "value"

[format.markdown]
# Link style: "markdown", "wiki" or a custom template.
{{#if WikiLinks}}
link-format = "wiki"
{{else}}
#link-format = "wiki"
{{/if}}
# Percent-encode link paths (by default only for markdown links).
#link-encode-path = true
# Leave the file extension out of link paths.
#link-drop-extension = true
# Tag syntaxes: #hashtags, :colon:tags: and #multi word tags#, the last
# one needing hashtags.
{{#if Hashtags}}
hashtags = true
{{else}}
hashtags = false
{{/if}}
{{#if ColonTags}}
colon-tags = true
{{else}}
colon-tags = false
{{/if}}
{{#if MultiwordTags}}
multiword-tags = true
{{else}}
multiword-tags = false
{{/if}}

[tool]
# Editor for notes; EDITOR or VISUAL apply when unset.
#editor = "vim"
# Pager for long output; an empty string turns paging off.
#pager = "less -FIRX"
# Preview command of the fzf picker; an empty string turns it off.
#fzf-preview = "bat -p --color always {-1}"

[lsp]

[lsp.diagnostics]
# Severity of each check: none, hint, info, warning or error.
#wiki-title = "hint"
dead-link = "error"

[lsp.completion]
#note-label = "\\{{title-or-path}}"
#note-filter-text = "\\{{title}} \\{{path}}"
#note-detail = "\\{{filename-stem}}"

[filter]
# Named sets of filtering options, for instance:
#recents = "--sort created- --created-after 'last two weeks'"

[alias]
# Commands run through $SHELL -c, where $@ stands for the given arguments.
"""

DEFAULT_TEMPLATE = """# {{title}}

{{content}}
"""