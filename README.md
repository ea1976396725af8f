# zettelkit

The core model of a plain-text Markdown notebook (a "zettelkasten"). It covers:

- the TOML configuration of a notebook, including note groups, named filters,
  command aliases, tool settings and LSP settings (`zettelkit.config`);
- notes, notebook paths, links and collections such as tags
  (`zettelkit.note`, `zettelkit.link`, `zettelkit.collection`);
- sort terms and match strategies used to find notes (`zettelkit.note_find`);
- links to notes in Markdown, wiki or custom-template form
  (`zettelkit.link_format`), and note formatting for display
  (`zettelkit.note_format`);
- creating new notes from filename and body templates, retrying with fresh
  IDs until a free filename is found (`zettelkit.note_new`,
  `zettelkit.notebook`);
- locating the notebook that contains a path, and creating a new notebook
  with a default configuration and template (`zettelkit.notebook_store`).

The package needs Python 3.11 or later and has no runtime dependencies.

## Installation

```
pip install .
```

## Interfaces you provide

Storage, templating, indexing, content parsing and ID generation are reached
through small interfaces:

- `zettelkit.fs.FileStorage`: working directory, path resolution, existence
  checks, reading and writing. `MemoryFileStorage(working_dir, dirs, files)`
  is an in-memory implementation.
- `zettelkit.template.TemplateLoader`: `load_template(template)` and
  `load_template_at(path)` return `Template` objects whose `render(context)`
  produces a string. `FunctionTemplate`, `NullTemplate` and
  `NullTemplateLoader` are included.
- `zettelkit.notebook.NoteIndex`: finding, adding, updating and removing
  indexed notes.
- `zettelkit.note_parse.NoteContentParser`: splits raw note content into a
  `NoteContent` (title, lead, body, tags, links, metadata).
- An ID generator factory: a callable taking `zettelkit.ids.IDOptions` and
  returning a callable that yields a new ID on each call.

These are wired into a `Notebook` through `NotebookPorts`.

## Examples

Parse a configuration:

```python
from zettelkit.config import new_default_config, parse_config

config = parse_config(
    b'[note]\nlanguage = "fr"\n[format.markdown]\nlink-format = "wiki"\n',
    ".zk/config.toml",
    new_default_config(),
    False,
)
assert config.note.lang == "fr"
assert config.format.markdown.link_encode_path is False
```

Invalid content raises `ConfigError`. So does setting `notebook.dir` in a
configuration that is not global.

Parse sort terms. A `+` suffix gives ascending order and a `-` suffix gives
descending order. The terms are read from last to first, so a later term
overrides an earlier one:

```python
from zettelkit.note_find import note_sorters_from_strings

sorters = note_sorters_from_strings(["created+", "title"])
```

Format a link to a note:

```python
from zettelkit.config import MarkdownConfig
from zettelkit.link_format import LinkFormatterContext, new_link_formatter
from zettelkit.template import NullTemplateLoader

fmt = new_link_formatter(
    MarkdownConfig(link_format="markdown", link_encode_path=True, link_drop_extension=True),
    NullTemplateLoader(),
)
fmt(LinkFormatterContext(rel_path="path/to note.md", title="A subject"))
# '[A subject](path/to%20note)'
```

## Errors

- `ConfigError`: an unreadable or invalid configuration, or an unknown group
  name.
- `NotebookError`: a path outside the notebook, a missing directory, or an
  attempt to create a notebook inside an existing one.
- `NoteExistsError`: no free filename was found after 50 attempts.
- `NotebookNotFoundError`: no notebook contains the given path.

## What the package does not do

- It has no template engine. `NotebookStore.init` renders its default
  configuration with the `TemplateLoader` you give it, so that loader must
  understand the `{{#if …}}` blocks in that template.
- It has no note index or search storage, and it does not walk a notebook
  to index its files. `Notebook` queries go to the `NoteIndex` you provide.
- It does not parse Markdown. Note content is split by the
  `NoteContentParser` you provide.
- It does not generate random IDs. It only describes them with `IDOptions`.
- It provides no command-line interface and no language server.

## Running the tests

```
pip install .[test]
pytest
```