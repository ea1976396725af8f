import re
from typing import Any

import pytest

from zettelkit.config import ConfigError, new_default_config
from zettelkit.fs import MemoryFileStorage
from zettelkit.notebook import NotebookError
from zettelkit.notebook_store import (
    DEFAULT_CONFIG,
    DEFAULT_TEMPLATE,
    InitOpts,
    NotebookNotFoundError,
    NotebookStore,
)
from zettelkit.template import FunctionTemplate, Template, TemplateLoader


class RecordingLoader(TemplateLoader):
    def __init__(self) -> None:
        self.loaded: list[str] = []
        self.contexts: list[Any] = []

    def load_template(self, template: str) -> Template:
        self.loaded.append(template)

        def render(context: Any) -> str:
            self.contexts.append(context)
            if context.wiki_links:
                return '[format.markdown]\nlink-format = "wiki"\n'
            return "[format.markdown]\n"

        return FunctionTemplate(render)

    def load_template_at(self, path: str) -> Template:
        raise FileNotFoundError(path)


_IF_BLOCK = re.compile(
    r"\{\{#if (\w+)\}\}\n(.*?)\{\{else\}\}\n(.*?)\{\{/if\}\}\n", re.DOTALL
)
_OPTION_NAMES = {
    "WikiLinks": "wiki_links",
    "Hashtags": "hashtags",
    "ColonTags": "colon_tags",
    "MultiwordTags": "multiword_tags",
}


class ConditionalLoader(TemplateLoader):
    """Evaluates the if/else blocks of a template against the options."""

    def load_template(self, template: str) -> Template:
        def render(options: Any) -> str:
            return _IF_BLOCK.sub(
                lambda m: m.group(2)
                if getattr(options, _OPTION_NAMES[m.group(1)])
                else m.group(3),
                template,
            )

        return FunctionTemplate(render)

    def load_template_at(self, path: str) -> Template:
        raise FileNotFoundError(path)


class Factory:
    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    def __call__(self, path, config):
        self.calls.append((path, config))
        return object()


def make_store(fs, factory=None, loader=None, config=None):
    return NotebookStore(
        config=config or new_default_config(),
        notebook_factory=factory or Factory(),
        template_loader=loader or RecordingLoader(),
        fs=fs,
    )


def test_open_locates_notebook_in_parent_dir():
    fs = MemoryFileStorage("/", dirs=["/notebook/.zk", "/notebook/sub"])
    factory = Factory()
    store = make_store(fs, factory)
    store.open("/notebook/sub")
    assert [call[0] for call in factory.calls] == ["/notebook"]


def test_open_caches_notebooks():
    fs = MemoryFileStorage("/", dirs=["/notebook/.zk"])
    factory = Factory()
    store = make_store(fs, factory)
    first = store.open("/notebook")
    second = store.open("/notebook/sub/note.md")
    assert first is second
    assert len(factory.calls) == 1


def test_open_resolves_relative_path_with_working_dir():
    fs = MemoryFileStorage("/notebook", dirs=["/notebook/.zk"])
    factory = Factory()
    make_store(fs, factory).open("dir")
    assert factory.calls[0][0] == "/notebook"


def test_open_reads_local_config_without_changing_parent():
    parent = new_default_config()
    fs = MemoryFileStorage(
        "/",
        dirs=["/notebook/.zk"],
        files={"/notebook/.zk/config.toml": b'[note]\nextension = "txt"\n'},
    )
    factory = Factory()
    make_store(fs, factory, config=parent).open("/notebook")
    assert factory.calls[0][1].note.extension == "txt"
    assert parent.note.extension == "md"


def test_open_without_local_config_uses_parent():
    parent = new_default_config()
    fs = MemoryFileStorage("/", dirs=["/notebook/.zk"])
    factory = Factory()
    make_store(fs, factory, config=parent).open("/notebook")
    assert factory.calls[0][1] == parent


def test_open_rejects_notebook_dir_in_local_config():
    fs = MemoryFileStorage(
        "/",
        dirs=["/notebook/.zk"],
        files={"/notebook/.zk/config.toml": b'[notebook]\ndir = "/other"\n'},
    )
    with pytest.raises(ConfigError, match="notebook.dir should not be set on local configuration"):
        make_store(fs).open("/notebook")


def test_open_raises_when_no_notebook():
    fs = MemoryFileStorage("/", dirs=["/a/b"])
    with pytest.raises(NotebookNotFoundError) as info:
        make_store(fs).open("/a/b")
    assert str(info.value) == "no notebook found in /a/b or a parent directory"
    assert info.value.path == "/a/b"


def test_init_writes_config_and_default_template():
    fs = MemoryFileStorage("/", dirs=["/notebook"])
    factory = Factory()
    loader = RecordingLoader()
    store = make_store(fs, factory, loader)
    store.init("/notebook", InitOpts())

    assert loader.loaded == [DEFAULT_CONFIG]
    assert loader.contexts == [InitOpts(True, True, False, False)]
    assert fs.files["/notebook/.zk/config.toml"] == b'[format.markdown]\nlink-format = "wiki"\n'
    assert fs.files["/notebook/.zk/templates/default.md"] == DEFAULT_TEMPLATE.encode()
    assert DEFAULT_TEMPLATE == "# {{title}}\n\n{{content}}\n"


def test_init_opens_created_notebook_with_generated_config():
    fs = MemoryFileStorage("/", dirs=["/notebook"])
    factory = Factory()
    store = make_store(fs, factory)
    store.init("/notebook", InitOpts(wiki_links=True))

    path, config = factory.calls[0]
    assert path == "/notebook"
    assert config.format.markdown.link_format == "wiki"
    assert config.format.markdown.link_encode_path is False


def test_init_without_wiki_links_keeps_markdown_format():
    fs = MemoryFileStorage("/", dirs=["/notebook"])
    factory = Factory()
    loader = RecordingLoader()
    make_store(fs, factory, loader).init("/notebook", InitOpts(wiki_links=False))
    assert loader.contexts[0].wiki_links is False
    assert factory.calls[0][1].format.markdown.link_format == "markdown"


def test_init_fails_inside_existing_notebook():
    fs = MemoryFileStorage("/", dirs=["/notebook/.zk"])
    with pytest.raises(NotebookError, match="a notebook already exists in /notebook"):
        make_store(fs).init("/notebook/sub", InitOpts())
    assert "/notebook/sub/.zk/config.toml" not in fs.files


def test_init_default_config_follows_options():
    fs = MemoryFileStorage("/", dirs=["/notebook"])
    factory = Factory()
    store = make_store(fs, factory, ConditionalLoader())
    store.init(
        "/notebook",
        InitOpts(wiki_links=False, hashtags=False, colon_tags=True, multiword_tags=True),
    )

    written = fs.files["/notebook/.zk/config.toml"].decode()
    assert "{{#if" not in written
    markdown = factory.calls[0][1].format.markdown
    assert markdown.link_format == "markdown"
    assert markdown.hashtags is False
    assert markdown.colon_tags is True
    assert markdown.multiword_tags is True


def test_init_default_config_with_default_options():
    fs = MemoryFileStorage("/", dirs=["/notebook"])
    factory = Factory()
    make_store(fs, factory, ConditionalLoader()).init("/notebook", InitOpts())

    markdown = factory.calls[0][1].format.markdown
    assert markdown.link_format == "wiki"
    assert markdown.link_encode_path is False
    assert markdown.hashtags is True
    assert markdown.colon_tags is False
    assert markdown.multiword_tags is False