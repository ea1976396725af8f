from datetime import datetime, timezone

import pytest

from zettelkit.config import MarkdownConfig
from zettelkit.fs import MemoryFileStorage
from zettelkit.link_format import new_link_formatter
from zettelkit.note import ContextualNote
from zettelkit.note_format import NoteFormatRenderContext, new_note_formatter
from zettelkit.style import Styler
from zettelkit.template import NULL_TEMPLATE_LOADER, Template


class StylerMock(Styler):
    def style(self, text, *args):
        for rule in args:
            text = f"{rule}({text})"
        return text


class TemplateSpy(Template):
    def __init__(self, result):
        self.result = result
        self.contexts = []

    def styler(self):
        return StylerMock()

    def render(self, context):
        self.contexts.append(context)
        return self.result


def make_formatter(root_dir="/notebook", working_dir=None, link_formatter=None):
    template = TemplateSpy("format")
    fs = MemoryFileStorage(working_dir or root_dir)
    if link_formatter is None:
        link_formatter = new_link_formatter(MarkdownConfig(), NULL_TEMPLATE_LOADER)
    formatter = new_note_formatter(root_dir, template, link_formatter, {}, fs)
    return formatter, template


def test_new_note_formatter():
    date1 = datetime(2009, 1, 17, 20, 34, 58, 651387, tzinfo=timezone.utc)
    date2 = datetime(2009, 2, 17, 20, 34, 58, 651387, tzinfo=timezone.utc)
    date3 = datetime(2009, 3, 17, 20, 34, 58, 651387, tzinfo=timezone.utc)
    date4 = datetime(2009, 4, 17, 20, 34, 58, 651387, tzinfo=timezone.utc)
    formatter, template = make_formatter()

    res = formatter(
        ContextualNote(
            id=1,
            path="note1.md",
            title="Note 1",
            lead="Lead 1",
            body="Body 1",
            raw_content="Content 1",
            word_count=1,
            tags=["tag1", "tag2"],
            metadata={"metadata1": "val1", "metadata2": "val2"},
            created=date1,
            modified=date2,
            checksum="checksum1",
            snippets=["snippet1", "snippet2"],
        )
    )
    assert res == "format"

    res = formatter(
        ContextualNote(
            id=2,
            path="dir/note2.md",
            title="Note 2",
            lead="Lead 2",
            body="Body 2",
            raw_content="Content 2",
            word_count=2,
            tags=[],
            metadata={},
            created=date3,
            modified=date4,
            checksum="checksum2",
            snippets=[],
        )
    )
    assert res == "format"

    assert template.contexts == [
        NoteFormatRenderContext(
            filename="note1.md",
            filename_stem="note1",
            path="note1.md",
            abs_path="/notebook/note1.md",
            title="Note 1",
            link="[Note 1](note1)",
            lead="Lead 1",
            body="Body 1",
            snippets=["snippet1", "snippet2"],
            raw_content="Content 1",
            word_count=1,
            tags=["tag1", "tag2"],
            metadata={"metadata1": "val1", "metadata2": "val2"},
            created=date1,
            modified=date2,
            checksum="checksum1",
        ),
        NoteFormatRenderContext(
            filename="note2.md",
            filename_stem="note2",
            path="dir/note2.md",
            abs_path="/notebook/dir/note2.md",
            title="Note 2",
            link="[Note 2](dir/note2)",
            lead="Lead 2",
            body="Body 2",
            snippets=[],
            raw_content="Content 2",
            word_count=2,
            tags=[],
            metadata={},
            created=date3,
            modified=date4,
            checksum="checksum2",
        ),
    ]


@pytest.mark.parametrize(
    "base_path, current_path, path, expected, expected_full, filename, stem, link",
    [
        ("", "", "note.md", "note.md", "/notebook/note.md", "note.md", "note", "[](note)"),
        ("", "", "dir/note.md", "dir/note.md", "/notebook/dir/note.md", "note.md", "note", "[](dir/note)"),
        ("/abs/zk", "/abs/zk", "note.md", "note.md", "/abs/zk/note.md", "note.md", "note", "[](note)"),
        ("/abs/zk", "/abs/zk", "dir/note.md", "dir/note.md", "/abs/zk/dir/note.md", "note.md", "note", "[](dir/note)"),
        ("/abs/zk", "/abs/zk/dir", "note.md", "../note.md", "/abs/zk/note.md", "note.md", "note", "[](../note)"),
        ("/abs/zk", "/abs/zk/dir", "dir/note.md", "note.md", "/abs/zk/dir/note.md", "note.md", "note", "[](note)"),
        ("/abs/zk", "/abs", "note.md", "zk/note.md", "/abs/zk/note.md", "note.md", "note", "[](zk/note)"),
        ("/abs/zk", "/abs", "dir/note.md", "zk/dir/note.md", "/abs/zk/dir/note.md", "note.md", "note", "[](zk/dir/note)"),
    ],
)
def test_note_formatter_makes_path_relative(
    base_path, current_path, path, expected, expected_full, filename, stem, link
):
    root = base_path or "/notebook"
    formatter, template = make_formatter(root, current_path or root)
    formatter(ContextualNote(path=path))
    assert template.contexts == [
        NoteFormatRenderContext(
            filename=filename,
            filename_stem=stem,
            path=expected,
            abs_path=expected_full,
            link=link,
            snippets=[],
        )
    ]


@pytest.mark.parametrize(
    "snippet, expected",
    [
        ("Hello world!", "Hello world!"),
        ("Hello <zk:match>world</zk:match>!", "Hello term(world)!"),
        (
            "Hello <zk:match>world</zk:match> with <zk:match>several matches</zk:match>!",
            "Hello term(world) with term(several matches)!",
        ),
        (
            "Hello <zk:match>world</zk:match> with <zk:match>several<zk:match> matches</zk:match>!",
            "Hello term(world) with term(several<zk:match> matches)!",
        ),
    ],
)
def test_note_formatter_styles_snippet_term(snippet, expected):
    formatter, template = make_formatter()
    formatter(ContextualNote(snippets=[snippet]))
    assert template.contexts == [
        NoteFormatRenderContext(
            filename=".",
            filename_stem=".",
            path=".",
            abs_path="/notebook",
            link="[]()",
            snippets=[expected],
        )
    ]


def test_link_is_rendered_lazily_once():
    calls = []

    def link_formatter(context):
        calls.append(context.path)
        return "link:" + context.path

    formatter, template = make_formatter(link_formatter=link_formatter)
    formatter(ContextualNote(path="a.md"))
    assert calls == []
    link = template.contexts[0].link
    assert str(link) == "link:a.md"
    assert str(link) == "link:a.md"
    assert calls == ["a.md"]


def test_link_formatter_error_renders_empty_link():
    def failing(context):
        raise RuntimeError("boom")

    formatter, template = make_formatter(link_formatter=failing)
    formatter(ContextualNote(path="a.md"))
    assert str(template.contexts[0].link) == ""


def test_env_is_passed_to_template():
    template = TemplateSpy("out")
    fs = MemoryFileStorage("/notebook")
    link_formatter = new_link_formatter(MarkdownConfig(), NULL_TEMPLATE_LOADER)
    formatter = new_note_formatter("/notebook", template, link_formatter, {"KEY": "foo"}, fs)
    assert formatter(ContextualNote(path="a.md")) == "out"
    assert template.contexts[0].env == {"KEY": "foo"}