import pytest

from zettelkit.link import Link
from zettelkit.note import (
    ContextualNote,
    MinimalNote,
    Note,
    NotebookPath,
    drop_ext,
    filename_stem,
)


def test_note_filename_and_stem():
    note = Note(path="dir/note2.md")
    assert note.filename() == "note2.md"
    assert note.filename_stem() == "note2"


def test_empty_path_filename_and_stem():
    note = Note(path="")
    assert note.filename() == "."
    assert note.filename_stem() == "."


def test_drop_ext():
    assert drop_ext("path/to note.md") == "path/to note"
    assert drop_ext("") == ""
    assert drop_ext("dir/note.md") + ".md" == "dir/note.md"


def test_filename_stem_function_matches_method():
    for path in ["note1.md", "dir/note2.md", "path/to note.md"]:
        assert filename_stem(path) == Note(path=path).filename_stem()


def test_as_minimal_note():
    note = Note(
        id=1,
        path="note1.md",
        title="Note 1",
        body="Body 1",
        metadata={"metadata1": "val1"},
        links=[Link(href="other.md")],
    )
    assert note.as_minimal_note() == MinimalNote(
        id=1, path="note1.md", title="Note 1", metadata={"metadata1": "val1"}
    )


def test_contextual_note_is_a_note():
    note = ContextualNote(path="dir/note2.md", title="Note 2", snippets=["snippet1"])
    assert isinstance(note, Note)
    assert note.filename() == "note2.md"
    assert note.as_minimal_note().title == "Note 2"
    assert note.snippets == ["snippet1"]


@pytest.mark.parametrize(
    ("base_path", "working_dir", "path", "expected", "expected_abs"),
    [
        ("/abs/zk", "/abs/zk", "note.md", "note.md", "/abs/zk/note.md"),
        ("/abs/zk", "/abs/zk", "dir/note.md", "dir/note.md", "/abs/zk/dir/note.md"),
        ("/abs/zk", "/abs/zk/dir", "note.md", "../note.md", "/abs/zk/note.md"),
        ("/abs/zk", "/abs/zk/dir", "dir/note.md", "note.md", "/abs/zk/dir/note.md"),
        ("/abs/zk", "/abs", "note.md", "zk/note.md", "/abs/zk/note.md"),
        ("/abs/zk", "/abs", "dir/note.md", "zk/dir/note.md", "/abs/zk/dir/note.md"),
    ],
)
def test_notebook_path_relative_to_working_dir(base_path, working_dir, path, expected, expected_abs):
    notebook_path = NotebookPath(path=path, base_path=base_path, working_dir=working_dir)
    assert notebook_path.path_rel_to_working_dir() == expected
    assert notebook_path.abs_path() == expected_abs


def test_notebook_path_without_working_dir_returns_path():
    assert NotebookPath(path="dir/note.md", base_path="/notebook").path_rel_to_working_dir() == "dir/note.md"


def test_notebook_path_of_root():
    root = NotebookPath(path="", base_path="/notebook", working_dir="/notebook")
    assert root.abs_path() == "/notebook"
    assert root.filename() == "."
    assert root.path_rel_to_working_dir() == "."


def test_notebook_path_mixing_relative_and_absolute_raises():
    notebook_path = NotebookPath(path="note.md", base_path="relative", working_dir="/abs")
    with pytest.raises(ValueError):
        notebook_path.path_rel_to_working_dir()