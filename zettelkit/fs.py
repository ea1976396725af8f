"""File storage port and an in-memory implementation."""

from __future__ import annotations

import posixpath
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping


def _clean(path: str) -> str:
    """Lexically normalize a slash-separated path."""
    if not path:
        return "."
    cleaned = posixpath.normpath(path)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def _join(*elements: str) -> str:
    """Join non-empty path elements and normalize the result."""
    parts = [element for element in elements if element]
    if not parts:
        return ""
    return _clean("/".join(parts))


def _base(path: str) -> str:
    """Last element of a path; '.' for an empty path."""
    if not path:
        return "."
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    return stripped.rsplit("/", 1)[-1]


def _ext(path: str) -> str:
    """Extension of the last path element, including the dot."""
    name = path.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def _components(path: str) -> list[str]:
    return [part for part in path.split("/") if part and part != "."]


def _relative_path(base: str, target: str) -> str:
    """Lexical path to target relative to base.

    Raises ValueError when one path is absolute and the other is not, or when
    base climbs above the shared part of both paths.
    """
    base_clean, target_clean = _clean(base), _clean(target)
    if base_clean == target_clean:
        return "."
    if base_clean.startswith("/") != target_clean.startswith("/"):
        raise ValueError(f"can't make {target} relative to {base}")

    base_parts = _components(base_clean)
    target_parts = _components(target_clean)
    common = 0
    for base_part, target_part in zip(base_parts, target_parts):
        if base_part != target_part:
            break
        common += 1

    remaining = base_parts[common:]
    if ".." in remaining:
        raise ValueError(f"can't make {target} relative to {base}")
    return "/".join([".."] * len(remaining) + target_parts[common:]) or "."


class FileStorage(ABC):
    """Read and write access to a file storage."""

    @abstractmethod
    def working_dir(self) -> str:
        """Current working directory."""

    @abstractmethod
    def abs(self, path: str) -> str:
        """Make path absolute using the working directory."""

    @abstractmethod
    def rel(self, path: str) -> str:
        """Make an absolute path relative to the working directory."""

    @abstractmethod
    def canonical(self, path: str) -> str:
        """Canonical version of path, resolving symbolic links."""

    @abstractmethod
    def file_exists(self, path: str) -> bool:
        """Whether a file exists at path."""

    @abstractmethod
    def dir_exists(self, path: str) -> bool:
        """Whether a directory exists at path."""

    @abstractmethod
    def is_descendant_of(self, dir: str, path: str) -> bool:
        """Whether path is dir or one of its descendants."""

    @abstractmethod
    def read(self, path: str) -> bytes:
        """Content of the file at path."""

    @abstractmethod
    def write(self, path: str, content: bytes) -> None:
        """Create or overwrite the file at path, creating parent directories."""


class MemoryFileStorage(FileStorage):
    """File storage held entirely in memory."""

    def __init__(
        self,
        working_dir: str = "",
        dirs: Iterable[str] = (),
        files: Mapping[str, bytes] | None = None,
    ) -> None:
        self._working_dir = working_dir
        self.dirs: set[str] = {_clean(d) for d in dirs}
        self.files: dict[str, bytes] = dict(files or {})

    def working_dir(self) -> str:
        return self._working_dir

    def abs(self, path: str) -> str:
        if posixpath.isabs(path):
            return path
        return _clean(_join(self._working_dir or "/", path))

    def rel(self, path: str) -> str:
        return _relative_path(self._working_dir, path)

    def canonical(self, path: str) -> str:
        # There are no symbolic links in memory: only lexical clean-up applies.
        return _clean(path) if path else path

    def file_exists(self, path: str) -> bool:
        return path in self.files

    def dir_exists(self, path: str) -> bool:
        return _clean(path) in self.dirs

    def is_descendant_of(self, dir: str, path: str) -> bool:
        root = _clean(self.abs(dir))
        candidate = _clean(self.abs(path))
        return candidate == root or candidate.startswith(root.rstrip("/") + "/")

    def read(self, path: str) -> bytes:
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def write(self, path: str, content: bytes) -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.files[path] = content
        parent = posixpath.dirname(_clean(self.abs(path)))
        while parent and parent not in (".", "/"):
            self.dirs.add(parent)
            parent = posixpath.dirname(parent)