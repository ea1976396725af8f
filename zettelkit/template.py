"""Templates, template loaders and lazily rendered strings."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from zettelkit.style import NULL_STYLER, Styler


class Template(ABC):
    """Produces a string from a given context."""

    def styler(self) -> Styler:
        """Styler used to format the template content."""
        return NULL_STYLER

    @abstractmethod
    def render(self, context: Any) -> str:
        """Render this template with the given variables."""


class FunctionTemplate(Template):
    """Uses a plain function as a template."""

    def __init__(self, function: Callable[[Any], str]) -> None:
        self._function = function

    def styler(self) -> Styler:
        return NULL_STYLER

    def render(self, context: Any) -> str:
        return self._function(context)


class NullTemplate(Template):
    """Template always rendering an empty string."""

    def styler(self) -> Styler:
        return NULL_STYLER

    def render(self, context: Any) -> str:
        return ""


NULL_TEMPLATE = NullTemplate()


class TemplateLoader(ABC):
    """Parses template strings or files into templates."""

    @abstractmethod
    def load_template(self, template: str) -> Template:
        """Create a template from a template string."""

    @abstractmethod
    def load_template_at(self, path: str) -> Template:
        """Create a template from the file at path, possibly relative to template dirs."""


def _require_text(value: object, name: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a string, not {type(value).__name__}")
    return value


class NullTemplateLoader(TemplateLoader):
    """Loader always returning the null template."""

    def load_template(self, template: str) -> Template:
        _require_text(template, "template")
        return NULL_TEMPLATE

    def load_template_at(self, path: str) -> Template:
        _require_text(path, "path")
        return NULL_TEMPLATE


NULL_TEMPLATE_LOADER = NullTemplateLoader()

TemplateLoaderFactory = Callable[[str], TemplateLoader]


class LazyString:
    """String computed on first use and cached afterwards."""

    __slots__ = ("_render", "_value")

    def __init__(self, render: Callable[[], str]) -> None:
        self._render = render
        self._value: str | None = None

    def __str__(self) -> str:
        if self._value is None:
            self._value = self._render()
        return self._value

    def __repr__(self) -> str:
        return f"LazyString({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (LazyString, str)):
            return str(self) == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(str(self))

    def to_json(self) -> str:
        """JSON string literal of the value."""
        return json.dumps(str(self), ensure_ascii=False)