"""Core model of a plain-text Markdown notebook: configuration, notes, links, sorting and formatting."""

__version__ = "0.1.0"