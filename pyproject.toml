[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zettelkit"
version = "0.1.0"
description = "Core model of a plain-text Markdown notebook: configuration, notes, links, sorting and formatting."
requires-python = ">=3.11"
dependencies = []
keywords = ["zettelkasten", "notes", "markdown", "notebook", "wiki-links", "toml"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Markup :: Markdown",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["zettelkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
