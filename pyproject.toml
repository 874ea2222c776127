[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "scry"
version = "0.1.0"
description = "Local-first codebase memory engine: index, search and ask questions about a repository"
requires-python = ">=3.10"
keywords = ["search", "index", "codebase", "retrieval", "cli", "sqlite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: Text Processing :: Indexing",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
scry = "scry.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["scry"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
