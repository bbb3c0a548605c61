[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "typedb"
version = "0.1.0"
description = "Typed model mapping over plain SQL: turn rows into dataclass models, load them by key, and build UPDATE statements."
requires-python = ">=3.10"
dependencies = []
keywords = ["sql", "database", "models", "dataclasses", "query", "mapping"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Front-Ends",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["typedb"]

[tool.hatch.build.targets.sdist]
include = ["typedb", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
