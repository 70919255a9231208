[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "centralsearch"
version = "0.1.0"
description = "Client library for a Maven-style artifact search service: queries, paging, versions, tags, SHA-1 lookups, licences and security data."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "maven",
    "solr",
    "search",
    "artifacts",
    "dependencies",
    "licenses",
    "vulnerabilities",
    "rate-limit",
]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["centralsearch"]

[tool.hatch.build.targets.sdist]
include = ["centralsearch", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
