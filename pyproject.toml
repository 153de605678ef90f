[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "unifiedlog_chunks"
version = "0.1.0"
description = "Parsers for firehose entries of Apple unified log tracev3 files and resolution of their format strings"
requires-python = ">=3.10"
dependencies = []
keywords = ["macos", "unified log", "tracev3", "firehose", "forensics"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Information Technology",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Logging",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["unifiedlog_chunks"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
