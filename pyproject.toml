[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tsmfile"
version = "0.1.0"
description = "Block codecs and a reader for time-structured merge (TSM) time-series files"
requires-python = ">=3.10"
dependencies = []
keywords = ["tsm", "time-series", "simple8b", "gorilla", "snappy", "compression", "database"]
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
    "Topic :: Database :: Database Engines/Servers",
    "Topic :: System :: Archiving :: Compression",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tsmfile"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
