[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rmdb"
version = "0.1.0"
description = "Storage, catalog metadata and transaction layers of a small relational database engine"
requires-python = ">=3.10"
dependencies = []
keywords = ["database", "buffer-pool", "storage-engine", "transactions", "two-phase-locking"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rmdb"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
