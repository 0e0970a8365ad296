[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "layercache"
version = "0.1.0"
description = "Layered caching with pluggable stores, chained caches, usage statistics, gauge metrics and msgpack marshaling"
requires-python = ">=3.10"
dependencies = [
    "msgpack",
]
keywords = ["cache", "caching", "chain", "metrics", "msgpack", "tags", "invalidation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["layercache"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
