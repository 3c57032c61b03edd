[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "stowage"
version = "0.1.0"
description = "Local directory storage as containers and items, with helpers for cloud object store conventions."
requires-python = ">=3.10"
dependencies = []
keywords = ["storage", "object-storage", "filesystem", "cloud", "blob"]
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
    "Topic :: System :: Filesystems",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["stowage"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
