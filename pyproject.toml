[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "blockfall"
version = "0.1.0"
description = "A falling-block puzzle game with NES-style gravity, line-clear animation and rebindable controls"
requires-python = ">=3.10"
keywords = ["game", "puzzle", "falling blocks", "pygame"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Puzzle Games",
]
dependencies = [
    "pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
blockfall = "blockfall.app:main"

[tool.hatch.build.targets.wheel]
packages = ["blockfall"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
