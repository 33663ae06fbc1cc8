[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ropepull"
version = "0.1.0"
description = "A multi-process tug-of-war simulation: a referee, eight players and a live scoreboard window"
requires-python = ">=3.10"
keywords = ["simulation", "game", "tug-of-war", "multiprocessing", "fifo", "signals"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Environment :: X11 Applications",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Simulation",
]
dependencies = [
    "pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
ropepull-referee = "ropepull.referee:main"
ropepull-player = "ropepull.player:main"
ropepull-display = "ropepull.display:main"

[tool.hatch.build.targets.wheel]
packages = ["ropepull"]

[tool.pytest.ini_options]
addopts = "-ra"
