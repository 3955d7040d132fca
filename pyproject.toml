[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ttrbot"
version = "0.1.0"
description = "Decision-making engine for a Ticket to Ride playing bot: game state, rules, path planning and move strategy."
requires-python = ">=3.10"
dependencies = []
keywords = ["ticket to ride", "board game", "bot", "strategy", "pathfinding"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment :: Board Games",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ttrbot"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
