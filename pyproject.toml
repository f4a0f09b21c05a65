[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cardgame"
version = "0.1.0"
description = "WebSocket server for two-player card games with rooms, spectators and card-set loading"
requires-python = ">=3.10"
dependencies = [
    "aiohttp",
]
keywords = ["card game", "websocket", "game server", "multiplayer", "rooms"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: AsyncIO",
    "Framework :: aiohttp",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Board Games",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
cardgame-server = "cardgame.server:main"

[tool.hatch.build.targets.wheel]
packages = ["cardgame"]

[tool.hatch.build.targets.sdist]
include = ["cardgame", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
