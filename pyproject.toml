[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "qqbotplug"
version = "0.1.0"
description = "Chat-bot plugin logic: group reminders, group management helpers, MIDI ear training, holiday countdowns, image and web lookups"
requires-python = ">=3.10"
keywords = ["chatbot", "qq", "plugins", "reminders", "cron", "midi", "group-management"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Natural Language :: Chinese (Simplified)",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
]
dependencies = [
    "requests",
    "mido",
    "pillow",
    "lxml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["qqbotplug"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
