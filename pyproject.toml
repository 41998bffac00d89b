[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tripsplit"
version = "0.2.2"
description = "Shared travel expense tracking for group chats: travelers, expenses, shares, transfers and simplified debts."
requires-python = ">=3.10"
dependencies = []
keywords = ["travel", "expenses", "split", "debts", "chat", "i18n"]
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
    "Topic :: Communications :: Chat",
    "Topic :: Office/Business :: Financial",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tripsplit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
