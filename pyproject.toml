[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vexpand"
version = "0.1.0"
description = "Streaming shell-style variable expansion for text streams and files"
requires-python = ">=3.10"
dependencies = []
keywords = ["envsubst", "environment", "variables", "templating", "substitution"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Filters",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["vexpand"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
