[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "corelog"
version = "0.1.0"
description = "Structured logging building blocks: levels, write syncers, in-memory encoders, tees, samplers, observers and adapters."
requires-python = ">=3.11"
dependencies = []
keywords = ["logging", "structured-logging", "sampling", "observer", "testing"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: System :: Logging",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["corelog"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
