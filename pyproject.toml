[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ghmodels"
version = "0.1.0"
description = "Command-line tool to list, inspect and chat with hosted AI models"
requires-python = ">=3.10"
keywords = ["ai", "llm", "chat", "models", "cli", "inference", "prompt"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]
dependencies = [
    "requests",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
gh-models = "ghmodels.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["ghmodels"]

[tool.pytest.ini_options]
addopts = "-ra"
