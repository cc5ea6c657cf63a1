[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "canaryreview"
version = "0.1.0"
description = "Building blocks for an LLM-assisted pull request reviewer: diff triage, evaluation prompts, review state, usage tracking and setup helpers."
requires-python = ">=3.10"
dependencies = [
    "ruamel.yaml",
]
keywords = [
    "code-review",
    "pull-request",
    "llm",
    "diff",
    "triage",
    "github-actions",
]
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
    "Topic :: Software Development :: Quality Assurance",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["canaryreview"]

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
