[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cminus"
version = "0.1.0"
description = "Scanner, symbol tables and semantic analysis for the C-Minus teaching language, with a TM instruction emitter and TM machine simulator"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "compiler",
    "c-minus",
    "scanner",
    "symbol-table",
    "semantic-analysis",
    "type-checking",
    "tiny-machine",
    "simulator",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
cminus-tm = "cminus.tm:main"
cminus-diff = "cminus.diffcheck:main"

[tool.hatch.build.targets.wheel]
packages = ["cminus"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
