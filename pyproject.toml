[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wastelandpatch"
version = "0.1.0"
description = "bsdiff-style binary patch creation and conversion, SA-IS suffix arrays, MD5 helpers and installer path prompts"
requires-python = ">=3.10"
dependencies = []
keywords = ["bsdiff", "binary-diff", "patch", "suffix-array", "sais", "md5", "bzip2", "lzma", "installer"]
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
    "Topic :: System :: Archiving :: Compression",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[tool.hatch.build.targets.wheel]
packages = ["wastelandpatch"]

[tool.hatch.build.targets.sdist]
include = [
    "wastelandpatch",
    "tests",
]

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
