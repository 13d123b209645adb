[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dbbench"
version = "0.1.0"
description = "Building blocks for key-value database benchmarks: random test data, memory limits, sync-stage progress and in-process metrics"
requires-python = ">=3.10"
dependencies = [
    "psutil",
]
keywords = [
    "benchmark",
    "database",
    "key-value",
    "metrics",
    "prometheus",
    "mmap",
    "cgroups",
]
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
    "Topic :: System :: Benchmark",
    "Topic :: Database",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["dbbench"]

[tool.pytest.ini_options]
testpaths = ["tests"]
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
