[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pcbmill"
version = "0.1.0"
description = "Gerber geometry rendering, outline bridges and G-code moves for milling printed circuit boards"
requires-python = ">=3.10"
dependencies = [
    "shapely",
]
keywords = ["pcb", "gerber", "gcode", "cnc", "milling", "isolation routing"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Manufacturing",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Electronic Design Automation (EDA)",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["pcbmill"]

[tool.hatch.build.targets.sdist]
include = [
    "pcbmill",
    "tests",
    "pyproject.toml",
]

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
ignore_missing_imports = true
