[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fluxreweight"
version = "0.1.0"
description = "Hadron-production reweighting of simulated accelerator neutrino fluxes"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "neutrino",
    "flux",
    "reweighting",
    "hadron production",
    "systematic uncertainties",
    "physics",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["fluxreweight"]

[tool.hatch.build.targets.sdist]
include = [
    "fluxreweight",
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
warn_redundant_casts = true
