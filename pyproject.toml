[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lokisearch"
version = "0.0.1"
description = "Pulsar search building blocks: brute-force folding, search configuration, Taylor-parameter utilities and boxcar/matched-filter scoring"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["pulsar", "astronomy", "folding", "signal-processing", "matched-filter", "chebyshev"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Astronomy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["lokisearch"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
