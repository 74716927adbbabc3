[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "madcode"
version = "0.1.0"
description = "Typed instruction set with symbolic batch sizes and shape checking for batched phase-space computations"
requires-python = ">=3.10"
dependencies = []
keywords = ["physics", "phase space", "event generation", "instruction set", "type checking"]
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
    "Topic :: Scientific/Engineering :: Physics",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["madcode"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
