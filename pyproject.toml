[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "blust"
version = "0.0.1"
description = "Row-major float32 tensors with shareable storage, CPU tensor operations, learning-rate decay schedules and SGD."
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["tensor", "deep-learning", "sgd", "learning-rate", "matrix-multiplication", "benchmark"]
classifiers = [
    "Development Status :: 2 - Pre-Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
blust-bench = "blust.bench:main"

[tool.hatch.build.targets.wheel]
packages = ["blust"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
