[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "distkit"
version = "0.1.0"
description = "Small distributed-systems building blocks: a line-protocol key-value server, a squaring stream, and a nonce-mining work scheduler."
requires-python = ">=3.10"
keywords = ["key-value", "server", "mining", "scheduler", "distributed"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
distkit-kvserver = "distkit.kvserver:main"

[tool.hatch.build.targets.wheel]
packages = ["distkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
