[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bimavault"
version = "0.1.0"
description = "In-memory model of a Bitcoin-backed stablecoin vault, UTXO storage and Convex/Curve staking deposit tokens"
requires-python = ">=3.10"
dependencies = []
keywords = ["bitcoin", "stablecoin", "vault", "utxo", "staking", "curve", "convex"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Office/Business :: Financial",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
bimavault = "bimavault.vault:main"

[tool.hatch.build.targets.wheel]
packages = ["bimavault"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
