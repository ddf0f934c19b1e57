[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "uciarena"
version = "0.1.0"
description = "UCI chess engine tooling: engine processes, option parsing, compliance checks, round-robin pairings and adjudication."
requires-python = ">=3.10"
dependencies = []
keywords = ["chess", "uci", "engine", "compliance", "tournament", "adjudication"]
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
    "Topic :: Games/Entertainment :: Board Games",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
uciarena = "uciarena.compliance:main"

[tool.hatch.build.targets.wheel]
packages = ["uciarena"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
