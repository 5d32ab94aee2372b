[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "winestro"
version = "0.1.0"
description = "Client for the Winestro wine shop XML API: fetch products and customer groups."
requires-python = ">=3.10"
keywords = ["winestro", "wine", "webshop", "api", "xml", "client"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: Office/Business",
]
dependencies = [
    "requests>=2.28",
]

[project.optional-dependencies]
test = [
    "pytest>=7",
    "responses>=0.23",
]

[tool.hatch.build.targets.wheel]
packages = ["winestro"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
