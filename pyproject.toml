[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tome"
version = "0.1.0"
description = "Offline wikitext-to-HTML rendering with link resolution, a webview navigation guard and ranged pmtiles serving."
requires-python = ">=3.10"
dependencies = []
keywords = ["wikitext", "wikipedia", "html", "renderer", "pmtiles", "http-range"]
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
    "Topic :: Text Processing :: Markup :: HTML",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tome"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
