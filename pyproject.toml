[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "apiservice"
version = "0.1.0"
description = "A small HTTP API microservice with public and internal servers, YAML configuration, JSON logging and a layered data access layer."
requires-python = ">=3.10"
keywords = ["api", "microservice", "http", "flask", "yaml", "wsgi", "service"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "flask",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
apiservice = "apiservice.bootstrap:main"

[tool.hatch.build.targets.wheel]
packages = ["apiservice"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
