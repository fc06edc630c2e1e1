[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "salesanalytics"
version = "0.1.0"
description = "HTTP service that loads sales records from CSV into MongoDB and reports revenue analytics"
requires-python = ">=3.10"
keywords = ["sales", "analytics", "revenue", "mongodb", "flask", "csv"]
classifiers = [
    "Development Status :: 3 - Alpha",
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
    "flask>=2.2",
    "pymongo>=4.0",
    "pyyaml>=6.0",
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
salesanalytics = "salesanalytics.app:main"

[tool.hatch.build.targets.wheel]
packages = ["salesanalytics"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
