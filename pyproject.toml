[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mssqltypes"
version = "0.1.0"
description = "Encoding and decoding of SQL Server TDS data types: type info, temporal values, money, decimals and uniqueidentifiers"
requires-python = ">=3.10"
dependencies = []
keywords = ["mssql", "sql-server", "tds", "database", "types", "protocol"]
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
    "Topic :: Database",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mssqltypes"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
