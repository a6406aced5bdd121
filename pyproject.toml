[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sysmond"
version = "0.1.0"
description = "Linux system statistics collectors with a per-second in-memory store, windowed averages and a streaming stats service"
requires-python = ">=3.10"
dependencies = []
keywords = ["monitoring", "cpu", "load-average", "diskstats", "procfs", "df"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sysmond"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
