[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sparkctl"
version = "0.5.6"
description = "Wire protocol, local IPC socket and ssh/rsync hop routing for a spark machine-control daemon"
requires-python = ">=3.10"
dependencies = []
keywords = ["ipc", "unix-socket", "json-lines", "ssh", "rsync", "routing", "daemon"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
sparkctl-schema = "sparkctl.schema:main"

[tool.hatch.build.targets.wheel]
packages = ["sparkctl"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
strict = true
