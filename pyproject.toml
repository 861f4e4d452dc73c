[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "balancebot"
version = "1.0.0"
description = "Control logic for a two-wheeled self-balancing robot: Kalman filtering, cascaded PID, a binary BLE message protocol, a stand-up servo sequence and a robot state machine"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "robotics",
    "balancing robot",
    "kalman filter",
    "pid",
    "ble",
    "state machine",
    "embedded",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["balancebot"]

[tool.hatch.build.targets.sdist]
include = ["balancebot", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
