[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "teamkit"
version = "0.1.0"
description = "Team-parallel utilities: workspace slot management, team policies, reductions and array views"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["workspace", "team policy", "reduction", "subview", "hpc"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
teamkit-hello = "teamkit.hello:main"

[tool.hatch.build.targets.wheel]
packages = ["teamkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
