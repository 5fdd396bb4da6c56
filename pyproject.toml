[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kidneykernel"
version = "0.1.0"
description = "Simulated kernel components: frame, buddy and subblock allocators, VMAs, process tables, a FIFO scheduler, locks, a system clock and a tiny shell"
requires-python = ">=3.10"
dependencies = []
keywords = ["kernel", "allocator", "buddy-allocator", "scheduler", "operating-systems", "education"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System Kernels",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rush = "kidneykernel.shell:main"

[tool.hatch.build.targets.wheel]
packages = ["kidneykernel"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
