[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nvm"
version = "0.1.0"
description = "A small 16-bit x86-style virtual machine that decodes and executes a subset of 8086 instructions"
requires-python = ">=3.10"
dependencies = []
keywords = ["emulator", "virtual-machine", "8086", "x86", "bytecode"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
nvm = "nvm.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["nvm"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
