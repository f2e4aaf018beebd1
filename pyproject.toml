[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "minikern"
version = "0.1.0"
description = "A small simulated i386 hobby kernel: libc routines, heap, VGA terminal, keyboard, interrupts and a command shell"
requires-python = ">=3.10"
dependencies = []
keywords = ["kernel", "emulator", "vga", "libc", "heap", "simulation"]
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
minikern = "minikern.kernel:main"

[tool.hatch.build.targets.wheel]
packages = ["minikern"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
