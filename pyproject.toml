[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "appimage_helpers"
version = "0.1.0"
description = "Helpers for preparing AppDirs, inspecting ELF files and publishing AppImage updates"
requires-python = ">=3.10"
keywords = ["appimage", "appdir", "elf", "desktop-file", "zsync", "packaging"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Archiving :: Packaging",
]
dependencies = [
    "cryptography",
    "requests",
    "paho-mqtt",
    "packaging",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["appimage_helpers"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
