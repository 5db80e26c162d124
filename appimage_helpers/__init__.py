"""Helpers for preparing AppDirs, inspecting ELF files and publishing AppImage updates."""

__version__ = "0.1.0"