"""Reading and checking freedesktop.org desktop entry files."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .tools import log_error

_log = logging.getLogger(__name__)

DESKTOP_ENTRY = "Desktop Entry"

# Records where the AppImage itself lives, since Exec= may be rewritten to wrap it.
EXEC_LOCATION_KEY = "X-ExecLocation"

# Holds the update information string, so AppImages sharing it can be found quickly.
UPDATE_INFORMATION_KEY = "X-AppImage-UpdateInformation"

_REQUIRED_KEYS = ("Categories", "Name", "Exec", "Type", "Icon")
_ICON_SUFFIXES = (".png", ".svg", ".svgz", ".xpm")


class DesktopFileError(ValueError):
    """Raised when a desktop file cannot be parsed or lacks what is required."""


def load_desktop_file(path: str | os.PathLike) -> dict[str, dict[str, str]]:
    """Parse the desktop file at *path* into a mapping of section name to keys.

    Keys are case-sensitive, ``;`` inside values is kept, and a later key
    overrides an earlier one. Keys before any section go to the ``""`` section.
    """
    text = Path(path).read_text(encoding="utf-8")
    if text.startswith("\ufeff"):
        text = text[1:]
    sections: dict[str, dict[str, str]] = {}
    current = sections.setdefault("", {})
    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith(("#", ";")):
            continue
        if line.startswith("["):
            end = line.find("]")
            if end < 0:
                raise DesktopFileError(f"unclosed section on line {number}: {line}")
            current = sections.setdefault(line[1:end].strip(), {})
            continue
        key, sep, value = line.partition("=")
        if not sep:
            raise DesktopFileError(f"key-value delimiter not found on line {number}: {line}")
        current[key.strip()] = value.strip()
    return sections


def check_desktop_file(path: str | os.PathLike) -> None:
    """Raise DesktopFileError unless the desktop file has the keys an AppImage needs.

    The Icon= entry must be a bare name, without a path or a file suffix.
    """
    entry = load_desktop_file(path).get(DESKTOP_ENTRY, {})
    for key in _REQUIRED_KEYS:
        if key not in entry:
            raise DesktopFileError(f".desktop file is missing a '{key}'= key")

    icon_name = entry["Icon"]
    if "/" in icon_name:
        raise DesktopFileError("Desktop file contains Icon= entry with a path")
    if icon_name.endswith(_ICON_SUFFIXES):
        raise DesktopFileError(
            "Desktop file contains Icon= entry with a suffix, please remove the suffix"
        )


def check_if_exec_file_exists(path: str | os.PathLike) -> bool:
    """Return True if the desktop file exists and its X-ExecLocation target exists."""
    if not os.path.exists(path):
        return False
    try:
        entry = load_desktop_file(path).get(DESKTOP_ENTRY, {})
    except (OSError, UnicodeDecodeError, DesktopFileError) as exc:
        log_error("desktop", exc)
        return False
    target = entry.get(EXEC_LOCATION_KEY, "")
    if not target or not os.path.exists(target):
        _log.info("%s does not exist, it is mentioned in %s", target, path)
        return False
    return True


def xdg_data_home() -> str:
    """Return $XDG_DATA_HOME, or ~/.local/share when it is unset or empty."""
    configured = os.environ.get("XDG_DATA_HOME", "")
    if configured:
        return configured
    return os.path.join(os.path.expanduser("~"), ".local", "share")


def _applications_dir(applications_dir: str | os.PathLike | None) -> str:
    if applications_dir is None:
        return os.path.join(xdg_data_home(), "applications")
    return os.fspath(applications_dir)


def _desktop_files(directory: str) -> list[str]:
    try:
        names = sorted(os.listdir(directory))
    except OSError as exc:
        log_error("desktop", exc)
        return []
    return [name for name in names if name.endswith(".desktop")]


def delete_desktop_files_with_non_existing_targets(
    applications_dir: str | os.PathLike | None = None,
) -> list[str]:
    """Delete appimagekit_*.desktop files whose X-ExecLocation target is gone.

    Returns the paths that were deleted.
    """
    directory = _applications_dir(applications_dir)
    deleted = []
    for name in _desktop_files(directory):
        if not name.startswith("appimagekit_"):
            continue
        path = os.path.join(directory, name)
        if check_if_exec_file_exists(path):
            continue
        _log.info("Deleting %s", path)
        try:
            os.remove(path)
        except OSError as exc:
            log_error("desktop", exc)
            continue
        deleted.append(path)
    return deleted


def get_values_for_all_desktop_files(
    key: str, applications_dir: str | os.PathLike | None = None
) -> list[str]:
    """Return the non-empty values of *key* in [Desktop Entry] of every live desktop file."""
    directory = _applications_dir(applications_dir)
    results = []
    for name in _desktop_files(directory):
        path = os.path.join(directory, name)
        if not check_if_exec_file_exists(path):
            continue
        try:
            entry = load_desktop_file(path).get(DESKTOP_ENTRY, {})
        except (OSError, UnicodeDecodeError, DesktopFileError) as exc:
            log_error("GetValuesForAllDesktopFiles", exc)
            continue
        value = entry.get(key, "")
        if value:
            results.append(value)
    return results