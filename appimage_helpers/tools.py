"""Error reporting, $PATH handling and running external helper tools."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
import time
from collections.abc import Iterable, Sequence

from packaging.version import InvalidVersion, Version

_log = logging.getLogger(__name__)

_MIN_SQUASHFS_VERSION = Version("4.4")


class ToolMissingError(FileNotFoundError):
    """Raised when a required helper tool is not on the $PATH."""


def print_error(context: str, error: BaseException | None) -> None:
    """Write *error* to stderr, prefixed by *context*; do nothing if it is None."""
    if error is not None:
        sys.stderr.write(f"ERROR {context}: {error}\n")


def log_error(context: str, error: BaseException | None) -> None:
    """Log *error* to stderr with a date prefix; do nothing if it is None."""
    if error is not None:
        sys.stderr.write(time.strftime("%Y/%m/%d ") + f"ERROR {context}: {error}\n")


def here() -> str:
    """Return the directory of the running executable, based on /proc/self/exe."""
    try:
        target = os.readlink("/proc/self/exe")
    except OSError:
        return "."
    return os.path.dirname(target) or "."


def here_args0() -> str:
    """Return the absolute directory of the executable named by argv[0]."""
    return os.path.abspath(os.path.dirname(sys.argv[0]))


def args0() -> str:
    """Return the absolute path of the executable named by argv[0]."""
    return os.path.abspath(sys.argv[0])


def add_dirs_to_path(dirs: Iterable[str]) -> None:
    """Prepend each of *dirs* to $PATH, in order, so the last one ends up first."""
    for directory in dirs:
        os.environ["PATH"] = f"{directory}:{os.environ.get('PATH', '')}"
    _log.info("main: PATH: %s", os.environ["PATH"])


def add_here_to_path() -> None:
    """Prepend the directory of the running executable to $PATH."""
    os.environ["PATH"] = f"{here()}:{os.environ.get('PATH', '')}"


def _run_captured(command: Sequence[str]) -> subprocess.CompletedProcess:
    return subprocess.run(
        list(command),
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        check=False,
    )


def validate_desktop_file(path: str | os.PathLike) -> None:
    """Validate a desktop file with desktop-file-validate; raise CalledProcessError on errors."""
    command = ["desktop-file-validate", os.fspath(path)]
    result = _run_captured(command)
    if result.returncode != 0:
        error = subprocess.CalledProcessError(result.returncode, command, result.stdout)
        print_error("desktop-file-validate", error)
        print(result.stdout, end="")
        sys.stderr.write(
            "ERROR: Desktop file contains errors. Please fix them. "
            "Please see the Desktop Entry Specification\n"
        )
        raise error


def validate_appstream_metainfo_file(appdir_path: str | os.PathLike) -> None:
    """Validate the AppStream metainfo in an AppDir; raise CalledProcessError on errors."""
    command = ["appstreamcli", "validate-tree", os.fspath(appdir_path)]
    result = _run_captured(command)
    if result.returncode != 0:
        error = subprocess.CalledProcessError(result.returncode, command, result.stdout)
        print_error("appstreamcli", error)
        print(result.stdout, end="")
        sys.stderr.write(
            "ERROR: AppStream metainfo file file contains errors. Please fix them.\n"
        )
        raise error


def check_if_squashfs_version_sufficient(toolname: str) -> bool:
    """Return True if *toolname* -version reports at least version 4.4."""
    try:
        result = _run_captured([toolname, "-version"])
    except OSError as exc:
        print_error(toolname, exc)
        return False
    output = result.stdout
    if "version" not in output:
        print(output, end="")
        return False
    parts = output.split(" ")
    if len(parts) < 3 or not parts[2].split():
        print(output, end="")
        return False
    raw = parts[2].split()[0].split("-")[0]
    try:
        found = Version(raw)
    except InvalidVersion:
        print(f"{toolname} on the $PATH reports an unreadable version {raw!r}")
        return False
    if found < _MIN_SQUASHFS_VERSION:
        print(f"{toolname} on the $PATH is version {found} but we need at least version 4.4, exiting")
        return False
    return True


def check_if_all_tools_are_present(tools: Iterable[str]) -> None:
    """Raise ToolMissingError naming the first of *tools* not on the $PATH."""
    for tool in tools:
        if shutil.which(tool) is None:
            raise ToolMissingError(f"Required helper tool '{tool}' missing")


def check_for_needed_tools(tools: Iterable[str]) -> None:
    """Raise ToolMissingError if any of *tools* is not on the $PATH."""
    for tool in tools:
        if shutil.which(tool) is None:
            _log.warning("Required helper tool %s missing", tool)
            raise ToolMissingError(f"Required helper tool {tool} missing")


def is_command_available(name: str) -> bool:
    """Return True if *name* is an executable on the $PATH."""
    return shutil.which(name) is not None


def run_cmd_transparently(command: Sequence[str]) -> None:
    """Run *command* with the inherited stdin, stdout and stderr, waiting for it.

    Raises CalledProcessError if it exits with a non-zero status.
    """
    if not command:
        raise ValueError("empty command")
    subprocess.run(list(command), check=True)


def run_cmd_string_transparently(command: str) -> None:
    """Like run_cmd_transparently, with *command* split on single spaces."""
    run_cmd_transparently(command.split(" "))