"""Locating and preparing an AppDir from its desktop file."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass

from .desktopfile import DESKTOP_ENTRY, check_desktop_file, load_desktop_file
from .fsutil import copy_file, exists
from .tools import print_error

_log = logging.getLogger(__name__)

# Only the most common sizes, in the hope that they work on all target systems.
_ICON_SIZES = (512, 256, 128, 48, 32, 24, 22, 16, 8)
_ICON_PREFERENCE_ORDER = (128, 256, 512, 48, 32, 24, 22, 16, 8)


class AppDirError(ValueError):
    """Raised when a directory is not a usable AppDir."""


def _base(path: str) -> str:
    """Return the last element of *path* the way a slash-separated path base is taken."""
    if not path:
        return "."
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    return stripped.rsplit("/", 1)[-1]


def _icon_dir(root: str, size: int) -> str:
    return f"{root}/usr/share/icons/hicolor/{size}x{size}/apps"


@dataclass
class AppDir:
    """An application directory with its top-level desktop file and main executable."""

    path: str
    desktop_file_path: str
    main_executable: str = ""

    @classmethod
    def from_desktop_file(cls, desktop_file_path: str | os.PathLike) -> AppDir:
        """Build an AppDir from a desktop file in <AppDir>/usr/share/applications.

        The desktop file is copied into the AppDir root and the main icon is
        copied there too if it is not there yet.
        """
        desktop_file_path = os.fspath(desktop_file_path)
        if not exists(desktop_file_path):
            raise AppDirError("Desktop file not found")

        root = desktop_file_path
        for _ in range(4):
            root = os.path.dirname(root)
        bin_dir = root + "/usr/bin"
        if not exists(bin_dir):
            raise AppDirError(f"AppDir could not be identified: {bin_dir} does not exist")
        print("AppDir path:", root)

        copy_file(desktop_file_path, root + "/" + os.path.basename(desktop_file_path))

        top_level = [name for name in sorted(os.listdir(root)) if name.endswith(".desktop")]
        if not top_level:
            raise AppDirError(f"No desktop file was found, please place one into {root}")
        if len(top_level) > 1:
            raise AppDirError(f"More than one desktop file was found in {root}")
        appdir = cls(path=root, desktop_file_path=root + "/" + top_level[0])

        sections = load_desktop_file(appdir.desktop_file_path)
        if DESKTOP_ENTRY not in sections:
            raise AppDirError(f"section '{DESKTOP_ENTRY}' does not exist")
        entry = sections[DESKTOP_ENTRY]
        if "Exec" not in entry:
            raise AppDirError("'Desktop Entry' section has no Exec= key")

        check_desktop_file(appdir.desktop_file_path)

        executable = entry["Exec"].split(" ")[0]
        print("Exec= key contains:", _base(executable))
        if executable != _base(executable):
            raise AppDirError("Exec= contains a path, please remove it")
        appdir.main_executable = f"{root}/usr/bin/{executable}"

        icon_name = entry["Icon"]
        icon_word = icon_name.split(" ")[0]
        print("Icon= key contains:", _base(icon_word))
        if icon_word != _base(icon_word):
            raise AppDirError("Icon= contains a path, please remove it")

        appdir.copy_main_icon_to_root(icon_name)
        return appdir

    def get_elf_interpreter(self) -> str:
        """Return the ELF interpreter of the main executable, as reported by patchelf."""
        command = ["patchelf", "--print-interpreter", self.main_executable]
        result = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            error = subprocess.CalledProcessError(result.returncode, command, result.stdout)
            print(" ".join(command))
            print_error(
                f"patchelf --print-interpreter {self.main_executable}: {result.stdout}",
                error,
            )
            raise error
        return result.stdout.strip()

    def create_icon_directories(self) -> None:
        """Create the empty <AppDir>/usr/share/icons/hicolor/<size>x<size>/apps directories."""
        for size in _ICON_SIZES:
            os.makedirs(_icon_dir(self.path, size), mode=0o755, exist_ok=True)

    def copy_main_icon_to_root(self, icon_name: str) -> None:
        """Copy the best-sized hicolor PNG for *icon_name* to the AppDir root.

        An icon already at the root is left untouched.
        """
        destination = f"{self.path}/{icon_name}.png"
        if exists(destination):
            _log.info("Top-level icon already exists, leaving untouched")
            return
        for size in _ICON_PREFERENCE_ORDER:
            candidate = f"{_icon_dir(self.path, size)}/{icon_name}.png"
            if exists(candidate):
                copy_file(candidate, destination)
                return