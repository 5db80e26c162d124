"""File-system helpers: existence checks, directory listings and in-place writes."""

from __future__ import annotations

import os
import shutil
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import BinaryIO

_COPY_CHUNK = 1024


def copy_file(src: str | os.PathLike, dst: str | os.PathLike) -> None:
    """Copy the contents of *src* to *dst*, resolving symlinks and creating parents.

    An existing *dst* is overwritten; file attributes are not copied.
    """
    resolved = Path(src).resolve(strict=True)
    Path(dst).parent.mkdir(mode=0o755, parents=True, exist_ok=True)
    shutil.copyfile(resolved, dst)


def exists(name: str | os.PathLike) -> bool:
    """Return True unless *name* is known not to exist."""
    try:
        os.stat(name)
    except FileNotFoundError:
        return False
    except OSError:
        return True
    return True


def is_directory(path: str | os.PathLike) -> bool:
    """Return True if *path* is a directory."""
    try:
        return Path(path).is_dir()
    except OSError:
        return False


def check_if_file_exists(path: str | os.PathLike) -> bool:
    """Return True if *path* can be stat'ed, False if it does not exist.

    Any other error while checking is raised.
    """
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    return True


def check_if_folder_exists(path: str | os.PathLike) -> bool:
    """Return True if *path* exists and is a directory."""
    try:
        info = os.stat(path)
    except FileNotFoundError:
        return False
    return os.path.isdir(path) if info else False


def check_if_file_or_folder_exists(path: str | os.PathLike) -> bool:
    """Return True if *path* exists as a file or a directory."""
    return exists(path)


def _sorted_entries(directory: str) -> list[str]:
    try:
        return sorted(os.listdir(directory))
    except OSError:
        return []


def files_with_suffix_in_directory(directory: str, extension: str) -> list[str]:
    """Return the entries of *directory* whose names end with *extension*."""
    return [
        f"{directory}/{name}"
        for name in _sorted_entries(directory)
        if name.endswith(extension)
    ]


def files_with_prefix_in_directory(directory: str, prefix: str) -> list[str]:
    """Return the entries of *directory* whose names start with *prefix*."""
    return [
        f"{directory}/{name}"
        for name in _sorted_entries(directory)
        if name.startswith(prefix)
    ]


def _walk(path: str) -> Iterator[str]:
    yield path
    if os.path.isdir(path) and not os.path.islink(path):
        for name in _sorted_entries(path):
            yield from _walk(os.path.join(path, name))


def files_with_suffix_in_directory_recursive(directory: str, extension: str) -> list[str]:
    """Return every path below *directory* (itself included) ending with *extension*.

    Paths are produced depth first in lexical order; symlinked directories are
    not followed.
    """
    if not os.path.lexists(directory):
        return []
    return [
        path
        for path in _walk(directory)
        if os.path.basename(os.path.normpath(path)).endswith(extension)
    ]


def append_if_missing(items: Iterable[str], item: str) -> list[str]:
    """Return *items* as a list with *item* appended unless already present."""
    result = list(items)
    if item not in result:
        result.append(item)
    return result


def replace_text_in_file(path: str | os.PathLike, search: str, replace: str) -> None:
    """Replace every occurrence of *search* with *replace* in the file at *path*."""
    target = Path(path)
    data = target.read_bytes()
    target.write_bytes(data.replace(search.encode(), replace.encode()))


def find_most_recent_file(files: Iterable[str]) -> str | None:
    """Return the regular file with the newest mtime, or None if there is none.

    When several files share the newest mtime, the first of them wins.
    """
    newest: int | None = None
    names: list[str] = []
    for name in files:
        info = os.stat(name)
        if not os.path.isfile(name):
            continue
        mtime = info.st_mtime_ns
        if newest is None or mtime > newest:
            newest = mtime
            names = [name]
        elif mtime == newest:
            names.append(name)
    if not names:
        return None
    print(newest, names[0])
    return names[0]


def write_file_into_other_file_at_offset(
    input_path: str | os.PathLike, output_path: str | os.PathLike, offset: int
) -> None:
    """Write the contents of *input_path* into *output_path* at *offset* without truncating."""
    with open(input_path, "rb") as source, open(output_path, "r+b") as target:
        target.seek(offset)
        shutil.copyfileobj(source, target, _COPY_CHUNK)


def write_string_into_other_file_at_offset(
    text: str, output_path: str | os.PathLike, offset: int
) -> None:
    """Write *text* into *output_path* at *offset* without truncating."""
    with open(output_path, "r+b") as target:
        target.seek(offset)
        target.write(text.encode())


def check_magic_at_offset(f: BinaryIO, magic: str, offset: int) -> bool:
    """Return True if the hex string *magic* is found in the open file *f* at *offset*."""
    f.seek(offset)
    return f.read(len(magic) // 2).hex() == magic


def check_magic_at_offset_bytes(data: bytes, magic: str, offset: int) -> bool:
    """Return True if the hex string *magic* is found in *data* at *offset*."""
    return bytes(data[offset : offset + len(magic) // 2]).hex() == magic