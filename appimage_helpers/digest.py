"""SHA-256 digests of AppImages with the signature sections treated as zeros."""

from __future__ import annotations

import hashlib
import os
from collections.abc import Iterable
from dataclasses import dataclass
from typing import BinaryIO

from .elf import ElfError, get_section_offset_and_length

_CHUNK = 1 << 16

# Only these sections are zeroed, which matches the established signing tools.
_SECTIONS_TO_SKIP = (".sha256_sig", ".sig_key")


@dataclass(frozen=True)
class ByteRange:
    """A region of a file given by offset and length."""

    offset: int
    length: int


def _hash_range(f: BinaryIO, h, offset: int, length: int) -> None:
    if length <= 0:
        return
    print(f"...hashing {length} bytes")
    f.seek(offset)
    remaining = length
    while remaining > 0:
        chunk = f.read(min(_CHUNK, remaining))
        if not chunk:
            break
        h.update(chunk)
        remaining -= len(chunk)


def _hash_dummy_range(h, length: int) -> None:
    if length <= 0:
        return
    print(f"...hashing {length} bytes as if they were 0x00")
    remaining = length
    while remaining > 0:
        step = min(_CHUNK, remaining)
        h.update(bytes(step))
        remaining -= step


def calculate_digest_skipping_ranges(f: BinaryIO, ranges: Iterable[ByteRange]):
    """Return a sha256 hash object of *f*, with the bytes in *ranges* taken as 0x00."""
    size = os.fstat(f.fileno()).st_size
    h = hashlib.sha256()
    position = 0
    for byte_range in sorted(ranges, key=lambda r: r.offset):
        _hash_range(f, h, position, byte_range.offset - position)
        _hash_dummy_range(h, byte_range.length)
        position = byte_range.offset + byte_range.length
    _hash_range(f, h, position, size - position)
    return h


def calculate_sha256_digest(path: str | os.PathLike) -> str:
    """Return the hex sha256 digest of the AppImage at *path*, signature sections zeroed."""
    print("Calculating the sha256 digest...")
    ranges = []
    for section in _SECTIONS_TO_SKIP:
        try:
            offset, length = get_section_offset_and_length(path, section)
        except (ElfError, OSError):
            continue
        if length == 0:
            continue
        print(f"Assuming section {section} offset {offset} length {length} to contain only '0x00's")
        ranges.append(ByteRange(offset, length))
    with open(path, "rb") as f:
        return calculate_digest_skipping_ranges(f, ranges).hexdigest()