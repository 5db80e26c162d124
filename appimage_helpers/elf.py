"""Reading and patching ELF files: sections, architecture and total size."""

from __future__ import annotations

import os
import struct
import sys
from dataclasses import dataclass
from typing import BinaryIO

from .fsutil import write_string_into_other_file_at_offset

_ELF_MAGIC = b"\x7fELF"
_EI_NIDENT = 16
_ELFCLASS32 = 1
_ELFCLASS64 = 2
_ELFDATA2LSB = 1
_ELFDATA2MSB = 2
_EV_CURRENT = 1
_SHT_NOBITS = 8

_HEADER_FORMATS = {False: "HHIIIIIHHHHHH", True: "HHIQQQIHHHHHH"}
_SECTION_FORMATS = {False: "IIIIIIIIII", True: "IIQQQQIIQQ"}

_MACHINE_NAMES = {
    0: "EM_NONE",
    2: "EM_SPARC",
    3: "EM_386",
    8: "EM_MIPS",
    20: "EM_PPC",
    21: "EM_PPC64",
    22: "EM_S390",
    40: "EM_ARM",
    43: "EM_SPARCV9",
    50: "EM_IA_64",
    62: "EM_X86_64",
    183: "EM_AARCH64",
    243: "EM_RISCV",
}

_ARCHITECTURES = {
    "EM_X86_64": "x86_64",
    "EM_386": "i686",
    "EM_ARM": "armhf",
    "EM_AARCH64": "aarch64",
}


class ElfError(Exception):
    """Raised when a file is not a readable ELF file or cannot be patched."""


@dataclass(frozen=True)
class _Section:
    name: str
    type: int
    offset: int
    size: int


@dataclass(frozen=True)
class _ElfFile:
    is64: bool
    machine: int
    shoff: int
    shentsize: int
    shnum: int
    sections: tuple[_Section, ...]

    def section(self, name: str) -> _Section | None:
        return next((s for s in self.sections if s.name == name), None)


def _read_exact(f: BinaryIO, offset: int, size: int) -> bytes:
    f.seek(offset)
    data = f.read(size)
    if len(data) < size:
        raise ElfError("unexpected EOF")
    return data


def _parse(f: BinaryIO) -> _ElfFile:
    ident = f.read(_EI_NIDENT)
    if len(ident) < _EI_NIDENT or ident[:4] != _ELF_MAGIC:
        raise ElfError(f"bad magic number {list(ident[:4])}")
    elf_class = ident[4]
    if elf_class not in (_ELFCLASS32, _ELFCLASS64):
        raise ElfError(f"unknown ELF class {elf_class}")
    encoding = ident[5]
    if encoding == _ELFDATA2LSB:
        order = "<"
    elif encoding == _ELFDATA2MSB:
        order = ">"
    else:
        raise ElfError(f"unknown ELF data encoding {encoding}")
    if ident[6] != _EV_CURRENT:
        raise ElfError(f"unknown ELF version {ident[6]}")

    is64 = elf_class == _ELFCLASS64
    header_format = order + _HEADER_FORMATS[is64]
    fields = struct.unpack(
        header_format, _read_exact(f, _EI_NIDENT, struct.calcsize(header_format))
    )
    machine, shoff, shentsize, shnum, shstrndx = (
        fields[1], fields[5], fields[10], fields[11], fields[12]
    )

    raw_sections: list[tuple[int, int, int, int]] = []
    if shnum:
        section_format = order + _SECTION_FORMATS[is64]
        entry_size = struct.calcsize(section_format)
        if shentsize < entry_size:
            raise ElfError(f"invalid ELF shentsize {shentsize}")
        for index in range(shnum):
            entry = struct.unpack(
                section_format,
                _read_exact(f, shoff + index * shentsize, entry_size),
            )
            raw_sections.append((entry[0], entry[1], entry[4], entry[5]))
        if shstrndx >= shnum:
            raise ElfError(f"invalid ELF shstrndx {shstrndx}")

    names = b""
    if raw_sections:
        _, strtab_type, strtab_offset, strtab_size = raw_sections[shstrndx]
        if strtab_type != _SHT_NOBITS:
            names = _read_exact(f, strtab_offset, strtab_size)

    def name_at(offset: int) -> str:
        if offset >= len(names) and offset:
            raise ElfError(f"bad section name index {offset}")
        end = names.find(b"\0", offset)
        return names[offset : end if end >= 0 else len(names)].decode("latin-1")

    sections = tuple(
        _Section(name_at(name_off), sh_type, offset, size)
        for name_off, sh_type, offset, size in raw_sections
    )
    return _ElfFile(is64, machine, shoff, shentsize, shnum, sections)


def _load(path: str | os.PathLike) -> _ElfFile:
    with open(path, "rb") as f:
        return _parse(f)


def get_section_data(path: str | os.PathLike, name: str) -> bytes | None:
    """Return the contents of section *name*, or None if the file has no such section."""
    with open(path, "rb") as f:
        elf = _parse(f)
        section = elf.section(name)
        if section is None:
            return None
        if section.type == _SHT_NOBITS:
            return b""
        return _read_exact(f, section.offset, section.size)


def get_section_offset_and_length(path: str | os.PathLike, name: str) -> tuple[int, int]:
    """Return (offset, size) of section *name*, or (0, 0) if there is no such section."""
    section = _load(path).section(name)
    if section is None:
        return 0, 0
    return section.offset, section.size


def get_elf_architecture(path: str | os.PathLike) -> str:
    """Return the architecture of the ELF file at *path*, e.g. ``x86_64``."""
    machine = _load(path).machine
    name = _MACHINE_NAMES.get(machine, str(machine))
    return _ARCHITECTURES.get(name, name)


def calculate_elf_size(path: str | os.PathLike) -> int:
    """Return the size of the ELF part of *path*, as given by its section header table."""
    elf = _load(path)
    return elf.shoff + elf.shentsize * elf.shnum


def embed_string_in_segment(path: str | os.PathLike, section: str, text: str) -> None:
    """Write *text* into the existing ELF section *section* of the file at *path*.

    Raises ElfError if the section is missing or too small for *text*.
    """
    current = get_section_data(path, section)
    if current is None:
        sys.stderr.write(f"Could not find section {section} in runtime, exiting\n")
        raise ElfError(f"section {section} not found")
    offset, length = get_section_offset_and_length(path, section)
    print(f"Embedded {section} section Offset: {offset}")
    print(f"Embedded {section} section Length: {length}")
    print()
    payload = text.encode()
    if len(payload) > len(current):
        sys.stderr.write(f"does not fit into {section} section, exiting\n")
        raise ElfError(f"{len(payload)} bytes do not fit into section {section}")
    print(f"Writing into {section} section... {length}")
    write_string_into_other_file_at_offset(text, path, offset)
    written = get_section_data(path, section)
    print()
    print(f"Embedded {section} section now contains:")
    print((written or b"").decode(errors="replace"))
    print()