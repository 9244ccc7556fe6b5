"""Mount table entries from ``/proc/mounts``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .core import FromRead, InternalError, _iter_lines, expect, parse_int

_ESCAPES = ((r"\011", "\t"), (r"\012", "\n"), (r"\134", "\\"), (r"\043", "#"))


def unmangle_octal(text: str) -> str:
    """Undo the kernel's octal escaping of tabs, newlines, backslashes and hashes."""
    for octal, char in _ESCAPES:
        text = text.replace(octal, char)
    return text


def _parse_u8(text: str, what: str) -> int:
    value = parse_int(text, 10, what)
    if not 0 <= value <= 255:
        raise InternalError(f"Internal Unwrap Error: {what}: {text!r} is out of range")
    return value


@dataclass
class MountEntry:
    """One line of the mount table."""

    fs_spec: str
    fs_file: str
    fs_vfstype: str
    fs_mntops: Dict[str, Optional[str]]
    fs_freq: int
    fs_passno: int


@dataclass
class MountEntries(FromRead):
    """All entries of the mount table."""

    entries: List[MountEntry] = field(default_factory=list)

    @classmethod
    def from_read(cls, reader):
        entries = []
        for line in _iter_lines(reader):
            fields = iter(line.split())
            fs_spec = unmangle_octal(expect(next(fields, None), "fs_spec"))
            fs_file = unmangle_octal(expect(next(fields, None), "fs_file"))
            fs_vfstype = unmangle_octal(expect(next(fields, None), "fs_vfstype"))
            options = unmangle_octal(expect(next(fields, None), "fs_mntops"))
            fs_mntops: Dict[str, Optional[str]] = {}
            for option in options.split(","):
                key, sep, value = option.partition("=")
                fs_mntops[key] = value if sep else None
            fs_freq = _parse_u8(expect(next(fields, None), "fs_freq"), "fs_freq")
            fs_passno = _parse_u8(expect(next(fields, None), "fs_passno"), "fs_passno")
            entries.append(MountEntry(fs_spec, fs_file, fs_vfstype, fs_mntops, fs_freq, fs_passno))
        return cls(entries)

    def __iter__(self) -> Iterator[MountEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)