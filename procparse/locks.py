"""File locks from ``/proc/locks``."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Union

from .core import FromRead, InternalError, _iter_lines, expect, parse_int


def _parse_uint(text: str, bits: int, what: str, radix: int = 10) -> int:
    if text.startswith("-"):
        raise InternalError(f"Internal Unwrap Error: {what}: {text!r} is not an unsigned integer")
    value = parse_int(text, radix, what)
    if value >= 1 << bits:
        raise InternalError(f"Internal Unwrap Error: {what}: {text!r} is out of range")
    return value


def _parse_i32(text: str, what: str) -> int:
    value = parse_int(text, 10, what)
    if not -(1 << 31) <= value < 1 << 31:
        raise InternalError(f"Internal Unwrap Error: {what}: {text!r} is out of range")
    return value


class LockType(enum.Enum):
    """The kind of locking call that created a lock; unknown types are kept as strings."""

    FLOCK = "FLOCK"
    POSIX = "POSIX"
    ODF = "ODF"

    @classmethod
    def parse(cls, text):
        """Return the matching member, or ``text`` itself for an unknown type."""
        known = {"FLOCK": cls.FLOCK, "POSIX": cls.POSIX, "OFDLCK": cls.ODF}
        return known.get(text, text)


class LockMode(enum.Enum):
    """Advisory or mandatory; unknown modes are kept as strings."""

    ADVISORY = "ADVISORY"
    MANDATORY = "MANDATORY"

    @classmethod
    def parse(cls, text):
        """Return the matching member, or ``text`` itself for an unknown mode."""
        try:
            return cls(text)
        except ValueError:
            return text


class LockKind(enum.Enum):
    """Read (shared) or write (exclusive); unknown kinds are kept as strings."""

    READ = "READ"
    WRITE = "WRITE"

    @classmethod
    def parse(cls, text):
        """Return the matching member, or ``text`` itself for an unknown kind."""
        try:
            return cls(text)
        except ValueError:
            return text


@dataclass
class Lock:
    """One file lock; ``pid`` is None for OFD locks and ``offset_last`` None means end of file."""

    lock_type: Union[LockType, str]
    mode: Union[LockMode, str]
    kind: Union[LockKind, str]
    pid: Optional[int]
    devmaj: int
    devmin: int
    inode: int
    offset_first: int
    offset_last: Optional[int]

    @classmethod
    def from_line(cls, line):
        """Parse one line of ``/proc/locks``, including blocked (``->``) entries."""
        fields = iter(line.split())
        expect(next(fields, None), "ordinal")
        type_text = expect(next(fields, None), "type")
        if type_text == "->":
            type_text = expect(next(fields, None), "type")
        mode = LockMode.parse(expect(next(fields, None), "mode"))
        kind = LockKind.parse(expect(next(fields, None), "kind"))
        pid_text = expect(next(fields, None), "pid")
        disk_inode = expect(next(fields, None), "device:inode")
        offset_first = _parse_uint(expect(next(fields, None), "offset_first"), 64, "offset_first")
        offset_last_text = expect(next(fields, None), "offset_last")

        parts = iter(disk_inode.split(":"))
        devmaj = _parse_uint(expect(next(parts, None), "devmaj"), 32, "devmaj", 16)
        devmin = _parse_uint(expect(next(parts, None), "devmin"), 32, "devmin", 16)
        inode = _parse_uint(expect(next(parts, None), "inode"), 64, "inode")

        return cls(
            lock_type=LockType.parse(type_text),
            mode=mode,
            kind=kind,
            pid=None if pid_text == "-1" else _parse_i32(pid_text, "pid"),
            devmaj=devmaj,
            devmin=devmin,
            inode=inode,
            offset_first=offset_first,
            offset_last=(
                None
                if offset_last_text == "EOF"
                else _parse_uint(offset_last_text, 64, "offset_last")
            ),
        )


@dataclass
class Locks(FromRead):
    """All file locks on the system."""

    locks: List[Lock] = field(default_factory=list)

    @classmethod
    def from_read(cls, reader):
        return cls([Lock.from_line(line) for line in _iter_lines(reader)])

    def __iter__(self) -> Iterator[Lock]:
        return iter(self.locks)

    def __len__(self) -> int:
        return len(self.locks)