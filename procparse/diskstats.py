"""Disk I/O statistics from ``/proc/diskstats``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from .core import FromRead, InternalError, _iter_lines, expect, parse_int

_U64_LIMIT = 1 << 64
_I32_LIMIT = 1 << 31


def _parse_u64(text: str, what: str) -> int:
    if text.startswith("-"):
        raise InternalError(f"Internal Unwrap Error: {what}: {text!r} is not an unsigned integer")
    value = parse_int(text, 10, what)
    if value >= _U64_LIMIT:
        raise InternalError(f"Internal Unwrap Error: {what}: {text!r} is out of range")
    return value


def _parse_i32(text: str, what: str) -> int:
    value = parse_int(text, 10, what)
    if not -_I32_LIMIT <= value < _I32_LIMIT:
        raise InternalError(f"Internal Unwrap Error: {what}: {text!r} is out of range")
    return value


def _optional_u64(token: Optional[str]) -> Optional[int]:
    if token is None:
        return None
    try:
        return _parse_u64(token, "optional field")
    except InternalError:
        return None


@dataclass
class DiskStat:
    """I/O statistics for one block device; times are in milliseconds."""

    major: int
    minor: int
    name: str
    reads: int
    merged: int
    sectors_read: int
    time_reading: int
    writes: int
    writes_merged: int
    sectors_written: int
    time_writing: int
    in_progress: int
    time_in_progress: int
    weighted_time_in_progress: int
    discards: Optional[int] = None
    discards_merged: Optional[int] = None
    sectors_discarded: Optional[int] = None
    time_discarding: Optional[int] = None
    flushes: Optional[int] = None
    time_flushing: Optional[int] = None

    _COUNTERS = (
        "reads",
        "merged",
        "sectors_read",
        "time_reading",
        "writes",
        "writes_merged",
        "sectors_written",
        "time_writing",
        "in_progress",
        "time_in_progress",
        "weighted_time_in_progress",
    )
    _OPTIONAL = (
        "discards",
        "discards_merged",
        "sectors_discarded",
        "time_discarding",
        "flushes",
        "time_flushing",
    )

    @classmethod
    def from_line(cls, line):
        """Parse one line of ``/proc/diskstats``."""
        fields = iter(line.split())
        major = _parse_i32(expect(next(fields, None), "major"), "major")
        minor = _parse_i32(expect(next(fields, None), "minor"), "minor")
        name = expect(next(fields, None), "name")
        counters = {
            key: _parse_u64(expect(next(fields, None), key), key) for key in cls._COUNTERS
        }
        optional = {key: _optional_u64(next(fields, None)) for key in cls._OPTIONAL}
        return cls(major=major, minor=minor, name=name, **counters, **optional)


@dataclass
class DiskStats(FromRead):
    """Statistics for every block device."""

    stats: List[DiskStat] = field(default_factory=list)

    @classmethod
    def from_read(cls, reader):
        return cls([DiskStat.from_line(line) for line in _iter_lines(reader)])

    def __iter__(self) -> Iterator[DiskStat]:
        return iter(self.stats)

    def __len__(self) -> int:
        return len(self.stats)