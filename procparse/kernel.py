"""Kernel-wide data: load average, configuration, vmstat, loaded modules and boot arguments."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Union

from .core import FromRead, InternalError, _iter_lines, expect, parse_int


def _range_error(text: str, what: str) -> InternalError:
    return InternalError(f"Internal Unwrap Error: {what}: {text!r} is out of range")


def _parse_uint(text: str, bits: int, what: str) -> int:
    if text.startswith("-"):
        raise InternalError(f"Internal Unwrap Error: {what}: {text!r} is not an unsigned integer")
    value = parse_int(text, 10, what)
    if value >= 1 << bits:
        raise _range_error(text, what)
    return value


def _parse_sint(text: str, bits: int, what: str) -> int:
    value = parse_int(text, 10, what)
    limit = 1 << (bits - 1)
    if not -limit <= value < limit:
        raise _range_error(text, what)
    return value


def _parse_float(text: str, what: str) -> float:
    if "_" in text:
        raise InternalError(f"Internal Unwrap Error: {what}: cannot parse {text!r} as a number")
    try:
        return float(text)
    except ValueError as err:
        raise InternalError(f"Internal Unwrap Error: {what}: {err}") from err


@dataclass
class LoadAverage(FromRead):
    """Load averages over 1, 5 and 15 minutes, with scheduling-entity counts."""

    one: float
    five: float
    fifteen: float
    cur: int
    max: int
    latest_pid: int

    @classmethod
    def from_read(cls, reader):
        fields = iter(reader.read().split())
        one = _parse_float(expect(next(fields, None), "one"), "one")
        five = _parse_float(expect(next(fields, None), "five"), "five")
        fifteen = _parse_float(expect(next(fields, None), "fifteen"), "fifteen")
        curmax = expect(next(fields, None), "cur/max")
        latest_pid = _parse_uint(expect(next(fields, None), "latest_pid"), 32, "latest_pid")

        parts = curmax.split("/")
        cur = _parse_uint(parts[0], 32, "cur")
        maximum = _parse_uint(expect(parts[1] if len(parts) > 1 else None, "max"), 32, "max")
        return cls(one, five, fifteen, cur, maximum, latest_pid)


class ConfigSetting(enum.Enum):
    """A kernel option that is built in or built as a module; other values are kept as strings."""

    YES = "y"
    MODULE = "m"


@dataclass
class KernelConfig(FromRead):
    """The kernel configuration, mapping option names to their settings."""

    settings: Dict[str, Union[ConfigSetting, str]] = field(default_factory=dict)

    @classmethod
    def from_read(cls, reader):
        settings: Dict[str, Union[ConfigSetting, str]] = {}
        for line in _iter_lines(reader):
            if line.startswith("#") or "=" not in line:
                continue
            name, _, value = line.partition("=")
            if value == "y":
                settings[name] = ConfigSetting.YES
            elif value == "m":
                settings[name] = ConfigSetting.MODULE
            else:
                settings[name] = value
        return cls(settings)


@dataclass
class VmStat(FromRead):
    """Virtual memory statistics, by name."""

    stats: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_read(cls, reader):
        stats: Dict[str, int] = {}
        for line in _iter_lines(reader):
            fields = iter(line.split())
            name = expect(next(fields, None), "name")
            stats[name] = _parse_sint(expect(next(fields, None), "value"), 64, name)
        return cls(stats)


@dataclass
class KernelModule:
    """A loaded kernel module."""

    name: str
    size: int
    refcount: int
    used_by: List[str]
    state: str


@dataclass
class KernelModules(FromRead):
    """Loaded kernel modules, by name."""

    modules: Dict[str, KernelModule] = field(default_factory=dict)

    @classmethod
    def from_read(cls, reader):
        modules: Dict[str, KernelModule] = {}
        for line in _iter_lines(reader):
            fields = iter(line.split())
            name = expect(next(fields, None), "name")
            size = _parse_uint(expect(next(fields, None), "size"), 32, "size")
            refcount = _parse_sint(expect(next(fields, None), "refcount"), 32, "refcount")
            used_by_text = expect(next(fields, None), "used_by")
            state = expect(next(fields, None), "state")
            used_by = [] if used_by_text == "-" else [m for m in used_by_text.split(",") if m]
            modules[name] = KernelModule(name, size, refcount, used_by, state)
        return cls(modules)


@dataclass
class KernelCmdline(FromRead):
    """The arguments passed to the kernel at boot."""

    args: List[str] = field(default_factory=list)

    @classmethod
    def from_read(cls, reader):
        return cls([arg for arg in reader.read().split(" ") if arg])

    def __iter__(self) -> Iterator[str]:
        return iter(self.args)