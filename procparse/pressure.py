"""Pressure stall information from ``/proc/pressure/{cpu,memory,io}``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from .core import FromRead, IncompleteError


@dataclass(frozen=True)
class PressureRecord:
    """Stall percentages over 10, 60 and 300 second windows, and total stall time in microseconds."""

    avg10: float
    avg60: float
    avg300: float
    total: int


def _get_float(values: Dict[str, str], name: str) -> float:
    text = values.get(name)
    if text is None or "_" in text:
        raise IncompleteError()
    try:
        return float(text)
    except ValueError:
        raise IncompleteError() from None


def _get_total(values: Dict[str, str]) -> int:
    text = values.get("total")
    if text is None:
        raise IncompleteError()
    digits = text[1:] if text.startswith("+") else text
    if not digits or not digits.isascii() or not digits.isdigit():
        raise IncompleteError()
    value = int(digits)
    if value >= 1 << 64:
        raise IncompleteError()
    return value


def parse_pressure_record(line):
    """Parse a ``some ...`` or ``full ...`` line; raise ``IncompleteError`` if it is malformed."""
    if not line.startswith(("some", "full")):
        raise IncompleteError()
    values: Dict[str, str] = {}
    for item in line[5:].split():
        parts = item.split("=")
        if len(parts) == 2:
            values[parts[0]] = parts[1]
    return PressureRecord(
        avg10=_get_float(values, "avg10"),
        avg60=_get_float(values, "avg60"),
        avg300=_get_float(values, "avg300"),
        total=_get_total(values),
    )


def _some_and_full(reader) -> Tuple[PressureRecord, PressureRecord]:
    some = reader.readline()
    full = reader.readline()
    return parse_pressure_record(some), parse_pressure_record(full)


@dataclass(frozen=True)
class CpuPressure(FromRead):
    """CPU pressure: the share of time some tasks were stalled."""

    some: PressureRecord

    @classmethod
    def from_read(cls, reader):
        return cls(parse_pressure_record(reader.readline()))


@dataclass(frozen=True)
class MemoryPressure(FromRead):
    """Memory pressure: time some tasks, and time all non-idle tasks, were stalled."""

    some: PressureRecord
    full: PressureRecord

    @classmethod
    def from_read(cls, reader):
        return cls(*_some_and_full(reader))


@dataclass(frozen=True)
class IoPressure(FromRead):
    """I/O pressure: time some tasks, and time all non-idle tasks, were stalled."""

    some: PressureRecord
    full: PressureRecord

    @classmethod
    def from_read(cls, reader):
        return cls(*_some_and_full(reader))