"""CPU time accounting and kernel statistics from ``/proc/stat``."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Optional

from .core import FromReadSI, InternalError, _iter_lines, expect, parse_int

_OPTIONAL_FIELDS = ("iowait", "irq", "softirq", "steal", "guest", "guest_nice")


def _parse_unsigned(text: str, bits: int, what: str) -> int:
    if text.startswith("-"):
        raise InternalError(f"Internal Unwrap Error: {what}: {text!r} is not an unsigned integer")
    value = parse_int(text, 10, what)
    if value >= 1 << bits:
        raise InternalError(f"Internal Unwrap Error: {what}: {text!r} is out of range")
    return value


def _duration(ms: Optional[int]) -> Optional[timedelta]:
    return None if ms is None else timedelta(milliseconds=ms)


@dataclass
class CpuTime:
    """Ticks a CPU (or all CPUs together) spent in each state."""

    user: int
    nice: int
    system: int
    idle: int
    iowait: Optional[int] = None
    irq: Optional[int] = None
    softirq: Optional[int] = None
    steal: Optional[int] = None
    guest: Optional[int] = None
    guest_nice: Optional[int] = None
    ticks_per_second: int = field(kw_only=True, repr=False)

    @classmethod
    def from_line(cls, line, ticks_per_second):
        """Parse a ``cpu`` line of ``/proc/stat``; the first token (the label) is skipped."""
        fields = iter(line.split())
        next(fields, None)
        required = {
            name: _parse_unsigned(expect(next(fields, None), name), 64, name)
            for name in ("user", "nice", "system", "idle")
        }
        optional = {}
        for name in _OPTIONAL_FIELDS:
            token = next(fields, None)
            optional[name] = None if token is None else _parse_unsigned(token, 64, name)
        return cls(**required, **optional, ticks_per_second=ticks_per_second)

    def _ms(self, ticks: Optional[int]) -> Optional[int]:
        if ticks is None:
            return None
        return ticks * (1000 // self.ticks_per_second)

    def user_ms(self):
        """Milliseconds spent in user mode."""
        return self._ms(self.user)

    def user_duration(self):
        """Time spent in user mode."""
        return _duration(self.user_ms())

    def nice_ms(self):
        """Milliseconds spent in user mode with low priority."""
        return self._ms(self.nice)

    def nice_duration(self):
        """Time spent in user mode with low priority."""
        return _duration(self.nice_ms())

    def system_ms(self):
        """Milliseconds spent in system mode."""
        return self._ms(self.system)

    def system_duration(self):
        """Time spent in system mode."""
        return _duration(self.system_ms())

    def idle_ms(self):
        """Milliseconds spent idle."""
        return self._ms(self.idle)

    def idle_duration(self):
        """Time spent idle."""
        return _duration(self.idle_ms())

    def iowait_ms(self):
        """Milliseconds spent waiting for I/O, if reported."""
        return self._ms(self.iowait)

    def iowait_duration(self):
        """Time spent waiting for I/O, if reported."""
        return _duration(self.iowait_ms())

    def irq_ms(self):
        """Milliseconds spent servicing interrupts, if reported."""
        return self._ms(self.irq)

    def irq_duration(self):
        """Time spent servicing interrupts, if reported."""
        return _duration(self.irq_ms())

    def softirq_ms(self):
        """Milliseconds spent servicing softirqs, if reported."""
        return self._ms(self.softirq)

    def softirq_duration(self):
        """Time spent servicing softirqs, if reported."""
        return _duration(self.softirq_ms())

    def steal_ms(self):
        """Milliseconds of stolen time, if reported."""
        return self._ms(self.steal)

    def steal_duration(self):
        """Stolen time, if reported."""
        return _duration(self.steal_ms())

    def guest_ms(self):
        """Milliseconds spent running guest virtual CPUs, if reported."""
        return self._ms(self.guest)

    def guest_duration(self):
        """Time spent running guest virtual CPUs, if reported."""
        return _duration(self.guest_ms())

    def guest_nice_ms(self):
        """Milliseconds spent running niced guests, if reported."""
        return self._ms(self.guest_nice)

    def guest_nice_duration(self):
        """Time spent running niced guests, if reported."""
        return _duration(self.guest_nice_ms())


@dataclass
class KernelStats(FromReadSI):
    """Kernel and system statistics from ``/proc/stat``."""

    total: CpuTime
    cpu_time: List[CpuTime]
    ctxt: int
    btime: int
    processes: int
    procs_running: Optional[int] = None
    procs_blocked: Optional[int] = None

    @classmethod
    def from_read(cls, reader, system_info):
        tps = system_info.ticks_per_second
        total = None
        cpus: List[CpuTime] = []
        ctxt = btime = processes = None
        procs_running = procs_blocked = None

        for line in _iter_lines(reader):
            if line.startswith("cpu "):
                total = CpuTime.from_line(line, tps)
            elif line.startswith("cpu"):
                cpus.append(CpuTime.from_line(line, tps))
            elif line.startswith("ctxt "):
                ctxt = _parse_unsigned(line[len("ctxt "):], 64, "ctxt")
            elif line.startswith("btime "):
                btime = _parse_unsigned(line[len("btime "):], 64, "btime")
            elif line.startswith("processes "):
                processes = _parse_unsigned(line[len("processes "):], 64, "processes")
            elif line.startswith("procs_running "):
                procs_running = _parse_unsigned(line[len("procs_running "):], 32, "procs_running")
            elif line.startswith("procs_blocked "):
                procs_blocked = _parse_unsigned(line[len("procs_blocked "):], 32, "procs_blocked")

        return cls(
            total=expect(total, "cpu"),
            cpu_time=cpus,
            ctxt=expect(ctxt, "ctxt"),
            btime=expect(btime, "btime"),
            processes=expect(processes, "processes"),
            procs_running=procs_running,
            procs_blocked=procs_blocked,
        )