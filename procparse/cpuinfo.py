"""Processor information from ``/proc/cpuinfo``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .core import FromRead, InternalError, ProcError, _iter_lines, parse_int


@dataclass
class CpuCore:
    """A summary of one CPU."""

    cpu_num: int
    model_name: Optional[str]
    vendor_id: Optional[str]
    physical_id: Optional[int]
    flags: List[str]


@dataclass
class CpuInfo(FromRead):
    """Fields shared by every CPU, plus the fields that differ per CPU."""

    fields: Dict[str, str] = field(default_factory=dict)
    cpus: List[Dict[str, str]] = field(default_factory=list)

    @classmethod
    def from_read(cls, reader):
        blocks: List[Dict[str, str]] = []
        current: Optional[Dict[str, str]] = {}
        found_first = False

        for line in _iter_lines(reader):
            if line:
                parts = line.split(":")
                key = parts[0].strip()
                if not found_first and key == "processor":
                    found_first = True
                if not found_first:
                    continue
                if len(parts) > 1:
                    if current is None:
                        current = {}
                    current[key] = parts[1].strip()
            elif current is not None:
                blocks.append(current)
                current = None
                found_first = False
        if current is not None:
            blocks.append(current)

        if not blocks:
            raise InternalError("Internal Unwrap Error: no cpu entries found")

        first = blocks[0]
        common = {
            key: value
            for key, value in first.items()
            if all(block.get(key) == value for block in blocks)
        }
        cpus = [{k: v for k, v in block.items() if k not in common} for block in blocks]
        return cls(common, cpus)

    def num_cores(self):
        """Return the number of CPU entries."""
        return len(self.cpus)

    def _cpu(self, cpu_num: int) -> Optional[Dict[str, str]]:
        if 0 <= cpu_num < len(self.cpus):
            return self.cpus[cpu_num]
        return None

    def get_info(self, cpu_num):
        """Return the common and CPU-specific fields merged, or None for an unknown CPU."""
        cpu = self._cpu(cpu_num)
        if cpu is None:
            return None
        return {**self.fields, **cpu}

    def get_field(self, cpu_num, field_name):
        """Return one field of a CPU, or None if the CPU or the field is unknown."""
        cpu = self._cpu(cpu_num)
        if cpu is None:
            return None
        if field_name in cpu:
            return cpu[field_name]
        return self.fields.get(field_name)

    def model_name(self, cpu_num):
        """Return the model name of a CPU."""
        return self.get_field(cpu_num, "model name")

    def vendor_id(self, cpu_num):
        """Return the vendor ID of a CPU."""
        return self.get_field(cpu_num, "vendor_id")

    def physical_id(self, cpu_num):
        """Return the physical package ID of a CPU, or None if absent or not a number."""
        value = self.get_field(cpu_num, "physical id")
        if value is None or value.startswith("-"):
            return None
        try:
            number = parse_int(value)
        except ProcError:
            return None
        return number if number < 1 << 32 else None

    def flags(self, cpu_num):
        """Return the feature flags of a CPU, or None if there is no ``flags`` field."""
        value = self.get_field(cpu_num, "flags")
        return None if value is None else value.split()

    def __iter__(self) -> Iterator[CpuCore]:
        for num in range(self.num_cores()):
            yield CpuCore(
                cpu_num=num,
                model_name=self.model_name(num),
                vendor_id=self.vendor_id(num),
                physical_id=self.physical_id(num),
                flags=self.flags(num) or [],
            )