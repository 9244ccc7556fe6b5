"""Physical memory map from ``/proc/iomem``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Tuple

from .core import FromRead, _iter_lines, expect, split_into_num


@dataclass(frozen=True)
class PhysicalMemoryMap:
    """A physical address range and what occupies it."""

    address: Tuple[int, int]
    name: str

    @classmethod
    def from_line(cls, line):
        """Parse one line, returning ``(indent, map)``; indent is the nesting depth."""
        indent = (len(line) - len(line.lstrip(" "))) // 2
        parts = line.strip().split(" : ")
        address = parts[0]
        name = expect(parts[1] if len(parts) > 1 else None, "name")
        return indent, cls(split_into_num(address, "-", 16), name)

    def get_range(self, system_info):
        """Return the page frame range ``(start, end)``; start included, end excluded."""
        page_size = system_info.page_size
        start = self.address[0] // page_size
        end = (self.address[1] + 1) // page_size
        return start, end


@dataclass
class Iomem(FromRead):
    """Entries of the physical memory map, each with its nesting depth."""

    entries: List[Tuple[int, PhysicalMemoryMap]] = field(default_factory=list)

    @classmethod
    def from_read(cls, reader):
        return cls([PhysicalMemoryMap.from_line(line) for line in _iter_lines(reader)])

    def __iter__(self) -> Iterator[Tuple[int, PhysicalMemoryMap]]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)