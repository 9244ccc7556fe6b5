"""Control group information from ``/proc/cgroups`` and ``/proc/<pid>/cgroup``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List

from .core import FromRead, _iter_lines, expect, parse_int


@dataclass
class CGroupController:
    """A cgroup controller: its name, hierarchy ID, number of cgroups and whether it is enabled."""

    name: str
    hierarchy: int
    num_cgroups: int
    enabled: bool


@dataclass
class CGroupControllers(FromRead):
    """The controllers listed in ``/proc/cgroups``."""

    controllers: List[CGroupController] = field(default_factory=list)

    @classmethod
    def from_read(cls, reader):
        controllers = []
        for line in _iter_lines(reader):
            if line.startswith("#"):
                continue
            fields = iter(line.split())
            name = expect(next(fields, None), "name")
            hierarchy = parse_int(expect(next(fields, None), "hierarchy"), 10, "hierarchy")
            num_cgroups = parse_int(expect(next(fields, None), "num_cgroups"), 10, "num_cgroups")
            enabled = expect(next(fields, None), "enabled") == "1"
            controllers.append(CGroupController(name, hierarchy, num_cgroups, enabled))
        return cls(controllers)


@dataclass
class ProcessCGroup:
    """One cgroup membership of a process."""

    hierarchy: int
    controllers: List[str]
    pathname: str


@dataclass
class ProcessCGroups(FromRead):
    """The cgroups a process belongs to."""

    cgroups: List[ProcessCGroup] = field(default_factory=list)

    @classmethod
    def from_read(cls, reader):
        cgroups = []
        for line in _iter_lines(reader):
            if line.startswith("#"):
                continue
            parts = line.split(":", 2)
            if len(parts) < 3:
                expect(None, ("hierarchy", "controllers", "path")[len(parts)])
            hierarchy = parse_int(parts[0], 10, "hierarchy")
            cgroups.append(ProcessCGroup(hierarchy, parts[1].split(","), parts[2]))
        return cls(cgroups)

    def __iter__(self) -> Iterator[ProcessCGroup]:
        return iter(self.cgroups)

    def __len__(self) -> int:
        return len(self.cgroups)