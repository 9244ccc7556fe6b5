"""System memory usage from ``/proc/meminfo``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from .core import FromRead, InternalError, _iter_lines, expect, parse_int

_KIB = 1024
_UNIT_FACTORS = {
    "B": 1,
    "KiB": _KIB,
    "kiB": _KIB,
    "kB": _KIB,
    "KB": _KIB,
    "MiB": _KIB**2,
    "miB": _KIB**2,
    "MB": _KIB**2,
    "mB": _KIB**2,
    "GiB": _KIB**3,
    "giB": _KIB**3,
    "GB": _KIB**3,
    "gB": _KIB**3,
}


def convert_to_bytes(num, unit):
    """Convert ``num`` in ``unit`` to bytes; ``kB`` and friends are taken as powers of 1024."""
    try:
        return num * _UNIT_FACTORS[unit]
    except KeyError:
        raise InternalError(f"Internal Unwrap Error: Unknown unit type {unit}") from None


def _parse_u64(text: str, what: str) -> int:
    if text.startswith("-"):
        raise InternalError(f"Internal Unwrap Error: {what}: {text!r} is not an unsigned integer")
    value = parse_int(text, 10, what)
    if value >= 1 << 64:
        raise InternalError(f"Internal Unwrap Error: {what}: {text!r} is out of range")
    return value


# (attribute, key in the file, required)
_FIELDS = (
    ("mem_total", "MemTotal", True),
    ("mem_free", "MemFree", True),
    ("mem_available", "MemAvailable", False),
    ("buffers", "Buffers", True),
    ("cached", "Cached", True),
    ("swap_cached", "SwapCached", True),
    ("active", "Active", True),
    ("inactive", "Inactive", True),
    ("active_anon", "Active(anon)", False),
    ("inactive_anon", "Inactive(anon)", False),
    ("active_file", "Active(file)", False),
    ("inactive_file", "Inactive(file)", False),
    ("unevictable", "Unevictable", False),
    ("mlocked", "Mlocked", False),
    ("high_total", "HighTotal", False),
    ("high_free", "HighFree", False),
    ("low_total", "LowTotal", False),
    ("low_free", "LowFree", False),
    ("mmap_copy", "MmapCopy", False),
    ("swap_total", "SwapTotal", True),
    ("swap_free", "SwapFree", True),
    ("dirty", "Dirty", True),
    ("writeback", "Writeback", True),
    ("anon_pages", "AnonPages", False),
    ("mapped", "Mapped", True),
    ("shmem", "Shmem", False),
    ("slab", "Slab", True),
    ("s_reclaimable", "SReclaimable", False),
    ("s_unreclaim", "SUnreclaim", False),
    ("kernel_stack", "KernelStack", False),
    ("page_tables", "PageTables", False),
    ("secondary_page_tables", "SecPageTables", False),
    ("quicklists", "Quicklists", False),
    ("nfs_unstable", "NFS_Unstable", False),
    ("bounce", "Bounce", False),
    ("writeback_tmp", "WritebackTmp", False),
    ("commit_limit", "CommitLimit", False),
    ("committed_as", "Committed_AS", True),
    ("vmalloc_total", "VmallocTotal", True),
    ("vmalloc_used", "VmallocUsed", True),
    ("vmalloc_chunk", "VmallocChunk", True),
    ("hardware_corrupted", "HardwareCorrupted", False),
    ("anon_hugepages", "AnonHugePages", False),
    ("shmem_hugepages", "ShmemHugePages", False),
    ("shmem_pmd_mapped", "ShmemPmdMapped", False),
    ("cma_total", "CmaTotal", False),
    ("cma_free", "CmaFree", False),
    ("hugepages_total", "HugePages_Total", False),
    ("hugepages_free", "HugePages_Free", False),
    ("hugepages_rsvd", "HugePages_Rsvd", False),
    ("hugepages_surp", "HugePages_Surp", False),
    ("hugepagesize", "Hugepagesize", False),
    ("direct_map_4k", "DirectMap4k", False),
    ("direct_map_4M", "DirectMap4M", False),
    ("direct_map_2M", "DirectMap2M", False),
    ("direct_map_1G", "DirectMap1G", False),
    ("hugetlb", "Hugetlb", False),
    ("per_cpu", "Percpu", False),
    ("k_reclaimable", "KReclaimable", False),
    ("file_pmd_mapped", "FilePmdMapped", False),
    ("file_huge_pages", "FileHugePages", False),
    ("z_swap", "Zswap", False),
    ("z_swapped", "Zswapped", False),
)


@dataclass(kw_only=True)
class Meminfo(FromRead):
    """Memory statistics; sizes are in bytes, unitless counts (such as huge pages) are as given."""

    mem_total: int
    mem_free: int
    mem_available: Optional[int] = None
    buffers: int
    cached: int
    swap_cached: int
    active: int
    inactive: int
    active_anon: Optional[int] = None
    inactive_anon: Optional[int] = None
    active_file: Optional[int] = None
    inactive_file: Optional[int] = None
    unevictable: Optional[int] = None
    mlocked: Optional[int] = None
    high_total: Optional[int] = None
    high_free: Optional[int] = None
    low_total: Optional[int] = None
    low_free: Optional[int] = None
    mmap_copy: Optional[int] = None
    swap_total: int
    swap_free: int
    dirty: int
    writeback: int
    anon_pages: Optional[int] = None
    mapped: int
    shmem: Optional[int] = None
    slab: int
    s_reclaimable: Optional[int] = None
    s_unreclaim: Optional[int] = None
    kernel_stack: Optional[int] = None
    page_tables: Optional[int] = None
    secondary_page_tables: Optional[int] = None
    quicklists: Optional[int] = None
    nfs_unstable: Optional[int] = None
    bounce: Optional[int] = None
    writeback_tmp: Optional[int] = None
    commit_limit: Optional[int] = None
    committed_as: int
    vmalloc_total: int
    vmalloc_used: int
    vmalloc_chunk: int
    hardware_corrupted: Optional[int] = None
    anon_hugepages: Optional[int] = None
    shmem_hugepages: Optional[int] = None
    shmem_pmd_mapped: Optional[int] = None
    cma_total: Optional[int] = None
    cma_free: Optional[int] = None
    hugepages_total: Optional[int] = None
    hugepages_free: Optional[int] = None
    hugepages_rsvd: Optional[int] = None
    hugepages_surp: Optional[int] = None
    hugepagesize: Optional[int] = None
    direct_map_4k: Optional[int] = None
    direct_map_4M: Optional[int] = None
    direct_map_2M: Optional[int] = None
    direct_map_1G: Optional[int] = None
    hugetlb: Optional[int] = None
    per_cpu: Optional[int] = None
    k_reclaimable: Optional[int] = None
    file_pmd_mapped: Optional[int] = None
    file_huge_pages: Optional[int] = None
    z_swap: Optional[int] = None
    z_swapped: Optional[int] = None

    @classmethod
    def from_read(cls, reader):
        values: Dict[str, int] = {}
        for line in _iter_lines(reader):
            if not line:
                continue
            fields = iter(line.split())
            name = expect(next(fields, None), "no field")
            value = _parse_u64(expect(next(fields, None), "no value"), name)
            unit = next(fields, None)
            if unit is not None:
                value = convert_to_bytes(value, unit)
            values[name[:-1]] = value

        kwargs = {}
        for attr, key, required in _FIELDS:
            value = values.pop(key, None)
            kwargs[attr] = expect(value, key) if required else value
        return cls(**kwargs)