# procparse

Data structures and parsers for the files of the Linux `/proc` pseudo-filesystem.

Every parser works on any text stream, so the same code reads live files under
`/proc` as well as saved copies or plain strings in tests.

## Installation

```
pip install procparse
```

## Reading files

Types that parse a whole `/proc` file share three class methods: `from_read` takes
an open text stream, `from_text` takes a string and `from_file` takes a path.

```python
from procparse.meminfo import Meminfo
from procparse.kernel import LoadAverage
from procparse.cpuinfo import CpuInfo

mem = Meminfo.from_file("/proc/meminfo")
print(mem.mem_total, mem.mem_available)  # sizes in bytes

load = LoadAverage.from_text("2.63 1.00 1.42 3/4280 2496732")
print(load.one, load.cur, load.max, load.latest_pid)

cpus = CpuInfo.from_file("/proc/cpuinfo")
print(cpus.num_cores(), cpus.model_name(0))
for core in cpus:  # CpuCore objects
    print(core.cpu_num, core.vendor_id, core.flags)
```

Some files need facts about the running system: the clock tick rate, the page size
or the byte order. Pass them as a `SystemInfo`; `ExplicitSystemInfo` holds values you
give it:

```python
from procparse.core import ExplicitSystemInfo, boot_time
from procparse.cpustat import KernelStats
from procparse.net import TcpNetEntries

info = ExplicitSystemInfo(
    boot_time_secs=1_700_000_000,
    ticks_per_second=100,
    page_size=4096,
    is_little_endian=True,
)

stats = KernelStats.from_file("/proc/stat", info)
print(stats.total.user_ms(), stats.total.idle_duration(), stats.ctxt)

for entry in TcpNetEntries.from_file("/proc/net/tcp", info):
    ip, port = entry.local_address
    print(ip, port, entry.state.name)

print(boot_time(info))  # aware datetime in the local time zone
```

Single lines can be parsed too, for example `DiskStat.from_line`, `Lock.from_line`,
`Key.from_line`, `DeviceStatus.from_line`, `PhysicalMemoryMap.from_line`,
`CpuTime.from_line` and `procparse.pressure.parse_pressure_record`.

## What is covered

| Module | Files |
| --- | --- |
| `procparse.cgroups` | `/proc/cgroups`, `/proc/<pid>/cgroup` |
| `procparse.cpuinfo` | `/proc/cpuinfo` |
| `procparse.cpustat` | `/proc/stat` |
| `procparse.diskstats` | `/proc/diskstats` |
| `procparse.iomem` | `/proc/iomem` |
| `procparse.kernel` | `/proc/loadavg`, kernel config text, `/proc/vmstat`, `/proc/modules`, `/proc/cmdline` |
| `procparse.keyring` | `/proc/keys`, `/proc/key-users` |
| `procparse.locks` | `/proc/locks` |
| `procparse.meminfo` | `/proc/meminfo` |
| `procparse.mounts` | `/proc/mounts` |
| `procparse.net` | `/proc/net/tcp`, `tcp6`, `udp`, `udp6`, `unix`, `arp`, `dev`, `route` |
| `procparse.pressure` | `/proc/pressure/cpu`, `memory`, `io` |

Values that the kernel writes as a fixed set of words become enums (`TcpState`,
`LockType`, `KeyType`, `ConfigSetting` and others); values outside that set are kept
as plain strings where the file allows them.

## Errors

All errors derive from `procparse.core.ProcError`. When `from_file` cannot open a
file, a missing file raises `NotFoundError`, an unreadable one raises
`PermissionDeniedError` and other I/O failures raise `ProcIOError`; each carries the
path in `.path`. Input that cannot be parsed raises `InternalError`, with a message
naming the field that failed. Malformed pressure data raises `IncompleteError`;
reading the file again may help. `error_from_os` converts an `OSError` the same way.

## What it does not do

- It does not find out system information by itself: `SystemInfo` values must be
  supplied, for example through `ExplicitSystemInfo`.
- It parses files; it does not list processes or walk `/proc/<pid>` directories.
- `KernelConfig` parses configuration text; it does not decompress
  `/proc/config.gz`.
- There is no command-line tool.

## Running the tests

```
pip install -e ".[test]"
pytest
```