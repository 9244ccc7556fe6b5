import pytest

from procparse.cgroups import CGroupControllers, ProcessCGroups
from procparse.core import InternalError

CONTROLLERS = """#subsys_name\thierarchy\tnum_cgroups\tenabled
cpuset\t2\t1\t1
cpu\t3\t64\t1
memory\t0\t80\t0
"""

PROCESS = """12:cpuset:/
4:cpu,cpuacct:/user.slice
0::/user.slice/user-1000.slice/session-2.scope
"""


def test_controllers_parse():
    parsed = CGroupControllers.from_text(CONTROLLERS)
    assert [c.name for c in parsed.controllers] == ["cpuset", "cpu", "memory"]
    cpu = parsed.controllers[1]
    assert (cpu.hierarchy, cpu.num_cgroups, cpu.enabled) == (3, 64, True)
    assert parsed.controllers[2].enabled is False


def test_controllers_skip_comments_only():
    assert CGroupControllers.from_text("#only a header\n").controllers == []


def test_controllers_missing_field():
    with pytest.raises(InternalError):
        CGroupControllers.from_text("cpu\t3\t64\n")


def test_controllers_bad_number():
    with pytest.raises(InternalError):
        CGroupControllers.from_text("cpu\tx\t64\t1\n")


def test_process_cgroups_parse():
    parsed = ProcessCGroups.from_text(PROCESS)
    assert len(parsed) == 3
    entries = list(parsed)
    assert entries[0].hierarchy == 12
    assert entries[1].controllers == ["cpu", "cpuacct"]
    assert entries[1].pathname == "/user.slice"


def test_process_cgroups_v2_has_empty_controller():
    entry = next(iter(ProcessCGroups.from_text("0::/\n")))
    assert entry.hierarchy == 0
    assert entry.controllers == [""]
    assert entry.pathname == "/"


def test_process_cgroups_path_keeps_colons():
    entry = next(iter(ProcessCGroups.from_text("1:name=systemd:/a:b\n")))
    assert entry.controllers == ["name=systemd"]
    assert entry.pathname == "/a:b"


def test_process_cgroups_missing_path():
    with pytest.raises(InternalError):
        ProcessCGroups.from_text("1:cpu\n")


def test_process_cgroups_bad_hierarchy():
    with pytest.raises(InternalError):
        ProcessCGroups.from_text("x:cpu:/\n")