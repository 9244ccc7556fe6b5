import pytest

from procparse.core import ExplicitSystemInfo, InternalError
from procparse.iomem import Iomem, PhysicalMemoryMap

IOMEM = """00000000-00000fff : Reserved
00001000-0009fbff : System RAM
00100000-bffdffff : System RAM
  01000000-01e00cd0 : Kernel code
    01e00cd1-0260003f : Kernel data
"""


def _info(page_size):
    return ExplicitSystemInfo(boot_time_secs=0, ticks_per_second=100, page_size=page_size, is_little_endian=True)


def test_iomem_parse():
    iomem = Iomem.from_text(IOMEM)
    assert len(iomem) == 5
    assert [indent for indent, _ in iomem] == [0, 0, 0, 1, 2]
    names = [m.name for _, m in iomem]
    assert names[3] == "Kernel code"
    assert names[1] == "System RAM"


def test_from_line_address():
    indent, mapping = PhysicalMemoryMap.from_line("  01000000-01e00cd0 : Kernel code")
    assert indent == 1
    assert mapping.address == (0x01000000, 0x01E00CD0)
    assert mapping.name == "Kernel code"


def test_from_line_missing_name():
    with pytest.raises(InternalError):
        PhysicalMemoryMap.from_line("00000000-00000fff")


def test_from_line_bad_address():
    with pytest.raises(InternalError):
        PhysicalMemoryMap.from_line("zz-00000fff : Reserved")


@pytest.mark.parametrize("page_size", [4096, 65536])
def test_get_range_invariant(page_size):
    _, mapping = PhysicalMemoryMap.from_line("00100000-bffdffff : System RAM")
    start, end = mapping.get_range(_info(page_size))
    assert start * page_size == mapping.address[0]
    assert end * page_size == mapping.address[1] + 1
    assert start < end


def test_get_range_first_page():
    _, mapping = PhysicalMemoryMap.from_line("00000000-00000fff : Reserved")
    assert mapping.get_range(_info(4096)) == (0, 1)


def test_iomem_from_file(tmp_path):
    path = tmp_path / "iomem"
    path.write_text(IOMEM)
    assert Iomem.from_file(path) == Iomem.from_text(IOMEM)