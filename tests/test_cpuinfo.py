from procparse.cpuinfo import CpuCore, CpuInfo

_BLOCK = """processor       : {n}
model name      : ARMv7 Processor rev 4 (v7l)
BogoMIPS        : 38.40
Features        : half thumb fastmult vfp edsp neon vfpv3 tls vfpv4 idiva idivt vfpd32 lpae evtstrm crc32
CPU implementer : 0x41
CPU architecture: 7
CPU variant     : 0x0
CPU part        : 0xd03
CPU revision    : 4

"""

RPI = "".join(_BLOCK.format(n=n) for n in range(4)) + """Hardware        : BCM2835
Revision        : a020d3
Serial          : 0000000012345678
Model           : Raspberry Pi 3 Model B Plus Rev 1.3
"""

X86 = """processor\t: 0
vendor_id\t: GenuineIntel
model name\t: Example CPU
physical id\t: 0
flags\t\t: fpu vme sse2

processor\t: 1
vendor_id\t: GenuineIntel
model name\t: Example CPU
physical id\t: 1
flags\t\t: fpu vme sse2
"""


def test_cpuinfo_rpi():
    info = CpuInfo.from_text(RPI)
    assert info.num_cores() == 4
    merged = info.get_info(0)
    for key in (
        "model name",
        "BogoMIPS",
        "Features",
        "CPU implementer",
        "CPU architecture",
        "CPU variant",
        "CPU part",
        "CPU revision",
    ):
        assert key in merged


def test_rpi_trailing_section_ignored():
    info = CpuInfo.from_text(RPI)
    assert "Hardware" not in info.fields
    assert all("Serial" not in cpu for cpu in info.cpus)


def test_rpi_iteration_matches_accessors():
    info = CpuInfo.from_text(RPI)
    cores = list(info)
    assert len(cores) == info.num_cores()
    for num, core in enumerate(cores):
        assert core.cpu_num == num
        assert core.model_name == info.model_name(num)
        assert core.vendor_id == info.vendor_id(num)
        assert core.physical_id == info.physical_id(num)
        assert core.flags == (info.flags(num) or [])


def test_common_and_specific_fields():
    info = CpuInfo.from_text(RPI)
    assert info.fields["model name"] == "ARMv7 Processor rev 4 (v7l)"
    assert info.cpus[2] == {"processor": "2"}
    assert info.get_field(3, "processor") == "3"
    assert info.get_field(3, "CPU part") == "0xd03"


def test_unknown_cpu_and_field():
    info = CpuInfo.from_text(RPI)
    assert info.get_info(4) is None
    assert info.get_field(4, "model name") is None
    assert info.get_field(0, "no such field") is None
    assert info.flags(0) is None
    assert info.vendor_id(0) is None


def test_x86_accessors():
    info = CpuInfo.from_text(X86)
    assert info.num_cores() == 2
    assert info.vendor_id(1) == "GenuineIntel"
    assert info.physical_id(0) == 0
    assert info.physical_id(1) == 1
    assert info.flags(0) == ["fpu", "vme", "sse2"]
    assert list(info)[1] == CpuCore(
        cpu_num=1,
        model_name="Example CPU",
        vendor_id="GenuineIntel",
        physical_id=1,
        flags=["fpu", "vme", "sse2"],
    )


def test_physical_id_not_a_number():
    info = CpuInfo.from_text("processor : 0\nphysical id : abc\n")
    assert info.physical_id(0) is None


def test_single_cpu_has_everything_common():
    info = CpuInfo.from_text("processor : 0\nvendor_id : Acme\n")
    assert info.num_cores() == 1
    assert info.cpus == [{}]
    assert info.get_info(0) == {"processor": "0", "vendor_id": "Acme"}