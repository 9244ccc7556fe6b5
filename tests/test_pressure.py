import pytest

from procparse.core import IncompleteError
from procparse.pressure import (
    CpuPressure,
    IoPressure,
    MemoryPressure,
    parse_pressure_record,
)

SOME = "some avg10=2.10 avg60=0.12 avg300=0.00 total=391926"
FULL = "full avg10=2.10 avg60=0.12 avg300=0.00 total=391926"


def test_parse_pressure_record():
    record = parse_pressure_record(FULL)
    assert record.avg10 == pytest.approx(2.10)
    assert record.avg60 == pytest.approx(0.12)
    assert record.avg300 == pytest.approx(0.00)
    assert record.total == 391_926


@pytest.mark.parametrize(
    "line",
    [
        "avg10=2.10 avg60=0.12 avg300=0.00 total=391926",
        "some avg10=2.10 avg300=0.00 total=391926",
        "some avg10=2.10 avg60=0.00 avg300=0.00",
        "some avg10=x avg60=0.00 avg300=0.00 total=1",
        "some avg10=1 avg60=0.00 avg300=0.00 total=-1",
        "",
    ],
)
def test_parse_pressure_record_errors(line):
    with pytest.raises(IncompleteError):
        parse_pressure_record(line)


def test_cpu_pressure():
    pressure = CpuPressure.from_text(SOME + "\n")
    assert pressure.some.total == 391_926
    assert pressure.some.avg60 == pytest.approx(0.12)


def test_memory_pressure():
    pressure = MemoryPressure.from_text(SOME + "\n" + FULL.replace("391926", "5") + "\n")
    assert pressure.some.total == 391_926
    assert pressure.full.total == 5


def test_io_pressure_missing_full_line():
    with pytest.raises(IncompleteError):
        IoPressure.from_text(SOME + "\n")


def test_from_file_records_path(tmp_path):
    path = tmp_path / "io"
    path.write_text("garbage\n")
    with pytest.raises(IncompleteError) as info:
        IoPressure.from_file(path)
    assert info.value.path == str(path)


def test_from_file_ok(tmp_path):
    path = tmp_path / "io"
    path.write_text(SOME + "\n" + FULL + "\n")
    pressure = IoPressure.from_file(path)
    assert pressure.some == pressure.full