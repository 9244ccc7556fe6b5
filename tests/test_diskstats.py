import pytest

from procparse.core import InternalError, NotFoundError
from procparse.diskstats import DiskStat, DiskStats

FULL_LINE = "   8       0 sda 1234 56 7890 123 456 78 9012 345 0 678 901 11 12 13 14 15 16"
OLD_LINE = "   8       1 sda1 100 2 300 4 500 6 700 8 0 9 10"


def test_full_line():
    stat = DiskStat.from_line(FULL_LINE)
    assert (stat.major, stat.minor, stat.name) == (8, 0, "sda")
    assert stat.reads == 1234
    assert stat.merged == 56
    assert stat.sectors_read == 7890
    assert stat.time_reading == 123
    assert stat.writes == 456
    assert stat.writes_merged == 78
    assert stat.sectors_written == 9012
    assert stat.time_writing == 345
    assert stat.in_progress == 0
    assert stat.time_in_progress == 678
    assert stat.weighted_time_in_progress == 901
    assert stat.discards == 11
    assert stat.discards_merged == 12
    assert stat.sectors_discarded == 13
    assert stat.time_discarding == 14
    assert stat.flushes == 15
    assert stat.time_flushing == 16


def test_old_kernel_line_has_no_optional_fields():
    stat = DiskStat.from_line(OLD_LINE)
    assert stat.name == "sda1"
    assert stat.weighted_time_in_progress == 10
    optional = (
        stat.discards,
        stat.discards_merged,
        stat.sectors_discarded,
        stat.time_discarding,
        stat.flushes,
        stat.time_flushing,
    )
    assert optional == (None,) * 6


def test_invalid_optional_field_becomes_none():
    stat = DiskStat.from_line(OLD_LINE + " x 12 -3 14")
    assert stat.discards is None
    assert stat.discards_merged == 12
    assert stat.sectors_discarded is None
    assert stat.time_discarding == 14
    assert stat.flushes is None


@pytest.mark.parametrize(
    "line",
    [
        "8 0 sda 1 2 3",
        "8 0",
        "x 0 sda 1 2 3 4 5 6 7 8 9 10 11",
        "8 0 sda -1 2 3 4 5 6 7 8 9 10 11",
        "",
    ],
)
def test_malformed_lines(line):
    with pytest.raises(InternalError):
        DiskStat.from_line(line)


def test_disk_stats_from_text():
    stats = DiskStats.from_text(FULL_LINE + "\n" + OLD_LINE + "\n")
    assert len(stats) == 2
    assert [s.name for s in stats] == ["sda", "sda1"]
    assert stats.stats[1] == DiskStat.from_line(OLD_LINE)


def test_disk_stats_from_file(tmp_path):
    path = tmp_path / "diskstats"
    path.write_text(OLD_LINE + "\n")
    stats = DiskStats.from_file(path)
    assert [s.minor for s in stats] == [1]


def test_disk_stats_missing_file(tmp_path):
    with pytest.raises(NotFoundError):
        DiskStats.from_file(tmp_path / "absent")