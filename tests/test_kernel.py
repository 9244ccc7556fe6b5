import pytest

from procparse.core import InternalError, NotFoundError
from procparse.kernel import (
    ConfigSetting,
    KernelCmdline,
    KernelConfig,
    KernelModules,
    LoadAverage,
    VmStat,
)


def test_loadavg_from_reader():
    load = LoadAverage.from_text("2.63 1.00 1.42 3/4280 2496732")
    assert load.one == 2.63
    assert load.five == 1.00
    assert load.fifteen == 1.42
    assert load.max == 4280
    assert load.cur == 3
    assert load.latest_pid == 2496732


def test_loadavg_trailing_newline():
    load = LoadAverage.from_text("2.63 1.00 1.42 3/4280 2496732\n")
    assert load.latest_pid == 2496732


@pytest.mark.parametrize(
    "text",
    [
        "2.63 1.00 1.42 3/4280",
        "2.63 1.00 1.42 3-4280 2496732",
        "four 1.00 1.42 3/4280 2496732",
        "2.63 1.00 1.42 3/4280 -1",
        "",
    ],
)
def test_loadavg_errors(text):
    with pytest.raises(InternalError):
        LoadAverage.from_text(text)


def test_kernel_config():
    text = (
        "#\n"
        "# Automatically generated file\n"
        "CONFIG_64BIT=y\n"
        "CONFIG_EXT4_FS=m\n"
        'CONFIG_DEFAULT_HOSTNAME="(none)"\n'
        "# CONFIG_EXPERT is not set\n"
        "\n"
        "CONFIG_A=b=c\n"
    )
    config = KernelConfig.from_text(text)
    assert config.settings["CONFIG_64BIT"] is ConfigSetting.YES
    assert config.settings["CONFIG_EXT4_FS"] is ConfigSetting.MODULE
    assert config.settings["CONFIG_DEFAULT_HOSTNAME"] == '"(none)"'
    assert config.settings["CONFIG_A"] == "b=c"
    assert "CONFIG_EXPERT" not in config.settings
    assert len(config.settings) == 4


def test_vmstat():
    stats = VmStat.from_text("nr_free_pages 12345\nnr_zone_inactive_anon -7\n").stats
    assert stats == {"nr_free_pages": 12345, "nr_zone_inactive_anon": -7}


@pytest.mark.parametrize("text", ["nr_free_pages\n", "nr_free_pages abc\n"])
def test_vmstat_errors(text):
    with pytest.raises(InternalError):
        VmStat.from_text(text)


def test_kernel_modules():
    text = (
        "nf_nat 49152 2 xt_MASQUERADE,nft_chain_nat, Live 0x0000000000000000\n"
        "loop 32768 -1 - Unloading 0x0000000000000000\n"
    )
    modules = KernelModules.from_text(text).modules
    assert set(modules) == {"nf_nat", "loop"}
    nat = modules["nf_nat"]
    assert nat.name == "nf_nat"
    assert nat.size == 49152
    assert nat.refcount == 2
    assert nat.used_by == ["xt_MASQUERADE", "nft_chain_nat"]
    assert nat.state == "Live"
    loop = modules["loop"]
    assert loop.refcount == -1
    assert loop.used_by == []
    assert loop.state == "Unloading"


def test_kernel_modules_missing_state():
    with pytest.raises(InternalError):
        KernelModules.from_text("loop 32768 0 -\n")


def test_kernel_cmdline():
    cmdline = KernelCmdline.from_text("BOOT_IMAGE=/vmlinuz  root=/dev/sda1 ro quiet")
    assert cmdline.args == ["BOOT_IMAGE=/vmlinuz", "root=/dev/sda1", "ro", "quiet"]
    assert list(cmdline) == cmdline.args


def test_from_file_roundtrip(tmp_path):
    path = tmp_path / "loadavg"
    path.write_text("0.50 0.25 0.10 1/200 4242\n")
    load = LoadAverage.from_file(path)
    assert (load.cur, load.max, load.latest_pid) == (1, 200, 4242)


def test_from_file_missing(tmp_path):
    path = tmp_path / "absent"
    with pytest.raises(NotFoundError) as info:
        KernelCmdline.from_file(path)
    assert info.value.path == str(path)