"""
Unit tests for the system information probe.

Uses a fake /proc tree under tmp_path.
"""

import pytest

from nrv.services import collect_sysinfo
from nrv.services.sysinfo_service import NOT_AVAILABLE, get_mem_info


@pytest.fixture
def proc_root(tmp_path):
    root = tmp_path / "proc"
    root.mkdir()
    (root / "version").write_text(
        "Linux version 6.1.0-18-amd64 (debian-kernel@lists.debian.org) (gcc-12) #1 SMP\n"
    )
    (root / "cpuinfo").write_text(
        "processor\t: 0\n"
        "vendor_id\t: GenuineIntel\n"
        "model name\t: Intel(R) Xeon(R) CPU E5-2680 v4 @ 2.40GHz\n"
        "\n"
        "processor\t: 1\n"
        "model name\t: Intel(R) Xeon(R) CPU E5-2680 v4 @ 2.40GHz\n"
    )
    (root / "meminfo").write_text(
        "MemTotal:       16777216 kB\n"
        "MemFree:         1048576 kB\n"
        "MemAvailable:    4194304 kB\n"
    )
    (root / "loadavg").write_text("0.42 0.36 0.30 1/123 4567\n")
    return root


class TestSysInfo:

    @pytest.mark.unit
    def test_collect(self, proc_root):
        info = collect_sysinfo(str(proc_root))

        assert info.kernel_version == "6.1.0-18-amd64"
        assert info.cpu_name == "Intel(R) Xeon(R) CPU E5-2680 v4 @ 2.40GHz"
        assert info.mem_total == "16.00 GB"
        assert info.mem_used == "12.00 GB"
        assert info.load_avg == "0.42"
        assert info.num_cpu >= 1

    @pytest.mark.unit
    def test_missing_proc_reports_not_available(self, tmp_path):
        info = collect_sysinfo(str(tmp_path / "missing"))

        assert info.kernel_version == NOT_AVAILABLE
        assert info.cpu_name == NOT_AVAILABLE
        assert info.mem_total == NOT_AVAILABLE
        assert info.mem_used == NOT_AVAILABLE
        assert info.load_avg == NOT_AVAILABLE

    @pytest.mark.unit
    def test_garbled_meminfo(self, proc_root):
        (proc_root / "meminfo").write_text("MemTotal: lots\nnonsense\n")

        assert get_mem_info(proc_root) == (NOT_AVAILABLE, NOT_AVAILABLE)

    @pytest.mark.unit
    def test_to_dict_keys(self, proc_root):
        data = collect_sysinfo(str(proc_root)).to_dict()

        assert set(data) == {
            "os", "arch", "kernelVersion", "cpuName",
            "numCpu", "memTotal", "memUsed", "loadAvg"
        }
