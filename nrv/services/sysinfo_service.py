"""
System information probe.

Reads a few files under /proc. Anything missing or unreadable is reported
as "N/A" rather than failing the request.
"""

import logging
import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"


@dataclass
class SysInfo:
    """Host summary served by /api/sysinfo."""
    os: str
    arch: str
    kernel_version: str
    cpu_name: str
    num_cpu: int
    mem_total: str
    mem_used: str
    load_avg: str

    def to_dict(self) -> dict:
        return {
            "os": self.os,
            "arch": self.arch,
            "kernelVersion": self.kernel_version,
            "cpuName": self.cpu_name,
            "numCpu": self.num_cpu,
            "memTotal": self.mem_total,
            "memUsed": self.mem_used,
            "loadAvg": self.load_avg,
        }


def _read(path: Path) -> str:
    try:
        return path.read_text()
    except OSError as e:
        logger.debug(f"Could not read {path}: {e}")
        return ""


def get_kernel_version(proc_root: Path) -> str:
    fields = _read(proc_root / "version").split()
    return fields[2] if len(fields) > 2 else NOT_AVAILABLE


def get_cpu_name(proc_root: Path) -> str:
    for line in _read(proc_root / "cpuinfo").splitlines():
        if line.startswith("model name") and ":" in line:
            return line.split(":", 1)[1].strip()
    return NOT_AVAILABLE


def get_mem_info(proc_root: Path) -> Tuple[str, str]:
    """
    Total and used memory from meminfo.

    Returns:
        ("<total> GB", "<used> GB"), used = MemTotal - MemAvailable
    """
    mem_total = mem_available = 0
    for line in _read(proc_root / "meminfo").splitlines():
        fields = line.split()
        if len(fields) < 2 or not fields[1].isdigit():
            continue
        if fields[0] == "MemTotal:":
            mem_total = int(fields[1])
        elif fields[0] == "MemAvailable:":
            mem_available = int(fields[1])

    if mem_total == 0:
        return NOT_AVAILABLE, NOT_AVAILABLE

    # Values are in kB
    used = mem_total - mem_available
    return f"{mem_total / 1024 / 1024:.2f} GB", f"{used / 1024 / 1024:.2f} GB"


def get_load_avg(proc_root: Path) -> str:
    fields = _read(proc_root / "loadavg").split()
    return fields[0] if fields else NOT_AVAILABLE


def collect_sysinfo(proc_root: str = "/proc") -> SysInfo:
    """Gather the host summary."""
    root = Path(proc_root)
    mem_total, mem_used = get_mem_info(root)
    return SysInfo(
        os=platform.system().lower(),
        arch=platform.machine(),
        kernel_version=get_kernel_version(root),
        cpu_name=get_cpu_name(root),
        num_cpu=os.cpu_count() or 1,
        mem_total=mem_total,
        mem_used=mem_used,
        load_avg=get_load_avg(root),
    )
