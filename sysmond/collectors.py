"""Collectors that sample CPU, load average, disk and filesystem statistics."""

from __future__ import annotations

import math
import re
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Sequence, Tuple

SECTOR_SIZE = 512
"""Size of a disk sector in bytes, as counted by /proc/diskstats."""

DF_COMMAND: Tuple[str, ...] = (
    "df",
    "--exclude-type=tmpfs",
    "--exclude-type=efivarfs",
    "-m",
    "--output=source,used,pcent,iused,ipcent",
)

_UINT64_MOD = 2**64
_UINT_RE = re.compile(r"[0-9]+")
_DISK_PREFIXES = ("sd", "nvme")


class CollectorError(Exception):
    """Raised when a statistics source cannot be read or parsed."""


@dataclass
class CPUUsageResult:
    user_mode: float = 0.0
    system_mode: float = 0.0
    idle: float = 0.0


@dataclass
class LoadAverageResult:
    one_min: float = 0.0
    five_min: float = 0.0
    fifteen_min: float = 0.0


@dataclass
class DiskLoadResult:
    tps: float = 0.0
    read_kbps: float = 0.0
    write_kbps: float = 0.0


@dataclass
class FileSystemUsage:
    path: str = ""
    used_mb: float = 0.0
    used_pcent: float = 0.0
    used_inodes: float = 0.0
    used_inodes_pcent: float = 0.0


FilesystemInfoResult = Dict[str, FileSystemUsage]


def _parse_uint(text: str, what: str) -> int:
    if not _UINT_RE.fullmatch(text):
        raise CollectorError(f"failed to parse {what}: invalid syntax {text!r}")
    value = int(text)
    if value >= _UINT64_MOD:
        raise CollectorError(f"failed to parse {what}: value out of range {text!r}")
    return value


def _parse_float(text: str, what: str) -> float:
    try:
        return float(text)
    except ValueError as exc:
        raise CollectorError(f"failed to parse {what}: invalid syntax {text!r}") from exc


def _delta(current: int, previous: int) -> int:
    """Difference of two unsigned 64-bit counters, wrapping like the kernel's."""
    return (current - previous) % _UINT64_MOD


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return math.nan if numerator == 0 else math.inf
    return numerator / denominator


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise CollectorError(f"failed to read {path}: {exc}") from exc


def parse_proc_stat(text: str) -> Tuple[int, int, int]:
    """Return the aggregate (user, system, idle) jiffies from /proc/stat text."""
    cpu_line = next((line for line in text.split("\n") if line.startswith("cpu ")), None)
    if not cpu_line:
        raise CollectorError("failed to find CPU stats in /proc/stat")

    fields = cpu_line.split()
    if len(fields) < 5:
        raise CollectorError("unexpected format in /proc/stat")

    user = _parse_uint(fields[1], "user time")
    system = _parse_uint(fields[3], "system time")
    idle = _parse_uint(fields[4], "idle time")
    return user, system, idle


def parse_loadavg(text: str) -> LoadAverageResult:
    """Parse the three load averages from /proc/loadavg text."""
    parts = text.split()
    if len(parts) < 3:
        raise CollectorError("unexpected format in /proc/loadavg")
    return LoadAverageResult(
        one_min=_parse_float(parts[0], "1-minute load average"),
        five_min=_parse_float(parts[1], "5-minute load average"),
        fifteen_min=_parse_float(parts[2], "15-minute load average"),
    )


def parse_diskstats(text: str) -> Tuple[int, int, int]:
    """Return total (read sectors, written sectors, I/Os) over physical disks."""
    total_read = total_write = total_ios = 0
    for line in text.split("\n"):
        fields = line.split()
        if len(fields) < 14:
            continue
        if not fields[2].startswith(_DISK_PREFIXES):
            continue

        read_sectors = _parse_uint(fields[5], "read sectors")
        write_sectors = _parse_uint(fields[9], "write sectors")
        ios = _parse_uint(fields[3], "IOs")

        total_read = (total_read + read_sectors) % _UINT64_MOD
        total_write = (total_write + write_sectors) % _UINT64_MOD
        total_ios = (total_ios + ios) % _UINT64_MOD
    return total_read, total_write, total_ios


def parse_df_output(text: str) -> FilesystemInfoResult:
    """Parse `df --output=source,used,pcent,iused,ipcent` output keyed by source."""
    result: FilesystemInfoResult = {}
    for line in text.split("\n")[1:]:
        fields = line.split()
        if len(fields) < 5:
            continue

        source = fields[0]
        used = _parse_uint(fields[1], "used")
        used_pcent = _parse_float(fields[2].removesuffix("%"), "used percent")
        inodes_used = _parse_uint(fields[3], "inodes used")
        inodes_pcent = _parse_float(
            fields[4].removesuffix("%").replace("-", "0", 1), "inodes percent"
        )

        result[source] = FileSystemUsage(
            path=source,
            used_mb=float(used),
            used_pcent=used_pcent,
            used_inodes=float(inodes_used),
            used_inodes_pcent=inodes_pcent,
        )
    return result


class CPUUsageCollector:
    """Computes CPU usage shares from the change in /proc/stat between samples."""

    def __init__(self, path: str | Path = "/proc/stat") -> None:
        self.path = Path(path)
        self._prev_user = 0
        self._prev_system = 0
        self._prev_idle = 0
        self._prev_total = 0

    def collect(self) -> CPUUsageResult:
        """Take a sample; the first one only sets the baseline and returns zeros."""
        user, system, idle = parse_proc_stat(_read_text(self.path))
        total = (user + system + idle) % _UINT64_MOD

        if self._prev_total == 0:
            self._prev_user, self._prev_system = user, system
            self._prev_idle, self._prev_total = idle, total
            return CPUUsageResult()

        delta_user = _delta(user, self._prev_user)
        delta_system = _delta(system, self._prev_system)
        delta_idle = _delta(idle, self._prev_idle)
        delta_total = _delta(total, self._prev_total)

        self._prev_user, self._prev_system = user, system
        self._prev_idle, self._prev_total = idle, total

        return CPUUsageResult(
            user_mode=_ratio(delta_user, delta_total) * 100,
            system_mode=_ratio(delta_system, delta_total) * 100,
            idle=_ratio(delta_idle, delta_total) * 100,
        )


class LoadAverageCollector:
    """Reads the system load averages."""

    def __init__(self, path: str | Path = "/proc/loadavg") -> None:
        self.path = Path(path)

    def collect(self) -> LoadAverageResult:
        return parse_loadavg(_read_text(self.path))


class DiskLoadCollector:
    """Computes disk transfers and throughput from the change in /proc/diskstats."""

    def __init__(
        self,
        path: str | Path = "/proc/diskstats",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.path = Path(path)
        self._clock = clock
        self._prev_read = 0
        self._prev_write = 0
        self._prev_ios = 0
        self._prev_time = 0

    def collect(self) -> DiskLoadResult:
        """Take a sample; the first one only sets the baseline and returns zeros."""
        total_read, total_write, total_ios = parse_diskstats(_read_text(self.path))
        current_time = int(self._clock())

        if self._prev_time == 0:
            self._prev_read, self._prev_write = total_read, total_write
            self._prev_ios, self._prev_time = total_ios, current_time
            return DiskLoadResult()

        delta_read = _delta(total_read, self._prev_read)
        delta_write = _delta(total_write, self._prev_write)
        delta_ios = _delta(total_ios, self._prev_ios)
        delta_time = float(current_time - self._prev_time)

        self._prev_read, self._prev_write = total_read, total_write
        self._prev_ios, self._prev_time = total_ios, current_time

        read_bytes = (delta_read * SECTOR_SIZE) % _UINT64_MOD
        write_bytes = (delta_write * SECTOR_SIZE) % _UINT64_MOD
        return DiskLoadResult(
            tps=_ratio(delta_ios, delta_time),
            read_kbps=_ratio(read_bytes / 1024.0, delta_time),
            write_kbps=_ratio(write_bytes / 1024.0, delta_time),
        )


class FilesystemInfoCollector:
    """Reports per-filesystem space and inode usage as printed by df."""

    def __init__(self, command: Sequence[str] = DF_COMMAND) -> None:
        self.command = tuple(command)

    def collect(self) -> FilesystemInfoResult:
        try:
            completed = subprocess.run(
                list(self.command), capture_output=True, check=True
            )
        except (OSError, subprocess.CalledProcessError) as exc:
            raise CollectorError(f"failed to run df: {exc}") from exc
        return parse_df_output(completed.stdout.decode("utf-8", errors="replace"))