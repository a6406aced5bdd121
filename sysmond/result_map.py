"""Per-second storage of collected statistics with windowed averages."""

from __future__ import annotations

import math
import threading
import time
from typing import Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

from .collectors import (
    CPUUsageResult,
    DiskLoadResult,
    FilesystemInfoResult,
    LoadAverageResult,
)

_T = TypeVar("_T")


def average(values: Iterable[float]) -> float:
    """Mean of ``values`` rounded to two decimals, half away from zero; 0 if empty."""
    data = list(values)
    if not data:
        return 0.0
    scaled = sum(data) / len(data) * 100
    return math.copysign(math.floor(abs(scaled) + 0.5), scaled) / 100


class ResultMap:
    """Thread-safe store of statistics keyed by unix second."""

    def __init__(
        self,
        seconds_for_save_stats: int,
        clear_old_data_interval: float,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.seconds_for_save_stats = seconds_for_save_stats
        self.clear_old_data_interval = float(clear_old_data_interval)
        self._clock = clock

        self._cpu: Dict[int, CPUUsageResult] = {}
        self._cpu_lock = threading.Lock()
        self._load: Dict[int, LoadAverageResult] = {}
        self._load_lock = threading.Lock()
        self._disk: Dict[int, DiskLoadResult] = {}
        self._disk_lock = threading.Lock()
        self._filesystem: Dict[int, FilesystemInfoResult] = {}
        self._filesystem_lock = threading.Lock()

        self._cleaners: List[Tuple[threading.Thread, threading.Event]] = []

    def run_clear_data_handler(self, start_unix_time: int) -> None:
        """Start a background thread that drops entries older than the retention."""
        if self.clear_old_data_interval <= 0:
            raise ValueError("clear data interval must be positive")

        stop_event = threading.Event()
        oldest = start_unix_time - self.seconds_for_save_stats

        def clear_loop() -> None:
            nonlocal oldest
            while not stop_event.wait(self.clear_old_data_interval):
                limit = int(self._clock()) - self.seconds_for_save_stats
                for unix_time in range(oldest, limit):
                    self.delete_stats_for_time(unix_time)
                oldest = max(oldest, limit)

        thread = threading.Thread(target=clear_loop, name="result-map-cleaner", daemon=True)
        self._cleaners.append((thread, stop_event))
        thread.start()

    def stop(self) -> None:
        """Stop every clearing thread started on this map."""
        cleaners, self._cleaners = self._cleaners, []
        for _, stop_event in cleaners:
            stop_event.set()
        for thread, _ in cleaners:
            thread.join()

    @staticmethod
    def _window(
        getter: Callable[[int], Optional[_T]], unix_time: int, seconds_for_avg: int
    ) -> List[_T]:
        found = (getter(t) for t in range(unix_time, unix_time - seconds_for_avg, -1))
        return [result for result in found if result is not None]

    def add_cpu_stats(self, unix_time: int, result: CPUUsageResult) -> None:
        with self._cpu_lock:
            self._cpu[unix_time] = result

    def get_cpu_stats(self, unix_time: int) -> Optional[CPUUsageResult]:
        with self._cpu_lock:
            return self._cpu.get(unix_time)

    def get_avg_cpu_stats(
        self, unix_time: int, seconds_for_avg: int
    ) -> Optional[CPUUsageResult]:
        """Average over the seconds ending at ``unix_time``; None when no data."""
        results = self._window(self.get_cpu_stats, unix_time, seconds_for_avg)
        if not results:
            return None
        return CPUUsageResult(
            user_mode=average(r.user_mode for r in results),
            system_mode=average(r.system_mode for r in results),
            idle=average(r.idle for r in results),
        )

    def add_load_stats(self, unix_time: int, result: LoadAverageResult) -> None:
        with self._load_lock:
            self._load[unix_time] = result

    def get_load_stats(self, unix_time: int) -> Optional[LoadAverageResult]:
        with self._load_lock:
            return self._load.get(unix_time)

    def get_avg_load_stats(self, unix_time: int, seconds_for_avg: int) -> LoadAverageResult:
        """Average over the seconds ending at ``unix_time``; zeros when no data."""
        results = self._window(self.get_load_stats, unix_time, seconds_for_avg)
        return LoadAverageResult(
            one_min=average(r.one_min for r in results),
            five_min=average(r.five_min for r in results),
            fifteen_min=average(r.fifteen_min for r in results),
        )

    def add_disk_load_stats(self, unix_time: int, result: DiskLoadResult) -> None:
        with self._disk_lock:
            self._disk[unix_time] = result

    def get_disk_load_stats(self, unix_time: int) -> Optional[DiskLoadResult]:
        with self._disk_lock:
            return self._disk.get(unix_time)

    def get_avg_disk_load_stats(self, unix_time: int, seconds_for_avg: int) -> DiskLoadResult:
        """Average over the seconds ending at ``unix_time``; zeros when no data."""
        results = self._window(self.get_disk_load_stats, unix_time, seconds_for_avg)
        return DiskLoadResult(
            tps=average(r.tps for r in results),
            read_kbps=average(r.read_kbps for r in results),
            write_kbps=average(r.write_kbps for r in results),
        )

    def add_filesystem_stats(self, unix_time: int, result: FilesystemInfoResult) -> None:
        with self._filesystem_lock:
            self._filesystem[unix_time] = result

    def get_filesystem_stats(self, unix_time: int) -> Optional[FilesystemInfoResult]:
        with self._filesystem_lock:
            return self._filesystem.get(unix_time)

    def delete_stats_for_time(self, unix_time: int) -> None:
        """Remove every kind of statistic stored for ``unix_time``."""
        for lock, store in (
            (self._cpu_lock, self._cpu),
            (self._load_lock, self._load),
            (self._disk_lock, self._disk),
            (self._filesystem_lock, self._filesystem),
        ):
            with lock:
                store.pop(unix_time, None)