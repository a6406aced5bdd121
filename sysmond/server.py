"""Streaming statistics service over the collected results."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from .collectors import CPUUsageResult, DiskLoadResult, LoadAverageResult
from .result_map import ResultMap


class InvalidArgument(ValueError):
    """Raised when a stats request carries out-of-range parameters."""


@dataclass(frozen=True)
class StatsRequest:
    n: int
    m: int


@dataclass
class StatsResponse:
    cpu_usage: Optional[CPUUsageResult] = None
    load_average: Optional[LoadAverageResult] = None
    disk_load: Optional[DiskLoadResult] = None


class SystemMonitor:
    """Sends averaged statistics every N seconds, averaged over M seconds."""

    def __init__(
        self,
        results: ResultMap,
        *,
        clock: Callable[[], float] = time.time,
        seconds_per_tick: float = 1.0,
    ) -> None:
        self.results = results
        self._clock = clock
        self.seconds_per_tick = seconds_per_tick

    def validate(self, request: StatsRequest) -> None:
        if request.n < 3 or request.n > 60:
            raise InvalidArgument("N must be greater than 3 and less than 60")
        if request.m < 3 or request.m > 120:
            raise InvalidArgument("M must be greater than 3 and less than 120")

    def build_response(self, unix_time: int, seconds_for_avg: int) -> StatsResponse:
        """Collect the averages for the window ending at ``unix_time``."""
        return StatsResponse(
            cpu_usage=self.results.get_avg_cpu_stats(unix_time, seconds_for_avg),
            load_average=self.results.get_avg_load_stats(unix_time, seconds_for_avg),
            disk_load=self.results.get_avg_disk_load_stats(unix_time, seconds_for_avg),
        )

    def get_stats(
        self, request: StatsRequest, stop_event: threading.Event
    ) -> Iterator[StatsResponse]:
        """Validate ``request`` and return a stream that ends once ``stop_event`` is set."""
        self.validate(request)
        return self._stream(request, stop_event)

    def _stream(
        self, request: StatsRequest, stop_event: threading.Event
    ) -> Iterator[StatsResponse]:
        interval = request.n * self.seconds_per_tick
        while not stop_event.wait(interval):
            yield self.build_response(int(self._clock()), request.m)