import time

import pytest

from sysmond.collectors import (
    CPUUsageResult,
    DiskLoadResult,
    FileSystemUsage,
    LoadAverageResult,
)
from sysmond.result_map import ResultMap, average


def test_check_delete_old_data_correctly():
    start_time = int(time.time())
    crm = ResultMap(5, 1.0, clock=lambda: start_time + 1)

    for i in range(6):
        crm.add_cpu_stats(start_time - i, CPUUsageResult(float(i), float(i), float(i)))

    crm.run_clear_data_handler(start_time - 1)
    try:
        time.sleep(1.3)
    finally:
        crm.stop()

    for i in range(6):
        stored = crm.get_cpu_stats(start_time - i)
        if i < 5:
            assert stored == CPUUsageResult(float(i), float(i), float(i))
        else:
            assert stored is None

    stats = crm.get_avg_cpu_stats(start_time, 5)
    assert stats.user_mode == 2.0


def test_average_empty_is_zero():
    assert average([]) == 0


def test_average_rounds_half_away_from_zero():
    assert average([0.125]) == 0.13
    assert average([-0.125]) == -0.13


def test_average_of_values():
    assert average([1.0, 2.0]) == 1.5


def test_avg_cpu_none_without_data():
    assert ResultMap(5, 1.0).get_avg_cpu_stats(100, 5) is None


def test_avg_load_and_disk_zero_without_data():
    crm = ResultMap(5, 1.0)
    assert crm.get_avg_load_stats(100, 5) == LoadAverageResult()
    assert crm.get_avg_disk_load_stats(100, 5) == DiskLoadResult()


def test_avg_window_excludes_outside_seconds():
    crm = ResultMap(60, 1.0)
    crm.add_load_stats(100, LoadAverageResult(1.0, 2.0, 3.0))
    crm.add_load_stats(99, LoadAverageResult(3.0, 4.0, 5.0))
    crm.add_load_stats(98, LoadAverageResult(100.0, 100.0, 100.0))
    crm.add_load_stats(101, LoadAverageResult(100.0, 100.0, 100.0))
    assert crm.get_avg_load_stats(100, 2) == LoadAverageResult(2.0, 3.0, 4.0)


def test_avg_disk_load():
    crm = ResultMap(60, 1.0)
    crm.add_disk_load_stats(10, DiskLoadResult(2.0, 4.0, 6.0))
    crm.add_disk_load_stats(9, DiskLoadResult(4.0, 8.0, 12.0))
    assert crm.get_avg_disk_load_stats(10, 5) == DiskLoadResult(3.0, 6.0, 9.0)


def test_get_returns_stored_values():
    crm = ResultMap(60, 1.0)
    fs = {"/dev/sda1": FileSystemUsage("/dev/sda1", 1.0, 2.0, 3.0, 4.0)}
    crm.add_filesystem_stats(7, fs)
    crm.add_cpu_stats(7, CPUUsageResult(1.0, 2.0, 3.0))
    assert crm.get_filesystem_stats(7) == fs
    assert crm.get_cpu_stats(7) == CPUUsageResult(1.0, 2.0, 3.0)
    assert crm.get_cpu_stats(8) is None


def test_delete_stats_for_time_clears_every_kind():
    crm = ResultMap(60, 1.0)
    crm.add_cpu_stats(5, CPUUsageResult())
    crm.add_load_stats(5, LoadAverageResult())
    crm.add_disk_load_stats(5, DiskLoadResult())
    crm.add_filesystem_stats(5, {})
    crm.add_cpu_stats(6, CPUUsageResult(1.0, 1.0, 1.0))

    crm.delete_stats_for_time(5)

    assert [
        crm.get_cpu_stats(5),
        crm.get_load_stats(5),
        crm.get_disk_load_stats(5),
        crm.get_filesystem_stats(5),
    ] == [None, None, None, None]
    assert crm.get_cpu_stats(6) == CPUUsageResult(1.0, 1.0, 1.0)


def test_clear_handler_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        ResultMap(5, 0).run_clear_data_handler(0)