# sysmond

`sysmond` is a small library for sampling Linux system statistics, keeping a
short per-second history of them in memory, and computing averages over a
window of seconds.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Collectors

`sysmond.collectors` provides one collector per kind of statistic. Each has a
`collect()` method. If a source cannot be read or parsed, `collect()` raises
`CollectorError`.

- `CPUUsageCollector` reads `/proc/stat`. It returns a `CPUUsageResult` with the
  percentages `user_mode`, `system_mode` and `idle`. These are computed from the
  change since the previous sample. The first call only records a baseline and
  returns zeros.
- `LoadAverageCollector` reads `/proc/loadavg`. It returns a
  `LoadAverageResult` with `one_min`, `five_min` and `fifteen_min`.
- `DiskLoadCollector` reads `/proc/diskstats` and sums the counters of `sd*` and
  `nvme*` devices. It returns a `DiskLoadResult` with `tps`, `read_kbps` and
  `write_kbps`, counting sectors of 512 bytes. Rates are computed against the
  previous sample, and the first call returns zeros.
- `FilesystemInfoCollector` runs
  `df --exclude-type=tmpfs --exclude-type=efivarfs -m --output=source,used,pcent,iused,ipcent`.
  It returns a dict that maps each source to a `FileSystemUsage`.

The file paths, the `df` command and the disk collector's clock can all be
passed to the constructors. The parsers are also available on their own:
`parse_proc_stat`, `parse_loadavg`, `parse_diskstats` and `parse_df_output`.

## Configuration

`sysmond.config.load(path)` reads collector settings from a JSON object. The
default path is `config/config.json`. It returns a `Config`, whose `collectors`
field is a `CollectorsConfig`.

```json
{
  "secondsSaveStats": 60,
  "clearStatsSecondsInterval": 10,
  "enableCpuUsage": true,
  "enableLoadAverage": true,
  "enableDiskLoad": true,
  "enableFilesystemInfo": false
}
```

Keys that are not recognised are ignored. If the file is missing, holds
malformed JSON, or gives a value of the wrong type, `load` raises `ConfigError`.
`Config.grpc` is a `GrpcConfig` whose `port` defaults to 0. `Config.debug_mode`
is always `False`.

## Storing and averaging samples

`sysmond.result_map.ResultMap(seconds_for_save_stats, clear_old_data_interval)`
stores one result per Unix second for each kind of statistic. It is safe to use
from several threads.

```python
from sysmond.collectors import CPUUsageResult
from sysmond.result_map import ResultMap

results = ResultMap(60, 10)
results.add_cpu_stats(1700000000, CPUUsageResult(10.0, 5.0, 85.0))
print(results.get_avg_cpu_stats(1700000000, 5))
```

The averaging methods look at the `seconds_for_avg` seconds that end at
`unix_time`. They round each mean to two decimals, with halves rounded away
from zero. The functions behave differently when the window has no data:

- `get_avg_cpu_stats` returns `None`.
- `get_avg_load_stats` and `get_avg_disk_load_stats` return zeros.

`run_clear_data_handler(start_unix_time)` starts a background thread. Every
`clear_old_data_interval` seconds, that thread deletes entries older than
`seconds_for_save_stats`. `stop()` ends all such threads.

## Streaming statistics

`sysmond.server.SystemMonitor(results)` turns a `ResultMap` into a stream of
`StatsResponse` objects. A `StatsResponse` holds the CPU, load and disk
averages.

`get_stats(StatsRequest(n, m), stop_event)` checks the request first. `n` must
be between 3 and 60, and `m` must be between 3 and 120. If either is out of
range, it raises `InvalidArgument`. Otherwise it returns a generator that yields
a response every `n` ticks, averaged over `m` seconds. The generator stops once
`stop_event` is set. A tick lasts `seconds_per_tick` seconds, one second by
default. `build_response(unix_time, seconds_for_avg)` builds a single response
directly.

## What it does not do

`sysmond` has no command-line program and no long-running process that samples
collectors on a schedule. To keep a `ResultMap` filled, call the collectors
yourself, for example from your own thread. `SystemMonitor` produces its
responses in-process. It does not listen on a network port, so it is not a
network server.