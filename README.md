# dbbench

Small building blocks for benchmarking key-value stores. The only third-party
dependency is `psutil`.

## What is inside

- `dbbench.testdata` makes random data for the benchmarks.
  - `Dataset(size)` holds `size` random pairs. Each pair is a `KeyValue` named
    tuple with fields `key` and `val`, both 32 bytes. The default size is
    1,000,000.
  - `next_pair()` moves a cursor forward, wrapping to the start at the end, and
    returns the pair it lands on.
  - `pair_at(index)` returns one pair and raises `IndexError` when the index is
    out of range.
  - `iterator()` returns a `DataIterator`, which walks all pairs in order and
    can be rewound with `reset()`.
  - `generate_random_pair()` makes one pair from `secrets`.
  - `init_dataset(size)` builds a dataset and then removes the benchmark
    database directories (`/tmp/badger`, `/tmp/bolt`, `/tmp/mdbx`,
    `/tmp/rocksdb`).
  - `remove_database_paths(paths)` deletes the given files or directory trees.
    Paths that do not exist are skipped.
  - `batch_sizes()` returns `[1, 10, 100, 1000, 10000]`.
  - `total_entries()` returns `[1000, 10000, 100000, 1000000]`.
  - `shuffle(items)` shuffles a list in place using `random.SystemRandom`.
- `dbbench.mmap_util` maps files into memory.
  - `mmap_readonly(f, size)` and `mmap_rw(f, size)` map the first `size` bytes
    of an open file as shared memory. Each mapping is advised for random
    access.
  - `madvise_random`, `madvise_sequential`, `madvise_normal` and
    `madvise_will_need` give access hints. A hint the platform lacks is
    skipped, and so is `ENOSYS`.
  - `munmap(mapping)` closes a mapping and accepts `None`.
- `dbbench.memory` reports usable memory.
  - `total_memory()` returns the physical memory in bytes (from `psutil`). The
    result is lowered to the cgroup memory limit when one is set, and to the
    process's `RLIMIT_AS` soft limit when that is finite.
  - `cgroups_memory_limit(root)` reads the cgroup v1 or v2 limit under `root`
    (default `/sys/fs/cgroup`). It raises `CgroupsUnavailableError` when
    cgroups are not available. This includes hybrid setups and systems other
    than Linux.
- `dbbench.stages` stores sync-stage progress.
  - `SyncStage` is a string enum of stage names. `ALL_STAGES` lists the
    standard order.
  - `save_stage_progress`, `get_stage_progress`, `save_stage_data`,
    `get_stage_data`, `save_stage_prune_progress` and
    `get_stage_prune_progress` work on any object with
    `get_one(table, key)` and `put(table, key, value)` methods, using the
    table `"SyncStage"`.
  - Progress is an 8-byte big-endian unsigned integer (`encode_progress`,
    `decode_progress`). Empty data decodes to 0. Data shorter than 8 bytes
    raises `ValueError`.
- `dbbench.metrics` provides in-process metrics:
  - `parsing`: `parse_metric`, `parse_tags` and `validate_ident`.
  - `types`: `Counter`, `Gauge`, `Histogram`, `Summary`.
  - `registry`: the `MetricSet` registry, plus module-level functions that use
    a default set.
  - `timer`: `HistTimer`.
  - `exposition`: `render_text` for the Prometheus text format, and `setup`,
    which serves that text over HTTP.

## Test data

```python
from dbbench.testdata import Dataset, batch_sizes, shuffle

data = Dataset(1000)
assert len(data) == 1000

key, value = data.pair_at(0)
assert len(key) == 32 and len(value) == 32

for key, value in data.iterator():
    ...

sizes = batch_sizes()      # [1, 10, 100, 1000, 10000]
shuffle(sizes)             # in place
```

## Stage progress

```python
from dbbench.stages import SyncStage, get_stage_progress, save_stage_progress

class MemoryStore:
    def __init__(self):
        self.tables = {}
    def get_one(self, table, key):
        return self.tables.get(table, {}).get(key)
    def put(self, table, key, value):
        self.tables.setdefault(table, {})[key] = value

store = MemoryStore()
save_stage_progress(store, SyncStage.HEADERS, 42)
assert get_stage_progress(store, SyncStage.HEADERS) == 42
```

## Metrics

A metric name is an identifier. It may carry labels, for example
`db_commit_seconds{phase="write"}`:

```python
from dbbench.metrics.parsing import parse_metric
from dbbench.metrics.registry import default_set, get_or_create_counter, get_or_create_gauge
from dbbench.metrics.timer import HistTimer
from dbbench.metrics.exposition import render_text

name, labels = parse_metric('db_commit_seconds{phase="write"}')
# name == "db_commit_seconds", labels == {"phase": "write"}

puts = get_or_create_counter('db_puts_total{engine="memory"}')
puts.add_int(3)
print(puts.value())        # 3.0

size = get_or_create_gauge("db_size_bytes")
size.set_uint64(4096)

timer = HistTimer("db_batch_seconds", default_set())
...                        # the timed work
timer.put_since()

print(render_text(default_set()))
```

### How the metric types behave

- A `Counter` raises `ValueError` if asked to decrease.
- A `Histogram` uses Prometheus-style default buckets. `bucket_counts()`
  returns cumulative counts, and the last bucket is `inf`.
- A `Summary` keeps its observations for a sliding window, 300 seconds by
  default. `quantile_values()` returns each configured quantile, or NaN when
  the window is empty.
- Durations are measured with `time.monotonic()`.

### Registry errors

- A name that is not a valid identifier raises `MetricNameError`. So does a
  label list that cannot be parsed.
- Registering a name twice with a `new_*` function raises `ValueError`.
- The `get_or_create_*` functions return the metric already registered under
  that name. They raise `TypeError` if that metric is of a different type.

### Serving metrics over HTTP

`setup(address, metric_set)` takes an address of the form `"host:port"`. It
starts a `ThreadingHTTPServer` on a daemon thread and serves the text
exposition at `/debug/metrics/prometheus`. Any other path returns 404. The
server is returned so the caller can shut it down.

## What this package does not do

This package contains no benchmark runner and no command-line tool. It does
not bind to or drive any database engine. It gives you the data, memory-limit,
stage-progress and metrics pieces, and the code that opens the databases and
times the operations is yours to write.