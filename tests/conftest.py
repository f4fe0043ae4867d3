"""Shared test fixtures for iobench tests."""
import json

import pytest

from iobench.core.config import BenchConfig, set_config
from iobench.core.runner import CommandResult, ToolRunner

DD_WRITE_OUTPUT = """1024+0 records in
1024+0 records out
1073741824 bytes (1.1 GB, 1.0 GiB) copied, 11.0817 s, 96.9 MB/s
"""

DD_READ_OUTPUT = """1024+0 records in
1024+0 records out
1073741824 bytes (1.1 GB, 1.0 GiB) copied, 0.512 s, 2.1 GB/s
"""

FIO_RANDRW_OUTPUT = """io_test: (g=0): rw=randrw, bs=(R) 4096B-4096B, (W) 4096B-4096B, (T) 4096B-4096B, ioengine=psync, iodepth=1
...
fio-3.28
Starting 4 processes
io_test: (groupid=0, jobs=4): err= 0: pid=4242: Mon Jan  8 10:00:00 2024
  read: IOPS=803, BW=3215KiB/s (3292kB/s)(94.2MiB/30001msec)
  write: IOPS=805, BW=3220KiB/s (3297kB/s)(94.3MiB/30001msec)

Run status group 0 (all jobs):
   READ: bw=3215KiB/s (3292kB/s), 3215KiB/s-3215KiB/s (3292kB/s-3292kB/s), io=94.2MiB (98.8MB), run=30001-30001msec
  WRITE: bw=3220KiB/s (3297kB/s), 3220KiB/s-3220KiB/s (3297kB/s-3297kB/s), io=94.3MiB (98.9MB), run=30001-30001msec
"""


def fio_json(bandwidths, errors=None):
    """fio --output-format=json document; bandwidths maps job name to KiB/s."""
    errors = errors or {}
    jobs = []
    for name, bw in bandwidths.items():
        section = "write" if "write" in name else "read"
        other = "read" if section == "write" else "write"
        jobs.append({
            "jobname": name,
            "groupid": len(jobs),
            "error": errors.get(name, 0),
            section: {"bw": bw, "iops": bw / 4},
            other: {"bw": 0, "iops": 0},
        })
    return json.dumps({"fio version": "fio-3.28", "jobs": jobs})


class FakeRunner(ToolRunner):
    """ToolRunner that answers from a responder instead of running binaries."""

    def __init__(self, responder, config=None):
        super().__init__(config or BenchConfig())
        self.responder = responder
        self.calls = []
        self.required = []

    def require(self, *tools):
        self.required.extend(tools)

    def run(self, args, timeout=None):
        args = [str(a) for a in args]
        self.calls.append(args)
        response = self.responder(args)
        if isinstance(response, Exception):
            raise response
        return response


def ok(stdout="", stderr="", args=None):
    return CommandResult(args=args or ["tool"], stdout=stdout, stderr=stderr, returncode=0)


def failed(stderr="", returncode=1, args=None):
    return CommandResult(args=args or ["tool"], stdout="", stderr=stderr, returncode=returncode)


@pytest.fixture(autouse=True)
def reset_global_config(monkeypatch):
    """Keep the process-wide config and IOBENCH_* env out of each test."""
    for var in ("IOBENCH_REPEAT", "IOBENCH_COMMAND_TIMEOUT", "IOBENCH_JOBS",
                "IOBENCH_FIO_SIZE", "IOBENCH_QUICK_DIR", "IOBENCH_CONFIG"):
        monkeypatch.delenv(var, raising=False)
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def bench_config():
    """Two repetitions, short timeout."""
    return BenchConfig(repeat=2, command_timeout=30)
