"""Storage throughput benchmarking with dd and fio."""

__version__ = "0.1.0"
