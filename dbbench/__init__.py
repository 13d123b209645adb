"""Building blocks for key-value database benchmarks: test data, mmap, memory limits, stages and metrics."""

__version__ = "0.1.0"