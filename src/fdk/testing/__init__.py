from .testbench import BENCH_BASE_URL, Testbench, TestbenchError

__all__ = ["BENCH_BASE_URL", "Testbench", "TestbenchError"]
