"""
Performance benchmarks for the TTAAII provider.
"""

import time
import statistics
from typing import Tuple

from ttaaii import CompletionOptions, TtaaiiProvider


def benchmark(func, iterations: int = 1000) -> Tuple[float, float, float]:
    """
    Run a benchmark and return timing statistics.

    Returns:
        (mean_ms, min_ms, max_ms)
    """
    times = []

    for _ in range(iterations):
        start = time.perf_counter()
        func()
        elapsed = time.perf_counter() - start
        times.append(elapsed * 1000)  # Convert to ms

    return (
        statistics.mean(times),
        min(times),
        max(times)
    )


def run_benchmarks():
    """Run all benchmarks and print results."""
    print("=" * 60)
    print("TTAAII Provider Benchmarks")
    print("=" * 60)
    print()

    provider = TtaaiiProvider()

    # Completion at each position, including synthesized tables
    completion_cases = [
        ("T1 (Table A)", ""),
        ("T2 (Table B1)", "F"),
        ("A1 country prefixes", "AC"),
        ("A1 country/station union", "SA"),
        ("A2 countries", "ACF"),
        ("ii D3 ranges", "FAUK"),
        ("ii generic 00-99", "SAUK"),
    ]

    print("Completion:")
    print("-" * 60)

    for name, input_str in completion_cases:
        mean, min_t, max_t = benchmark(
            lambda s=input_str: provider.complete(s),
            iterations=1000
        )
        print(f"  {name:30} {mean:8.3f}ms avg ({min_t:.3f}-{max_t:.3f})")

    print()
    print("Grouped completion:")
    print("-" * 60)

    options = CompletionOptions(group_by="continent")
    mean, min_t, max_t = benchmark(lambda: provider.complete("AC", options), iterations=500)
    print(f"  {'A1 by continent':30} {mean:8.3f}ms avg ({min_t:.3f}-{max_t:.3f})")

    print()
    print("Throughput test (1000 iterations):")
    print("-" * 60)

    headings = ["SAUK31", "FAUK50", "DTAA85", "SAWA01"]

    start = time.perf_counter()
    for _ in range(250):
        for heading in headings:
            provider.validate(heading)
            provider.decode(heading)
    total = time.perf_counter() - start

    throughput = 1000 / total
    print(f"  Throughput: {throughput:.0f} validate+decode/second")
    print(f"  Total time: {total:.3f}s for 1000 headings")

    print()
    print("=" * 60)


if __name__ == "__main__":
    run_benchmarks()
