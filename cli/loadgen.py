#!/usr/bin/env python3
"""Load generator for the wagmi service.

Sends batches of weighted requests to POST /wagmi at a target rate over a
pooled keep-alive session and collects latency statistics.
"""

import logging
import math
import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter

logger = logging.getLogger("loadgen")

SCENARIOS: List[Dict[str, Any]] = [
    {"name": "Ping", "data": {}, "weight": 70},
    {"name": "Valid Addition", "data": {"a": 25, "b": 30}, "weight": 20},
    {"name": "Invalid Addition", "data": {"a": 60, "b": 50}, "weight": 10},
]


def pick_scenario(scenarios=SCENARIOS, rng=random) -> Dict[str, Any]:
    """Pick a scenario with probability proportional to its weight."""
    roll = rng.random() * sum(s["weight"] for s in scenarios)
    cumulative = 0
    for scenario in scenarios:
        cumulative += scenario["weight"]
        if roll <= cumulative:
            return scenario
    return scenarios[0]


def percentile(sorted_values: List[float], p: float) -> Optional[float]:
    """Value at index floor(n * p) of an ascending list, p in [0, 1]."""
    if not sorted_values:
        return None
    index = min(int(len(sorted_values) * p), len(sorted_values) - 1)
    return sorted_values[index]


def assess(actual_rps: float, target_rps: float, errors: int, total: int) -> str:
    if actual_rps >= target_rps * 0.9 and errors < total * 0.05:
        return "EXCELLENT"
    if actual_rps >= target_rps * 0.7 and errors < total * 0.1:
        return "GOOD"
    return "NEEDS IMPROVEMENT"


class LoadStats:
    """Thread-safe request counters and response times."""

    def __init__(self):
        self._lock = threading.Lock()
        self.total = 0
        self.success = 0
        self.errors = 0
        self.timeouts = 0
        self.response_times: List[float] = []

    def record(self, status_code: Optional[int], response_ms: Optional[float], timed_out: bool = False):
        with self._lock:
            self.total += 1
            if response_ms is not None:
                self.response_times.append(response_ms)
            if status_code is not None and 200 <= status_code < 300:
                self.success += 1
            else:
                self.errors += 1
            if timed_out:
                self.timeouts += 1

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return {
                "total": self.total,
                "success": self.success,
                "errors": self.errors,
                "timeouts": self.timeouts,
            }

    def summary(self, target_rps: float, elapsed_s: float) -> Dict[str, Any]:
        """Aggregate the collected numbers into a report dictionary."""
        with self._lock:
            times = sorted(self.response_times)
            total = self.total
            success = self.success
            errors = self.errors
            timeouts = self.timeouts

        actual_rps = round(total / elapsed_s) if elapsed_s > 0 else 0
        return {
            "total": total,
            "success": success,
            "errors": errors,
            "timeouts": timeouts,
            "success_rate": (success / total * 100) if total else 0.0,
            "error_rate": (errors / total * 100) if total else 0.0,
            "elapsed_s": elapsed_s,
            "target_rps": target_rps,
            "actual_rps": actual_rps,
            "avg_ms": (sum(times) / len(times)) if times else None,
            "p50_ms": percentile(times, 0.5),
            "p95_ms": percentile(times, 0.95),
            "p99_ms": percentile(times, 0.99),
            "max_ms": times[-1] if times else None,
            "assessment": assess(actual_rps, target_rps, errors, total),
        }


class LoadGenerator:
    """Fires weighted /wagmi requests at a target rate."""

    def __init__(self, base_url: str, rps: int = 2000, duration: int = 5,
                 batch_size: int = 100, workers: int = 200, timeout: float = 5.0,
                 session: Optional[requests.Session] = None, rng=random):
        if rps <= 0 or duration <= 0 or batch_size <= 0 or workers <= 0:
            raise ValueError("rps, duration, batch_size and workers must be positive")

        self.base_url = base_url if base_url.endswith('/') else base_url + '/'
        self.rps = rps
        self.duration = duration
        self.batch_size = batch_size
        self.workers = workers
        self.timeout = timeout
        self.rng = rng
        self.total_requests = rps * duration
        self.stats = LoadStats()

        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(pool_connections=1, pool_maxsize=workers)
            session.mount('http://', adapter)
            session.mount('https://', adapter)
        self.session = session

    def check_server(self) -> bool:
        """Return True when GET / answers at all."""
        try:
            self.session.get(self.base_url, timeout=self.timeout)
            return True
        except requests.exceptions.RequestException as e:
            logger.error(f"Server not reachable at {self.base_url}: {e}")
            return False

    def send_one(self, data: Dict[str, Any]):
        url = urljoin(self.base_url, 'wagmi')
        start = time.perf_counter()
        try:
            response = self.session.post(url, json=data, timeout=self.timeout)
        except requests.exceptions.Timeout:
            self.stats.record(None, None, timed_out=True)
            return
        except requests.exceptions.RequestException as e:
            logger.debug(f"Request failed: {e}")
            self.stats.record(None, None)
            return
        self.stats.record(response.status_code, (time.perf_counter() - start) * 1000)

    def run(self, progress: Optional[Callable[[Dict[str, int]], Any]] = None,
            sleep: Callable[[float], Any] = time.sleep) -> Dict[str, Any]:
        """
        Send all batches, wait for them to finish and return the summary.

        Batches are started batch_size / rps seconds apart so the offered rate
        matches the target.

        Args:
            progress: Optional callback receiving a stats snapshot after each batch
            sleep: Sleep function, replaceable in tests

        Returns:
            dict: The summary produced by LoadStats.summary
        """
        interval = self.batch_size / self.rps
        total_batches = math.ceil(self.total_requests / self.batch_size)
        logger.info(f"Sending {self.total_requests} requests in {total_batches} batches "
                    f"to {self.base_url}wagmi")

        start = time.perf_counter()
        futures = []
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            for batch in range(total_batches):
                remaining = self.total_requests - batch * self.batch_size
                for _ in range(min(self.batch_size, remaining)):
                    scenario = pick_scenario(rng=self.rng)
                    futures.append(executor.submit(self.send_one, scenario["data"]))

                if progress is not None:
                    progress(self.stats.snapshot())

                delay = start + (batch + 1) * interval - time.perf_counter()
                if delay > 0 and batch + 1 < total_batches:
                    sleep(delay)

            wait(futures)

        elapsed = time.perf_counter() - start
        if progress is not None:
            progress(self.stats.snapshot())
        return self.stats.summary(self.rps, elapsed)

    def close(self):
        self.session.close()


def _ms(value):
    return "n/a" if value is None else f"{value:.2f}ms"


def format_report(summary: Dict[str, Any]) -> str:
    """Render a summary as the human-readable load test report."""
    lines = [
        "",
        " LOAD TEST RESULTS",
        "═" * 60,
        f" Total Requests: {summary['total']}",
        f" Successful: {summary['success']} ({summary['success_rate']:.1f}%)",
        f" Errors: {summary['errors']} ({summary['error_rate']:.1f}%)",
        f" Timeouts: {summary['timeouts']}",
        f" Total Time: {summary['elapsed_s']:.2f}s",
        f" Actual RPS: {summary['actual_rps']} (Target: {summary['target_rps']})",
        "",
        " RESPONSE TIMES:",
        f"   Average: {_ms(summary['avg_ms'])}",
        f"   Median (P50): {_ms(summary['p50_ms'])}",
        f"   P95: {_ms(summary['p95_ms'])}",
        f"   P99: {_ms(summary['p99_ms'])}",
        f"   Max: {_ms(summary['max_ms'])}",
        "",
        " PERFORMANCE ASSESSMENT:",
        f" {summary['assessment']}",
    ]
    return "\n".join(lines)
