#!/usr/bin/env python3
"""Smoke tests for a running wagmi service.

Each case posts a body to /wagmi and checks the status code and the keys of
the response. The burst helper fires a batch of concurrent requests to make
sure the service keeps answering under parallel load.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Tuple

import requests

from wagmi_lib import LANG

GREETING_KEYS = ['message', 'timestamp', 'lang']
RESULT_KEYS = ['result', 'a', 'b', 'status']
ERROR_KEYS = ['error']

SMOKE_CASES: List[Dict[str, Any]] = [
    {"name": "Ping Test (Empty Body)", "body": {}, "status": 200, "keys": GREETING_KEYS},
    {"name": "Ping Test (No Body)", "body": None, "status": 200, "keys": GREETING_KEYS},
    {"name": "Addition Test (Valid)", "body": {"a": 40, "b": 55}, "status": 200, "keys": RESULT_KEYS},
    {"name": "Addition Test (Edge Case - Sum = 100)", "body": {"a": 50, "b": 50}, "status": 200,
     "keys": RESULT_KEYS},
    {"name": "Addition Test (Invalid - Sum > 100)", "body": {"a": 60, "b": 50}, "status": 400,
     "keys": ERROR_KEYS},
    {"name": "Addition Test (Invalid - Negative)", "body": {"a": -5, "b": 20}, "status": 400,
     "keys": ERROR_KEYS},
    {"name": "Addition Test (Invalid - Missing b)", "body": {"a": 20}, "status": 400, "keys": ERROR_KEYS},
]


def _json_or_none(response):
    try:
        return response.json()
    except ValueError:
        return None


def check_case(client, case: Dict[str, Any]) -> Tuple[bool, str]:
    """
    Run a single smoke case.

    Args:
        client: A WagmiServiceClient pointed at the service
        case: One entry of SMOKE_CASES

    Returns:
        tuple: (passed, failure reason or empty string)
    """
    response = client.post_wagmi(case["body"])

    if response.status_code != case["status"]:
        return False, f"Expected status {case['status']}, got {response.status_code}"

    body = _json_or_none(response)
    if not isinstance(body, dict) or not all(key in body for key in case["keys"]):
        got = ', '.join(body) if isinstance(body, dict) else ''
        return False, f"Missing expected keys. Expected: {', '.join(case['keys'])}. Got: {got}"

    if "result" in case["keys"]:
        expected = case["body"]["a"] + case["body"]["b"]
        if body["result"] != expected:
            return False, f"Incorrect calculation. Expected: {expected}, got: {body['result']}"

    if "message" in case["keys"]:
        if body["message"] != "wagmi" or body["lang"] != LANG:
            return False, "Incorrect ping response values"

    return True, ""


def run_smoke_tests(client, cases=None, echo: Callable[[str], Any] = print) -> Tuple[int, int]:
    """
    Run every smoke case and report as we go.

    Returns:
        tuple: (passed, failed) counts
    """
    passed = failed = 0

    for case in cases if cases is not None else SMOKE_CASES:
        echo(f"Running: {case['name']}")
        try:
            ok, reason = check_case(client, case)
        except requests.exceptions.RequestException as e:
            ok, reason = False, str(e)

        if ok:
            echo("PASS")
            passed += 1
        else:
            echo(f"FAIL: {reason}")
            failed += 1
        echo("")

    return passed, failed


def run_burst(client, count: int = 100) -> Dict[str, Any]:
    """
    Send count concurrent requests, alternating ping and a valid addition.

    Returns:
        dict: successful count, total count, and elapsed milliseconds
    """
    bodies = [{} if i % 2 == 0 else {"a": 10, "b": 20} for i in range(count)]

    def send(body):
        try:
            return client.post_wagmi(body).status_code
        except requests.exceptions.RequestException:
            return None

    start = time.perf_counter()
    with ThreadPoolExecutor(max_workers=min(count, 100) or 1) as executor:
        statuses = list(executor.map(send, bodies))
    duration_ms = (time.perf_counter() - start) * 1000

    return {
        "successful": sum(1 for status in statuses if status == 200),
        "count": count,
        "duration_ms": duration_ms,
    }
