from __future__ import annotations

import time


def wait_until(predicate, timeout: float, interval: float = 0.2):
    """Waits for a predicate to return a truthy value."""

    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        result = predicate()
        if result:
            return result
        time.sleep(interval)
    return predicate()


def poll(sample_fn, accept, timeout: float, interval: float = 0.2) -> tuple[bool, object]:
    """Samples ``sample_fn`` until ``accept`` holds for the sample or time runs out.

    Returns whether the condition held together with the last observed sample,
    so callers can report what they actually saw.
    """

    deadline = time.monotonic() + timeout
    while True:
        sample = sample_fn()
        if accept(sample):
            return True, sample
        if time.monotonic() >= deadline:
            return False, sample
        time.sleep(interval)
