"""
ID generation utilities for JourneyForge.

Thread-safe unique identifiers for phase content, iteration events and
revisions.
"""

from __future__ import annotations

import threading
import time


# ============================================================================
# Thread-Safe Counter
# ============================================================================


class _ThreadSafeCounter:
    """Thread-safe incrementing counter."""

    def __init__(self):
        self._value = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        """Get the next counter value."""
        with self._lock:
            self._value += 1
            return self._value


_counter = _ThreadSafeCounter()


# ============================================================================
# ID Generation Functions
# ============================================================================


def generate_id(prefix: str = "") -> str:
    """Generate a unique identifier.

    Format: {prefix}_{timestamp}_{counter}

    Example:
        >>> generate_id("OBJ")
        "OBJ_1704067200_001"
    """
    timestamp = int(time.time())
    count = _counter.next()

    if prefix:
        return f"{prefix}_{timestamp}_{count:03d}"
    return f"{timestamp}_{count:03d}"


def generate_objective_id() -> str:
    return generate_id("OBJ")


def generate_activity_id() -> str:
    return generate_id("ACT")


def generate_deliverable_id() -> str:
    return generate_id("DEL")


def generate_iteration_id() -> str:
    """Generate an ID for an iteration event."""
    return generate_id("ITER")


def generate_revision_id() -> str:
    """Generate an ID for a stored revision."""
    return generate_id("REV")


def generate_session_id() -> str:
    """Generate an editing-session identifier."""
    return generate_id("SESS")

