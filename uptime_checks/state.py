from __future__ import annotations

import logging
import socket
from dataclasses import dataclass
from typing import Callable


LOGGER = logging.getLogger("uptime-monitor")


@dataclass
class MonitorState:
    """Counters kept for the lifetime of the process, never persisted."""

    hostname: str = ""
    error_count: int = 0
    run_count: int = 0


@dataclass
class BatchCounters:
    """Counters for a single pass over the endpoint list."""

    threshold_breach_count: int = 0
    failures: int = 0


def record_failure(
    state: MonitorState,
    *,
    resolve_hostname: Callable[[], str] = socket.gethostname,
) -> MonitorState:
    # error_count is never reset on success; it only grows for the life of the process.
    state.error_count += 1
    try:
        state.hostname = resolve_hostname()
    except OSError as e:
        LOGGER.warning("Hostname lookup failed error=%s", e)
    LOGGER.debug("State updated error_count=%s hostname=%s", state.error_count, state.hostname)
    return state


def record_run_completion(state: MonitorState) -> MonitorState:
    state.run_count += 1
    return state
