from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

import httpx


@dataclass(frozen=True)
class ProbeOutcome:
    url: str
    timestamp: datetime
    success: bool
    latency_ms: int
    error: str | None = None
    status_code: int | None = None


def format_timestamp(ts: datetime) -> str:
    # 2024.01.31-13.05.09:042
    return ts.strftime("%Y.%m.%d-%H.%M.%S") + f":{ts.microsecond // 1000:03d}"


def _elapsed_ms(started: float, finished: float) -> int:
    return max(0, int(round((finished - started) * 1000.0)))


async def probe_endpoint(
    client: httpx.AsyncClient,
    url: str,
    *,
    clock: Callable[[], float] = time.perf_counter,
) -> ProbeOutcome:
    """
    Issue one GET against ``url`` and time it.

    Only transport errors count as failures; any HTTP status is a success.
    The body is never read and the response is closed before returning.
    """
    timestamp = datetime.now()
    started = clock()
    try:
        async with client.stream("GET", url, follow_redirects=True) as resp:
            finished = clock()
            status_code = resp.status_code
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        return ProbeOutcome(
            url=url,
            timestamp=timestamp,
            success=False,
            latency_ms=_elapsed_ms(started, clock()),
            error=str(e) or type(e).__name__,
        )

    return ProbeOutcome(
        url=url,
        timestamp=timestamp,
        success=True,
        latency_ms=_elapsed_ms(started, finished),
        status_code=status_code,
    )
