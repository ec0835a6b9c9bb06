from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable

import httpx

from uptime_checks.alerts import collect_alerts
from uptime_checks.config import MonitorConfig
from uptime_checks.notifier import notify
from uptime_checks.probe import ProbeOutcome, format_timestamp, probe_endpoint
from uptime_checks.recorder import append_log_line, append_metric, truncate_metrics
from uptime_checks.settings import MonitorSettings
from uptime_checks.state import BatchCounters, MonitorState, record_failure, record_run_completion


LOGGER = logging.getLogger("uptime-monitor")

Sleep = Callable[[float], Awaitable[None]]
Clock = Callable[[], float]


def _record_outcome(settings: MonitorSettings, outcome: ProbeOutcome, index: int) -> None:
    if outcome.success:
        append_log_line(settings.log_path, "CHECK_OK:", f"{outcome.url} status {outcome.status_code}")
    else:
        append_log_line(settings.log_path, "CHECK_ERROR:", f"{outcome.url} error: {outcome.error}")
    append_log_line(
        settings.log_path,
        "DURATION:",
        f"{outcome.url} Duration(ms) {outcome.latency_ms} threshold {settings.threshold_ms}",
    )

    # The metrics file only ever holds the current pass.
    if index == 0:
        truncate_metrics(settings.metrics_path)
    append_metric(settings.metrics_path, outcome.url, outcome.latency_ms)


async def check_endpoints(
    client: httpx.AsyncClient,
    config: MonitorConfig,
    settings: MonitorSettings,
    state: MonitorState,
    *,
    clock: Clock = time.perf_counter,
) -> MonitorState:
    """Probe every endpoint once, in config order, and alert on what the pass observes."""
    batch = BatchCounters()
    if settings.verbose:
        LOGGER.debug("Pass start urls=%s error_count=%s run_count=%s", config.servers, state.error_count, state.run_count)

    for index, url in enumerate(config.servers):
        outcome = await probe_endpoint(client, url, clock=clock)

        if outcome.success:
            LOGGER.info(
                "CHECK_OK url=%s status_code=%s duration_ms=%s",
                url,
                outcome.status_code,
                outcome.latency_ms,
            )
        else:
            record_failure(state)
            batch.failures += 1
            LOGGER.warning(
                "CHECK_ERROR url=%s error_count=%s error_alert_threshold=%s error=%s date=%s",
                url,
                state.error_count,
                settings.error_alert_threshold,
                outcome.error,
                format_timestamp(outcome.timestamp),
            )

        alerts = collect_alerts(
            outcome,
            state,
            batch,
            threshold_ms=settings.threshold_ms,
            error_alert_threshold=settings.error_alert_threshold,
        )
        if outcome.latency_ms > settings.threshold_ms:
            LOGGER.info(
                "Over threshold url=%s duration_ms=%s threshold_ms=%s breach_count=%s",
                url,
                outcome.latency_ms,
                settings.threshold_ms,
                batch.threshold_breach_count,
            )

        _record_outcome(settings, outcome, index)

        for message in alerts:
            append_log_line(settings.log_path, "ALERT:", message)
            LOGGER.warning("%s", message)
            await notify(client, config, message, connectivity_url=settings.connectivity_url)

        if settings.verbose:
            LOGGER.debug(
                "After probe url=%s pass_failures=%s error_count=%s run_count=%s",
                url,
                batch.failures,
                state.error_count,
                state.run_count,
            )

    record_run_completion(state)
    return state


async def run_cycle(
    client: httpx.AsyncClient,
    config: MonitorConfig,
    settings: MonitorSettings,
    state: MonitorState,
    *,
    clock: Clock = time.perf_counter,
) -> MonitorState:
    repeat = max(1, int(settings.batch_repeat_count))
    for _ in range(repeat):
        state = await check_endpoints(client, config, settings, state, clock=clock)
    return state


async def run_monitor(
    client: httpx.AsyncClient,
    config: MonitorConfig,
    settings: MonitorSettings,
    *,
    state: MonitorState | None = None,
    sleep: Sleep = asyncio.sleep,
    clock: Clock = time.perf_counter,
    max_cycles: int | None = None,
) -> MonitorState:
    """
    Drive the probing cycles.

    Single-pass mode runs one cycle and returns without sleeping.
    Continuous mode repeats forever (or ``max_cycles`` times), sleeping
    ``interval_seconds`` after each cycle.
    """
    state = state or MonitorState()

    if settings.single:
        LOGGER.info("Single run endpoints=%s", len(config.servers))
        append_log_line(settings.log_path, "INFO:", "CHECK: uptime monitor single run")
        return await run_cycle(client, config, settings, state, clock=clock)

    LOGGER.info(
        "Loop run endpoints=%s batch_repeat_count=%s interval_seconds=%s",
        len(config.servers),
        settings.batch_repeat_count,
        settings.interval_seconds,
    )
    append_log_line(settings.log_path, "INFO:", "uptime monitor loop run")
    cycles = 0
    while max_cycles is None or cycles < max_cycles:
        state = await run_cycle(client, config, settings, state, clock=clock)
        cycles += 1
        LOGGER.info(
            "Cycle complete cycles=%s error_count=%s run_count=%s sleep_seconds=%s",
            cycles,
            state.error_count,
            state.run_count,
            settings.interval_seconds,
        )
        await sleep(float(settings.interval_seconds))
    return state
