from __future__ import annotations

from uptime_checks.probe import ProbeOutcome, format_timestamp
from uptime_checks.state import BatchCounters, MonitorState


ERROR_ALERT_THRESHOLD = 2


def build_error_alert_message(
    outcome: ProbeOutcome, error_count: int, *, error_alert_threshold: int = ERROR_ALERT_THRESHOLD
) -> str:
    return (
        f"ALERT: error with site over {int(error_alert_threshold)} errors: {outcome.url}: {int(error_count)} "
        f"Date: {format_timestamp(outcome.timestamp)}"
    )


def build_latency_alert_message(outcome: ProbeOutcome) -> str:
    return (
        f"ALERT: error site over threshold: {outcome.url}: Duration(ms): {int(outcome.latency_ms)} "
        f"Date: {format_timestamp(outcome.timestamp)}"
    )


def should_alert_on_error(
    outcome: ProbeOutcome, state: MonitorState, *, error_alert_threshold: int = ERROR_ALERT_THRESHOLD
) -> bool:
    # Level-triggered: holds for every failure once the lifetime count reaches the threshold.
    return (not outcome.success) and state.error_count >= int(error_alert_threshold)


def register_latency(outcome: ProbeOutcome, batch: BatchCounters, *, threshold_ms: int) -> bool:
    """
    Count a latency breach for the current pass.

    Returns True when an alert is due: the first breach of a pass is only
    counted, the second and every later one alerts.
    """
    if int(outcome.latency_ms) <= int(threshold_ms):
        return False
    batch.threshold_breach_count += 1
    return batch.threshold_breach_count > 1


def collect_alerts(
    outcome: ProbeOutcome,
    state: MonitorState,
    batch: BatchCounters,
    *,
    threshold_ms: int,
    error_alert_threshold: int = ERROR_ALERT_THRESHOLD,
) -> list[str]:
    """
    Decide which alerts one probe outcome raises.

    Expects ``state`` to already reflect the outcome (record_failure has run
    for a failed probe). Updates the pass's breach counter as a side effect.
    """
    messages: list[str] = []
    if should_alert_on_error(outcome, state, error_alert_threshold=error_alert_threshold):
        messages.append(
            build_error_alert_message(outcome, state.error_count, error_alert_threshold=error_alert_threshold)
        )
    if register_latency(outcome, batch, threshold_ms=threshold_ms):
        messages.append(build_latency_alert_message(outcome))
    return messages
