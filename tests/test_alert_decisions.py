from __future__ import annotations

from datetime import datetime

from uptime_checks.alerts import (
    build_error_alert_message,
    build_latency_alert_message,
    collect_alerts,
    register_latency,
    should_alert_on_error,
)
from uptime_checks.probe import ProbeOutcome
from uptime_checks.state import BatchCounters, MonitorState, record_failure

TS = datetime(2024, 1, 31, 13, 5, 9, 42_000)


def _outcome(url: str = "http://a.test", *, success: bool = True, latency_ms: int = 10) -> ProbeOutcome:
    return ProbeOutcome(
        url=url,
        timestamp=TS,
        success=success,
        latency_ms=latency_ms,
        error=None if success else "Connection refused",
        status_code=200 if success else None,
    )


def test_error_alert_fires_from_second_failure_onwards() -> None:
    state = MonitorState()
    fired: list[bool] = []
    for _ in range(4):
        outcome = _outcome(success=False)
        record_failure(state, resolve_hostname=lambda: "h")
        fired.append(should_alert_on_error(outcome, state))
    assert fired == [False, True, True, True]


def test_error_alert_never_fires_on_success() -> None:
    state = MonitorState(error_count=10)
    assert should_alert_on_error(_outcome(success=True), state) is False


def test_error_alert_keeps_firing_after_intervening_success() -> None:
    state = MonitorState()
    batch = BatchCounters()
    record_failure(state, resolve_hostname=lambda: "h")
    record_failure(state, resolve_hostname=lambda: "h")
    assert collect_alerts(_outcome(success=True), state, batch, threshold_ms=500) == []

    failed = _outcome(success=False)
    record_failure(state, resolve_hostname=lambda: "h")
    assert collect_alerts(failed, state, batch, threshold_ms=500) == [build_error_alert_message(failed, 3)]


def test_latency_alert_first_breach_is_silent() -> None:
    batch = BatchCounters()
    results = [register_latency(_outcome(latency_ms=900), batch, threshold_ms=500) for _ in range(3)]
    assert results == [False, True, True]
    assert batch.threshold_breach_count == 3


def test_latency_at_threshold_is_not_a_breach() -> None:
    batch = BatchCounters()
    assert register_latency(_outcome(latency_ms=500), batch, threshold_ms=500) is False
    assert batch.threshold_breach_count == 0


def test_latency_breaches_are_shared_across_endpoints_and_reset_per_pass() -> None:
    state = MonitorState()
    batch = BatchCounters()
    assert collect_alerts(_outcome("http://a.test", latency_ms=700), state, batch, threshold_ms=500) == []
    slow_b = _outcome("http://b.test", latency_ms=800)
    assert collect_alerts(slow_b, state, batch, threshold_ms=500) == [build_latency_alert_message(slow_b)]

    next_pass = BatchCounters()
    assert collect_alerts(_outcome("http://a.test", latency_ms=700), state, next_pass, threshold_ms=500) == []
    assert next_pass.threshold_breach_count == 1


def test_failed_probe_can_raise_both_alerts() -> None:
    state = MonitorState()
    batch = BatchCounters(threshold_breach_count=1)
    outcome = _outcome(success=False, latency_ms=5000)
    record_failure(state, resolve_hostname=lambda: "h")
    record_failure(state, resolve_hostname=lambda: "h")
    messages = collect_alerts(outcome, state, batch, threshold_ms=500)
    assert messages == [build_error_alert_message(outcome, 2), build_latency_alert_message(outcome)]


def test_alert_message_formats() -> None:
    failed = _outcome("http://down.test", success=False)
    assert (
        build_error_alert_message(failed, 3)
        == "ALERT: error with site over 2 errors: http://down.test: 3 Date: 2024.01.31-13.05.09:042"
    )
    slow = _outcome("http://slow.test", latency_ms=1234)
    assert (
        build_latency_alert_message(slow)
        == "ALERT: error site over threshold: http://slow.test: Duration(ms): 1234 Date: 2024.01.31-13.05.09:042"
    )


def test_error_alert_message_reflects_configured_threshold() -> None:
    state = MonitorState()
    batch = BatchCounters()
    failed = _outcome("http://down.test", success=False)
    for _ in range(3):
        record_failure(state, resolve_hostname=lambda: "h")

    messages = collect_alerts(failed, state, batch, threshold_ms=500, error_alert_threshold=3)
    assert messages == [
        "ALERT: error with site over 3 errors: http://down.test: 3 Date: 2024.01.31-13.05.09:042"
    ]
