from __future__ import annotations

from uptime_checks.state import MonitorState, record_failure, record_run_completion


def test_record_failure_counts_every_failure() -> None:
    state = MonitorState()
    for _ in range(5):
        record_failure(state, resolve_hostname=lambda: "probe-host")
    assert state.error_count == 5
    assert state.hostname == "probe-host"
    assert state.run_count == 0


def test_error_count_is_not_reset_by_completed_runs() -> None:
    state = MonitorState()
    record_failure(state, resolve_hostname=lambda: "h")
    record_run_completion(state)
    record_run_completion(state)
    record_failure(state, resolve_hostname=lambda: "h")
    assert state.error_count == 2
    assert state.run_count == 2


def test_record_failure_keeps_previous_hostname_when_lookup_fails() -> None:
    state = MonitorState(hostname="known")

    def broken() -> str:
        raise OSError("no hostname")

    record_failure(state, resolve_hostname=broken)
    assert state.error_count == 1
    assert state.hostname == "known"
