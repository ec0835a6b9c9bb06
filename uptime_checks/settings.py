from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return bool(default)
    s = str(raw).strip().lower()
    if s in {"1", "true", "yes", "y", "on"}:
        return True
    if s in {"0", "false", "no", "n", "off"}:
        return False
    return bool(default)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return int(default)
    try:
        return int(str(raw).strip())
    except ValueError:
        return int(default)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return float(default)
    try:
        return float(str(raw).strip())
    except ValueError:
        return float(default)


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return str(default)
    s = str(raw).strip()
    return s if s else str(default)


DEFAULT_CONNECTIVITY_URL = "http://clients3.google.com/generate_204"


@dataclass(frozen=True)
class MonitorSettings:
    config_path: str = field(default_factory=lambda: _env_str("UPTIME_MONITOR_CONFIG", "config.yaml"))

    # Command line switches (-v, -s, -t, -w).
    verbose: bool = field(default_factory=lambda: _env_bool("UPTIME_MONITOR_VERBOSE", False))
    single: bool = field(default_factory=lambda: _env_bool("UPTIME_MONITOR_SINGLE", False))
    threshold_ms: int = field(default_factory=lambda: _env_int("UPTIME_MONITOR_THRESHOLD_MS", 500))
    webserver: bool = field(default_factory=lambda: _env_bool("UPTIME_MONITOR_WEBSERVER", False))

    # Cadence: passes per cycle, then sleep between cycles (continuous mode only).
    batch_repeat_count: int = field(default_factory=lambda: _env_int("UPTIME_MONITOR_BATCH_REPEAT_COUNT", 3))
    interval_seconds: float = field(default_factory=lambda: _env_float("UPTIME_MONITOR_INTERVAL_SECONDS", 60.0))
    error_alert_threshold: int = field(default_factory=lambda: _env_int("UPTIME_MONITOR_ERROR_ALERT_THRESHOLD", 2))

    # Output files shared with the web interface.
    log_path: str = field(default_factory=lambda: _env_str("UPTIME_MONITOR_LOG_PATH", "uptime_monitor.log"))
    metrics_path: str = field(
        default_factory=lambda: _env_str("UPTIME_MONITOR_METRICS_PATH", "uptime_monitor_metrics.log")
    )

    # Web interface.
    static_dir: str = field(default_factory=lambda: _env_str("UPTIME_MONITOR_STATIC_DIR", "static"))
    host: str = field(default_factory=lambda: _env_str("UPTIME_MONITOR_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("UPTIME_MONITOR_PORT", 8080))
    tail_lines: int = field(default_factory=lambda: _env_int("UPTIME_MONITOR_TAIL_LINES", 20))

    # Reachability probe run before every webhook post.
    connectivity_url: str = field(
        default_factory=lambda: _env_str("UPTIME_MONITOR_CONNECTIVITY_URL", DEFAULT_CONNECTIVITY_URL)
    )
