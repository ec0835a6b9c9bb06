from __future__ import annotations

from collections import deque
from datetime import datetime
from pathlib import Path


def sanitize_url(url: str) -> str:
    return url.replace(":", "_").replace("/", "_").replace(".", "_")


def append_log_line(path: Path | str, tag: str, message: str, *, now: datetime | None = None) -> None:
    """Append one line per line of ``message`` to the event log, each prefixed with ``tag``."""
    stamp = (now or datetime.now()).strftime("%Y/%m/%d %H:%M:%S")
    lines = [f"{stamp} {tag} {line}\n" for line in str(message).split("\n")]
    # Opened and closed per write so concurrent readers never see a held handle.
    with open(path, "a", encoding="utf-8") as f:
        f.write("".join(lines))


def ensure_log_file(path: Path | str) -> None:
    """Create the event log if needed; raises OSError if it cannot be opened for appending."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with open(p, "a", encoding="utf-8"):
        pass


def truncate_metrics(path: Path | str) -> None:
    with open(path, "w", encoding="utf-8"):
        pass


def append_metric(path: Path | str, url: str, latency_ms: int) -> None:
    with open(path, "a", encoding="utf-8") as f:
        f.write(f"{sanitize_url(url)} {int(latency_ms)}\n")


def tail_lines(path: Path | str, limit: int = 20) -> list[str]:
    """Return the last ``limit`` lines of a text file without trailing newlines."""
    limit = max(0, int(limit))
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return [line.rstrip("\r\n") for line in deque(f, maxlen=limit)]
