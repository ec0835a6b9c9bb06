"""HTTP uptime and latency monitor with webhook alerting."""

__version__ = "0.1.0"
