from __future__ import annotations

import logging

import httpx

from uptime_checks.config import MonitorConfig
from uptime_checks.settings import DEFAULT_CONNECTIVITY_URL


LOGGER = logging.getLogger("uptime-monitor")


def build_webhook_text(message: str, suffix: str) -> str:
    return f"{message}: {suffix}"


async def is_connected(client: httpx.AsyncClient, url: str = DEFAULT_CONNECTIVITY_URL) -> bool:
    """Any HTTP response counts as reachable; only transport errors mean offline."""
    try:
        async with client.stream("GET", url):
            return True
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        LOGGER.warning("Connectivity check failed url=%s error=%s: %s", url, type(e).__name__, e)
        return False


async def post_webhook(client: httpx.AsyncClient, url: str, text: str) -> tuple[bool, dict]:
    try:
        resp = await client.post(
            url,
            json={"text": text},
            headers={"Content-Type": "application/json; charset=UTF-8"},
        )
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        return False, {"ok": False, "error": f"{type(e).__name__}: {e}"}
    return resp.is_success, {"ok": resp.is_success, "status_code": resp.status_code, "body": resp.text[:300]}


async def notify(
    client: httpx.AsyncClient,
    config: MonitorConfig,
    message: str,
    *,
    connectivity_url: str = DEFAULT_CONNECTIVITY_URL,
) -> bool:
    """
    Send ``message`` to the configured webhook.

    Returns whether the webhook accepted it. Never raises: without a webhook
    URL nothing is sent, and when the network looks down the message is
    dropped rather than queued.
    """
    if not config.slack_url:
        LOGGER.debug("Webhook URL empty; alert not sent message=%s", message)
        return False

    if not await is_connected(client, connectivity_url):
        LOGGER.error("No network connection; alert dropped message=%s", message)
        return False

    ok, resp = await post_webhook(client, config.slack_url, build_webhook_text(message, config.slack_msg))
    if ok:
        LOGGER.info("Alert sent status_code=%s", resp.get("status_code"))
    else:
        LOGGER.error("Alert delivery failed response=%s", resp)
    return ok
