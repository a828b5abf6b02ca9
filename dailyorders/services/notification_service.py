"""Owner notification for newly placed orders."""

from __future__ import annotations

import logging
from time import sleep

import httpx

from dailyorders.core.config import settings

logger = logging.getLogger(__name__)


def notify_owner_new_order(store_id: int, order_id: int, client: httpx.Client | None = None) -> bool:
    """Tell the store owner about a new order. Failures are logged, never raised.

    Posts to ``settings.owner_notification_webhook_url`` when one is configured,
    otherwise only logs the event. Failed attempts back off linearly by
    ``settings.notification_retry_backoff_seconds``. Returns whether delivery
    succeeded.
    """
    webhook_url = settings.owner_notification_webhook_url
    if not webhook_url:
        logger.info("New order %s for store %s (no owner webhook configured)", order_id, store_id)
        return True

    payload = {"event": "order.created", "store_id": store_id, "order_id": order_id}
    attempts = max(1, settings.notification_max_attempts)
    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=settings.notification_timeout_seconds)
    try:
        for attempt in range(1, attempts + 1):
            try:
                response = client.post(webhook_url, json=payload)
                response.raise_for_status()
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                logger.warning(
                    "Owner notification for order %s failed (attempt %s/%s): %s",
                    order_id,
                    attempt,
                    attempts,
                    exc,
                )
                if attempt < attempts:
                    sleep(settings.notification_retry_backoff_seconds * attempt)
                continue
            logger.info("Owner notified of order %s for store %s", order_id, store_id)
            return True
    finally:
        if owns_client:
            client.close()
    return False
