"""
backend/kitrent/services/events.py

Notification sink: pushes events to a Redis queue for the bot consumers
(Telegram / MAX delivery lives outside this service).

Queue:
- events:p2p: instant delivery to specific recipients

Emitting is fire-and-forget. A failed push is logged and dropped,
it never propagates into the caller's transaction.
"""

import json
import time
import logging

from ..redis_client import redis_client

logger = logging.getLogger(__name__)

P2P_QUEUE = "events:p2p"


def emit_event(event_type: str, payload: dict) -> None:
    """
    Emit a p2p event (instant delivery).

    Pushed to Redis list `events:p2p` for the consumer loop.
    """
    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        redis_client.rpush(P2P_QUEUE, json.dumps(event, ensure_ascii=False))
        logger.info(f"Event emitted: {event_type} → {P2P_QUEUE}")
    except Exception as e:
        logger.error(f"Failed to emit event {event_type}: {e}")


def notify(recipient_ref: str, message: str) -> None:
    """Send `message` to `recipient_ref` (client reference). No result, no raise."""
    emit_event("booking_notification", {
        "recipient": recipient_ref,
        "message": message,
        "parse_mode": "HTML",
    })
