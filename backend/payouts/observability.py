"""Logging and Prometheus helpers for payout processing."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from prometheus_client import Counter

logger = logging.getLogger("payouts")

PAYOUT_TRANSITIONS = Counter(
    "payouts_request_transition_total",
    "Payout request state changes by action",
    labelnames=("action", "status"),
)

PAYOUT_AMOUNT = Counter(
    "payouts_completed_usd_total",
    "Gross amount of completed payouts",
    labelnames=("method",),
)


def log_payout_event(*, message: str, request_id: Optional[int] = None, user_id: Optional[int] = None,
                     actor: Optional[int] = None, extra: Optional[Dict[str, Any]] = None) -> None:
    payload: Dict[str, Any] = {"message": message}
    if request_id:
        payload["request_id"] = request_id
    if user_id:
        payload["user_id"] = user_id
    if actor:
        payload["actor"] = actor
    if extra:
        payload.update(extra)
    logger.info(payload)
