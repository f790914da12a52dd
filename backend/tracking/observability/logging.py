"""Structured logging helper for the tracking pipeline."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger("tracking")


def log_tracking_event(*, message: str, clip_id: Optional[int] = None, campaign_id: Optional[int] = None,
                       run_id: Optional[int] = None, level: int = logging.INFO,
                       extra: Optional[Dict[str, Any]] = None) -> None:
    payload: Dict[str, Any] = {"message": message}
    if clip_id is not None:
        payload["clip_id"] = clip_id
    if campaign_id is not None:
        payload["campaign_id"] = campaign_id
    if run_id is not None:
        payload["run_id"] = run_id
    if extra:
        payload.update(extra)
    logger.log(level, payload)
