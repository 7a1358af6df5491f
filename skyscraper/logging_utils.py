"""
Structured logging for the scraper facade.

Each event is one JSON line on the module's logger: ``engine_initialized``,
``session_closed``, ``page_scraped``, ``page_scrape_failed`` (keeps the cause
that the failed ScrapeResult drops), ``selector_failed`` at DEBUG,
``batch_item_failed``, ``callback_failed``, ``batch_completed`` and
``request_failed``.
"""

from __future__ import annotations

import json
import logging
from typing import Any


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one event as compact JSON, skipping serialization when the level is off.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))
