"""
Feedback sinks. The default only logs; swap in another sink to store
feedback somewhere durable.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)


class FeedbackSink(ABC):
    """Destination for user feedback entries."""

    @abstractmethod
    async def record(self, entry: dict[str, Any]) -> None:
        """Store one feedback entry."""


class LoggingFeedbackSink(FeedbackSink):
    """Writes each feedback entry to the application log."""

    async def record(self, entry: dict[str, Any]) -> None:
        logger.info(
            "Feedback received: %s",
            {"timestamp": datetime.now(timezone.utc).isoformat(), **entry},
        )
