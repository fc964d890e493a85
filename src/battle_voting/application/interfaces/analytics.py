"""
Analytics Sink Interface

Port interface for fire-and-forget product analytics events.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from battle_voting.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class AnalyticsSink(ABC):
    """Abstract interface for recording analytics events.

    Implementations should return quickly. Callers treat any exception as a
    dropped event and never let it fail the triggering operation.
    """

    @abstractmethod
    async def log_event(
        self, participant_id: str, event_name: str, properties: dict[str, Any]
    ) -> None:
        """Record an analytics event.

        Args:
            participant_id: The user the event is attributed to.
            event_name: Event name, e.g. ``battle_voted``.
            properties: JSON-serializable event properties.
        """
        ...


async def log_event_safely(
    sink: AnalyticsSink,
    participant_id: str,
    event_name: str,
    properties: dict[str, Any],
) -> bool:
    """Send an event, swallowing and logging any sink failure.

    Returns:
        True if the sink accepted the event.
    """
    try:
        await sink.log_event(participant_id, event_name, properties)
    except Exception as e:
        logger.warning(LogTemplates.ANALYTICS_EVENT_FAILED, event_name, participant_id, e)
        return False
    return True
