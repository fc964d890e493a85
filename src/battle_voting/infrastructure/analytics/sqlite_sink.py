"""Analytics sink that appends events to the local database."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from battle_voting.application.interfaces.analytics import AnalyticsSink
from battle_voting.domain.shared.datetime_utils import UtcDateTime

if TYPE_CHECKING:
    from ..persistence.database import Database

logger = logging.getLogger(__name__)


class SQLiteAnalyticsSink(AnalyticsSink):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def log_event(
        self, participant_id: str, event_name: str, properties: dict[str, Any]
    ) -> None:
        await self._db.execute(
            """
            INSERT INTO analytics_events (participant_id, event_name, properties, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (
                participant_id,
                event_name,
                json.dumps(properties, sort_keys=True, default=str),
                UtcDateTime.now().iso,
            ),
        )
        logger.debug("Logged analytics event %s for %s", event_name, participant_id)

    async def list_events(self, event_name: str | None = None) -> list[dict[str, Any]]:
        """Return stored events, oldest first."""
        if event_name is None:
            rows = await self._db.fetch_all("SELECT * FROM analytics_events ORDER BY id")
        else:
            rows = await self._db.fetch_all(
                "SELECT * FROM analytics_events WHERE event_name = ? ORDER BY id",
                (event_name,),
            )
        for row in rows:
            row["properties"] = json.loads(row["properties"])
        return rows
