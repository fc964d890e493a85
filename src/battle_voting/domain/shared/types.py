"""Reusable Pydantic Annotated types for domain-wide validation."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BeforeValidator, Field

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""

ParticipantIdField = Annotated[str, Field(min_length=1, max_length=128)]
"""User id of a battle participant (auth provider uid)."""

BattleIdField = Annotated[str, Field(min_length=1, max_length=128)]
"""Identifier of a battle record."""

EventIdField = Annotated[str, Field(min_length=1, max_length=256)]
"""Caller-supplied idempotency key."""

BusyTimeoutMs = Annotated[int, Field(ge=1000, le=30000)]
"""Database busy timeout in milliseconds: 1 000 … 30 000."""

ConnectionTimeoutS = Annotated[int, Field(ge=1, le=60)]
"""Database connection timeout in seconds: 1 … 60."""

SweepIntervalS = Annotated[int, Field(ge=1, le=3600)]
"""Timeout sweep interval in seconds: 1 … 3 600."""


def _ensure_utc(v: datetime) -> datetime:
    if isinstance(v, datetime):
        if v.tzinfo is None:
            raise ValueError("datetime must be timezone-aware (UTC)")
        return v.astimezone(UTC)
    return v


UtcDatetimeField = Annotated[datetime, BeforeValidator(_ensure_utc)]
"""Timezone-aware datetime, normalised to UTC on input."""
