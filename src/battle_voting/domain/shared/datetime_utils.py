"""UTC time handling.

Datetimes are always timezone-aware UTC. Stored timestamps use a fixed
microsecond ISO 8601 form so that string order in SQL equals time order.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from battle_voting.domain.shared.messages import ErrorMessages

Clock = Callable[[], datetime]
"""Zero-argument callable returning the current aware UTC time."""


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class UtcDateTime:
    """Aware datetime normalised to UTC, with the storage encodings."""

    dt: datetime

    def __post_init__(self) -> None:
        if self.dt.tzinfo is None:
            raise ValueError(ErrorMessages.TIMEZONE_REQUIRED_UTC_DATETIME)
        object.__setattr__(self, "dt", self.dt.astimezone(UTC))

    @classmethod
    def now(cls) -> UtcDateTime:
        return cls(utcnow())

    @classmethod
    def from_iso(cls, value: str) -> UtcDateTime:
        """Parse a stored timestamp. A trailing ``Z`` is accepted."""
        return cls(datetime.fromisoformat(value.replace("Z", "+00:00")))

    @classmethod
    def from_optional_iso(cls, value: str | None) -> datetime | None:
        return cls.from_iso(value).dt if value is not None else None

    @property
    def iso(self) -> str:
        """e.g. ``2024-06-01T12:00:00.000000+00:00``."""
        return self.dt.isoformat(timespec="microseconds")

    @property
    def iso_z(self) -> str:
        """Same instant with a ``Z`` suffix."""
        return self.iso.removesuffix("+00:00") + "Z"
