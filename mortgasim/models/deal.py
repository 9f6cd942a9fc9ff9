"""Deal domain model."""

from __future__ import annotations

from dataclasses import dataclass, replace

MIN_RATE = 0.0
MAX_RATE = 15.0


@dataclass(frozen=True)
class Deal:
    """Represents one fixed-rate period over the half-open month range [start_month, end_month)."""

    start_month: int
    end_month: int
    rate: float

    @property
    def duration(self) -> int:
        return self.end_month - self.start_month

    def overlaps(self, other: Deal) -> bool:
        """Half-open interval overlap test shared by every timeline edit."""
        return self.start_month < other.end_month and self.end_month > other.start_month

    def with_fields(self, **changes) -> Deal:
        return replace(self, **changes)

    def to_dict(self) -> dict[str, float | int]:
        return {'start_month': int(self.start_month), 'end_month': int(self.end_month), 'rate': float(self.rate)}

    @classmethod
    def from_dict(cls, raw: dict) -> Deal:
        if not isinstance(raw, dict):
            raise TypeError(f'Deal must be a mapping, got {type(raw).__name__}.')
        return cls(
            start_month=int(raw['start_month']),
            end_month=int(raw['end_month']),
            rate=float(raw['rate']),
        )
