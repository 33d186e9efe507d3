"""Daily progress against the protein target."""

from dataclasses import dataclass

NEAR_LIMIT_PERCENT = 80.0


@dataclass(frozen=True)
class DailyProgress:
    """Consumed protein for a day compared with the target."""

    date: str
    consumed: float
    target: float
    remaining: float
    percentage: float
    near_limit: bool
    over_limit: bool

    @classmethod
    def compute(cls, date: str, consumed: float, target: float) -> "DailyProgress":
        """Build progress figures; percentage is capped at 100."""
        percentage = min(consumed / target * 100, 100.0) if target > 0 else 0.0
        over_limit = consumed > target
        return cls(
            date=date,
            consumed=consumed,
            target=target,
            remaining=target - consumed,
            percentage=percentage,
            near_limit=percentage >= NEAR_LIMIT_PERCENT and not over_limit,
            over_limit=over_limit,
        )
