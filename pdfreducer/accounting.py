"""Byte accounting across a reduction run."""

from dataclasses import dataclass
from typing import Iterable

from .outcomes import SizePair


@dataclass(frozen=True)
class RunTotals:
    """Summed sizes of every processed file and the resulting savings."""
    total_before: int
    total_after: int

    @property
    def saved_bytes(self) -> int:
        """Bytes saved; negative when the run made files bigger."""
        return self.total_before - self.total_after

    @property
    def is_loss(self) -> bool:
        return self.saved_bytes < 0

    @property
    def saved_percent(self) -> float:
        """
        Percentage saved, or lost when ``is_loss``.

        Savings are relative to the original total; losses are relative to
        the new total.
        """
        if self.total_before <= 0:
            return 0.0
        if self.is_loss:
            return 100.0 * -self.saved_bytes / self.total_after
        return 100.0 * self.saved_bytes / self.total_before

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_before": self.total_before,
            "total_after": self.total_after,
            "saved_bytes": self.saved_bytes,
            "saved_percent": round(self.saved_percent, 2),
            "is_loss": self.is_loss,
        }


def aggregate(size_pairs: Iterable[SizePair]) -> RunTotals:
    """
    Sum size pairs into run totals.

    Args:
        size_pairs: Per-file or per-subtree size pairs

    Returns:
        RunTotals for all of them
    """
    total = SizePair()
    for pair in size_pairs:
        total = total + pair
    return RunTotals(total_before=total.before, total_after=total.after)
