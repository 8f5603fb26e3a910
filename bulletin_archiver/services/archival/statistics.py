# bulletin_archiver/services/archival/statistics.py
"""
Run statistics for the archiver.

Counters live for the lifetime of the process and are only mutated by the
run coordinator through begin_run() / complete_run().
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime

from bulletin_archiver.models import ContentCollection


@dataclass
class SweepCounters:
    """Counters for one collection."""

    processed: int = 0
    archived: int = 0
    errors: int = 0

    def add(self, other: "SweepCounters") -> None:
        self.processed += other.processed
        self.archived += other.archived
        self.errors += other.errors

    @property
    def success_rate(self) -> float:
        """Archived as a percentage of processed, 0.0 when nothing was processed."""
        if self.processed == 0:
            return 0.0
        return round(self.archived * 100 / self.processed, 2)

    def to_dict(self) -> dict:
        return asdict(self)


def _empty_counters() -> dict[ContentCollection, SweepCounters]:
    return {collection: SweepCounters() for collection in ContentCollection}


@dataclass
class RunStatistics:
    """Last-run and cumulative counters per collection."""

    total_runs: int = 0
    last_run: datetime | None = None
    last_run_stats: dict[ContentCollection, SweepCounters] = field(default_factory=_empty_counters)
    all_time_stats: dict[ContentCollection, SweepCounters] = field(default_factory=_empty_counters)

    def begin_run(self) -> dict[ContentCollection, SweepCounters]:
        """Reset the run-scoped counters and hand them to the sweeps."""
        self.last_run_stats = _empty_counters()
        return self.last_run_stats

    def complete_run(self, finished_at: datetime) -> None:
        """Fold the run-scoped counters into the cumulative totals."""
        for collection, counters in self.last_run_stats.items():
            self.all_time_stats[collection].add(counters)
        self.total_runs += 1
        self.last_run = finished_at

    def run_totals(self) -> SweepCounters:
        return _sum(self.last_run_stats.values())

    def all_time_totals(self) -> SweepCounters:
        return _sum(self.all_time_stats.values())

    @property
    def error_rate(self) -> float:
        """Cumulative errors as a percentage of cumulative processed."""
        totals = self.all_time_totals()
        if totals.processed == 0:
            return 0.0
        return totals.errors * 100 / totals.processed

    def to_dict(self) -> dict:
        return {
            "total_runs": self.total_runs,
            "last_run_stats": {c.value: s.to_dict() for c, s in self.last_run_stats.items()},
            "all_time_stats": {c.value: s.to_dict() for c, s in self.all_time_stats.items()},
        }


def _sum(counters) -> SweepCounters:
    total = SweepCounters()
    for c in counters:
        total.add(c)
    return total
