"""
Analytics Aggregator for the Smart Parking Allotment engine

Read-only summaries over the registry and ledger. Nothing is cached: every
call recomputes from the current store.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Dict, Any, List, Tuple

from .lifecycle import ParkingStore
from .models import VehicleCategory


def _to_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def day_window(day: date) -> Tuple[int, int]:
    """Local-time [00:00:00.000, 23:59:59.999] bounds of a day in epoch ms"""
    start = _to_ms(datetime.combine(day, time.min))
    end = _to_ms(datetime.combine(day + timedelta(days=1), time.min)) - 1
    return start, end


def local_date(now_ms: int) -> date:
    return datetime.fromtimestamp(now_ms / 1000).date()


@dataclass
class DailyRevenue:
    """Revenue collected from vehicles that exited on one day"""
    day: date
    revenue: int

    @property
    def label(self) -> str:
        return f"{self.day.month}/{self.day.day}"

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.day.isoformat(), "label": self.label, "value": self.revenue}


@dataclass
class AnalyticsSummary:
    """Aggregated facility metrics for dashboards"""
    vehicles_today: int
    total_revenue: int
    average_duration_ms: int
    currently_parked: int
    counts_by_category: Dict[VehicleCategory, int]
    revenue_by_day: List[DailyRevenue] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "vehicles_today": self.vehicles_today,
            "total_revenue": self.total_revenue,
            "average_duration_ms": self.average_duration_ms,
            "currently_parked": self.currently_parked,
            "counts_by_category": {c.value: n for c, n in self.counts_by_category.items()},
            "revenue_by_day": [d.to_dict() for d in self.revenue_by_day]
        }


def counts_by_category(store: ParkingStore) -> Dict[VehicleCategory, int]:
    """
    Vehicles per category: completed sessions plus vehicles parked now.

    A vehicle that is parked and also has earlier history is counted in both.
    """
    counts = {category: 0 for category in VehicleCategory}
    for record in store.ledger:
        counts[record.category] += 1
    for slot in store.registry.occupied_slots():
        counts[slot.session.category] += 1
    return counts


def total_revenue(store: ParkingStore) -> int:
    return sum(record.fee for record in store.ledger)


def average_duration(store: ParkingStore) -> int:
    """Integer mean duration in ms, 0 when there is no history"""
    if not len(store.ledger):
        return 0
    return sum(record.duration_ms for record in store.ledger) // len(store.ledger)


def currently_parked(store: ParkingStore) -> int:
    return store.registry.occupied_count()


def revenue_by_day(store: ParkingStore, days_back: int, now_ms: int) -> List[DailyRevenue]:
    """
    Fee totals for each of the last ``days_back`` days, oldest first.

    Args:
        store: Parking store to read
        days_back: Number of calendar days ending today
        now_ms: Current instant, which fixes "today"

    Returns:
        Exactly ``days_back`` buckets, zero-filled
    """
    if isinstance(days_back, bool) or not isinstance(days_back, int) or days_back < 1:
        raise ValueError(f"days_back must be a positive integer, got {days_back!r}")

    today = local_date(now_ms)
    buckets = []
    for offset in range(days_back - 1, -1, -1):
        day = today - timedelta(days=offset)
        start, end = day_window(day)
        revenue = sum(r.fee for r in store.ledger.between(start, end))
        buckets.append(DailyRevenue(day=day, revenue=revenue))
    return buckets


def vehicles_processed_today(store: ParkingStore, now_ms: int) -> int:
    start, end = day_window(local_date(now_ms))
    return store.ledger.between(start, end).count()


def summarize(store: ParkingStore, now_ms: int, days_back: int = 7) -> AnalyticsSummary:
    """Compute every analytics figure at once"""
    return AnalyticsSummary(
        vehicles_today=vehicles_processed_today(store, now_ms),
        total_revenue=total_revenue(store),
        average_duration_ms=average_duration(store),
        currently_parked=currently_parked(store),
        counts_by_category=counts_by_category(store),
        revenue_by_day=revenue_by_day(store, days_back, now_ms)
    )
