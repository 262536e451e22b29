"""
Parking Service: the interface the presentation layer talks to.

The service owns one ParkingStore. After every successful mutation it saves
the full snapshot and, when a publisher is configured, announces the change.
Rejected operations come back as result objects carrying the error; the
store is left untouched and nothing is saved.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from . import analytics
from .clock import SystemClock
from .errors import ParkingError, CapacityExhausted, UnknownSlot, InvalidState, InvalidCategory
from .fees import FeePolicy
from .lifecycle import ParkingStore, park_vehicle, release_vehicle, reset_store
from .models import HistoryRecord, ParkingConfig, Slot, VehicleCategory
from .persistence import SnapshotPersistence

logger = logging.getLogger(__name__)


@dataclass
class AllocationResult:
    """Outcome of a parking request"""
    slot: Optional[Slot] = None
    error: Optional[ParkingError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {"ok": True, "slot": self.slot.to_dict()}
        return {"ok": False, "error": self.error.code, "message": str(self.error)}


@dataclass
class ReleaseResult:
    """Outcome of a release request"""
    record: Optional[HistoryRecord] = None
    error: Optional[ParkingError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {"ok": True, "record": self.record.to_dict()}
        return {"ok": False, "error": self.error.code, "message": str(self.error)}


@dataclass
class SlotView:
    """Read-only view of a slot with its elapsed parking time"""
    slot: Slot
    elapsed_ms: Optional[int]

    def to_dict(self) -> Dict[str, Any]:
        data = self.slot.to_dict()
        data["elapsedMs"] = self.elapsed_ms
        return data


class ParkingService:
    """
    Facade over the registry, session lifecycle, ledger, analytics and
    persistence for a single facility.
    """

    def __init__(
        self,
        config: ParkingConfig = None,
        persistence: SnapshotPersistence = None,
        clock=None,
        publisher=None
    ):
        """
        Initialize the service and restore persisted state.

        Args:
            config: Facility configuration
            persistence: Snapshot persistence (in-memory when omitted)
            clock: Time source with ``now_ms()``
            publisher: Optional ParkingEventPublisher
        """
        self.config = config or ParkingConfig()
        self.persistence = persistence or SnapshotPersistence()
        self.clock = clock or SystemClock()
        self.publisher = publisher
        self.fee_policy = FeePolicy(self.config.fee)
        self.store = self.load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> ParkingStore:
        """
        Restore state from persistence, falling back to a first-run store.

        A snapshot without slots keeps its history and gets a fresh registry.
        """
        store = self.persistence.load()
        if store is None:
            return ParkingStore.create(self.config)

        if len(store.registry) == 0:
            logger.info("Persisted data has no slots; initializing registry")
            store = ParkingStore(
                registry=ParkingStore.create(self.config).registry,
                ledger=store.ledger
            )
        elif len(store.registry) != self.config.total_slots:
            logger.warning(
                f"Persisted registry has {len(store.registry)} slots but configuration "
                f"asks for {self.config.total_slots}; keeping the persisted layout"
            )
        return store

    def save(self):
        self.persistence.save(self.store)

    def reset(self):
        """Delete persisted data and start over with every slot free"""
        self.persistence.reset()
        reset_store(self.store, self.config)
        if self.publisher:
            self.publisher.facility_reset(len(self.store.registry))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def allocate(self, category, vehicle_plate: str, owner_name: str) -> AllocationResult:
        """Park a vehicle in the nearest suitable slot"""
        try:
            category = VehicleCategory.parse(category)
            slot = park_vehicle(self.store, category, vehicle_plate, owner_name, self.clock)
        except (CapacityExhausted, InvalidCategory, InvalidState) as e:
            logger.warning(f"Parking request for {vehicle_plate} rejected: {e}")
            return AllocationResult(error=e)

        self.save()
        if self.publisher:
            self.publisher.vehicle_parked(slot)
        return AllocationResult(slot=slot)

    def release(self, slot_id: int) -> ReleaseResult:
        """Remove the vehicle from a slot and bill it"""
        try:
            record = release_vehicle(self.store, slot_id, self.clock, self.fee_policy)
        except (UnknownSlot, InvalidState) as e:
            logger.warning(f"Release of slot {slot_id} rejected: {e}")
            return ReleaseResult(error=e)

        self.save()
        if self.publisher:
            self.publisher.vehicle_released(self.store.registry.get(slot_id), record)
            self.publisher.analytics(self.analytics_summary())
        return ReleaseResult(record=record)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def registry_snapshot(self) -> List[Slot]:
        return self.store.registry.snapshot()

    def ledger_snapshot(self, limit: Optional[int] = None) -> List[HistoryRecord]:
        return self.store.ledger.snapshot(limit)

    def occupancy_view(self) -> List[SlotView]:
        """Every slot with its elapsed parking time at the current instant"""
        now = self.clock.now_ms()
        return [
            SlotView(slot=slot, elapsed_ms=slot.session.elapsed_ms(now) if slot.occupied else None)
            for slot in self.store.registry
        ]

    def quote(self, slot_id: int) -> int:
        """Fee the vehicle in a slot would pay if it left now"""
        slot = self.store.registry.get(slot_id)
        if not slot.occupied:
            raise InvalidState(f"Slot {slot_id} is empty")
        return self.fee_policy.compute_fee(slot.session.elapsed_ms(self.clock.now_ms()))

    def counts_by_category(self) -> Dict[VehicleCategory, int]:
        return analytics.counts_by_category(self.store)

    def total_revenue(self) -> int:
        return analytics.total_revenue(self.store)

    def average_duration(self) -> int:
        return analytics.average_duration(self.store)

    def revenue_by_day(self, days_back: int = 7) -> List[analytics.DailyRevenue]:
        return analytics.revenue_by_day(self.store, days_back, self.clock.now_ms())

    def vehicles_processed_today(self) -> int:
        return analytics.vehicles_processed_today(self.store, self.clock.now_ms())

    def analytics_summary(self, days_back: int = 7) -> analytics.AnalyticsSummary:
        return analytics.summarize(self.store, self.clock.now_ms(), days_back)
