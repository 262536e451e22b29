"""
Session Lifecycle for the Smart Parking Allotment engine

Each slot moves FREE -> OCCUPIED on parking and OCCUPIED -> FREE on release.
A release bills the session and appends it to the ledger; the slot is only
cleared once the record is in the ledger.
"""

import logging
from dataclasses import dataclass, field

from .clock import SystemClock
from .fees import FeePolicy
from .ledger import HistoryLedger
from .models import HistoryRecord, ParkingConfig, Slot, VehicleCategory
from .registry import SlotRegistry
from .errors import InvalidState

logger = logging.getLogger(__name__)


@dataclass
class ParkingStore:
    """The durable state of a facility: its registry and its ledger"""
    registry: SlotRegistry
    ledger: HistoryLedger = field(default_factory=HistoryLedger)

    @classmethod
    def create(cls, config: ParkingConfig) -> 'ParkingStore':
        """First-run state: every slot free and no history"""
        return cls(registry=SlotRegistry.create(config), ledger=HistoryLedger())


def park_vehicle(
    store: ParkingStore,
    category: VehicleCategory,
    vehicle_plate: str,
    owner_name: str,
    clock=None
) -> Slot:
    """
    Allocate a slot for a vehicle and start its session.

    Raises:
        CapacityExhausted: No free slot exists
    """
    clock = clock or SystemClock()
    slot = store.registry.allocate(category, vehicle_plate, owner_name, clock.now_ms())
    logger.info(
        f"Assigned slot {slot.id} ({slot.category.value}) to {vehicle_plate} [{category.value}]"
    )
    return slot


def release_vehicle(
    store: ParkingStore,
    slot_id: int,
    clock=None,
    fee_policy: FeePolicy = None
) -> HistoryRecord:
    """
    End the session on a slot, bill it and record it in the ledger.

    Raises:
        UnknownSlot: The id does not exist
        InvalidState: The slot is already empty
    """
    clock = clock or SystemClock()
    fee_policy = fee_policy or FeePolicy()

    slot = store.registry.get(slot_id)
    if not slot.occupied:
        raise InvalidState(f"Slot {slot_id} is already empty")
    session = slot.session

    now = clock.now_ms()
    if now < session.entry_time:
        logger.warning(
            f"Clock reads {now} before entry time {session.entry_time} on slot {slot_id}; "
            f"billing zero duration"
        )
        now = session.entry_time

    duration_ms = now - session.entry_time
    record = HistoryRecord(
        vehicle_plate=session.vehicle_plate,
        owner_name=session.owner_name,
        category=session.category,
        slot_id=slot.id,
        entry_time=session.entry_time,
        exit_time=now,
        duration_ms=duration_ms,
        fee=fee_policy.compute_fee(duration_ms)
    )

    store.ledger.append(record)
    store.registry.release(slot_id)

    logger.info(f"Released slot {slot_id} ({record.vehicle_plate}) - fee {record.fee}")
    return record


def reset_store(store: ParkingStore, config: ParkingConfig) -> ParkingStore:
    """Empty the ledger and rebuild the registry with every slot free"""
    store.registry = SlotRegistry.create(config)
    store.ledger.clear()
    logger.info("Parking store reset")
    return store
