"""
Slot Registry for the Smart Parking Allotment engine

This module owns the fixed set of parking slots and the allocation policy:
- Prefer a free slot of the requested category
- Otherwise fall back to any free slot
- Within a candidate set, the lowest slot id wins (nearest slot)
"""

import logging
from typing import Dict, List, Optional, Iterable

from .errors import CapacityExhausted, UnknownSlot, InvalidState
from .models import Slot, Session, VehicleCategory, ParkingConfig

logger = logging.getLogger(__name__)


class SlotRegistry:
    """
    Ordered, fixed-cardinality collection of slots.

    Slot ids are assigned once at creation and never reused or renumbered.
    """

    def __init__(self, slots: Iterable[Slot] = ()):
        """
        Initialize the registry from existing slots.

        Args:
            slots: Slots to manage; ids must be unique
        """
        self._slots: Dict[int, Slot] = {}
        for slot in sorted(slots, key=lambda s: s.id):
            if slot.id in self._slots:
                raise ValueError(f"Duplicate slot id: {slot.id}")
            self._slots[slot.id] = slot

    @classmethod
    def create(cls, config: ParkingConfig) -> 'SlotRegistry':
        """Build a registry of free slots laid out by the category pattern"""
        registry = cls(
            Slot(id=i, category=config.category_for(i))
            for i in range(1, config.total_slots + 1)
        )
        logger.info(
            f"Created slot registry with {len(registry)} slots "
            f"({', '.join(c.value for c in config.categories)})"
        )
        return registry

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self):
        return iter(self._slots.values())

    def get(self, slot_id: int) -> Slot:
        """Look up a slot, raising UnknownSlot if the id does not exist"""
        slot = self._slots.get(slot_id)
        if slot is None:
            raise UnknownSlot(slot_id)
        return slot

    def snapshot(self) -> List[Slot]:
        """Slots in id order"""
        return list(self._slots.values())

    def free_slots(self, category: Optional[VehicleCategory] = None) -> List[Slot]:
        return [
            s for s in self._slots.values()
            if not s.occupied and (category is None or s.category == category)
        ]

    def occupied_slots(self) -> List[Slot]:
        return [s for s in self._slots.values() if s.occupied]

    def free_count(self) -> int:
        return len(self.free_slots())

    def occupied_count(self) -> int:
        return len(self.occupied_slots())

    def find_slot(self, category: VehicleCategory) -> Optional[Slot]:
        """
        Pick the slot a vehicle of the given category should get.

        Returns:
            The chosen free slot, or None when the facility is full
        """
        candidates = self.free_slots(category) or self.free_slots()
        if not candidates:
            return None
        return min(candidates, key=lambda s: s.id)

    def allocate(
        self,
        category: VehicleCategory,
        vehicle_plate: str,
        owner_name: str,
        entry_time: int
    ) -> Slot:
        """
        Assign a slot and open a session on it.

        Args:
            category: Vehicle category requested
            vehicle_plate: Registration number of the vehicle
            owner_name: Name of the vehicle owner
            entry_time: Entry instant in epoch milliseconds

        Returns:
            The slot now holding the session

        Raises:
            CapacityExhausted: No free slot exists
        """
        slot = self.find_slot(category)
        if slot is None:
            raise CapacityExhausted(f"No empty slot available for {category.value}")
        return self.occupy(slot.id, category, vehicle_plate, owner_name, entry_time)

    def occupy(
        self,
        slot_id: int,
        category: VehicleCategory,
        vehicle_plate: str,
        owner_name: str,
        entry_time: int
    ) -> Slot:
        """Open a session on a specific free slot"""
        slot = self.get(slot_id)
        if slot.occupied:
            raise InvalidState(f"Slot {slot_id} is already occupied")

        slot.session = Session(
            vehicle_plate=vehicle_plate,
            owner_name=owner_name,
            category=category,
            slot_id=slot.id,
            entry_time=entry_time
        )
        logger.debug(f"Slot {slot.id} ({slot.category.value}) occupied by {vehicle_plate}")
        return slot

    def release(self, slot_id: int) -> Session:
        """
        Free a slot.

        Returns:
            The session that was open on the slot

        Raises:
            UnknownSlot: The id does not exist
            InvalidState: The slot is already empty
        """
        slot = self.get(slot_id)
        if not slot.occupied:
            raise InvalidState(f"Slot {slot_id} is already empty")

        session = slot.session
        slot.session = None
        logger.debug(f"Slot {slot.id} released by {session.vehicle_plate}")
        return session
