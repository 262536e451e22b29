import unittest

from parking_allotment.clock import ManualClock
from parking_allotment.errors import UnknownSlot, InvalidState, CapacityExhausted
from parking_allotment.fees import FeePolicy
from parking_allotment.lifecycle import ParkingStore, park_vehicle, release_vehicle, reset_store
from parking_allotment.models import ParkingConfig, VehicleCategory

CAR = VehicleCategory.CAR


class SessionLifecycleTests(unittest.TestCase):

    def setUp(self):
        self.config = ParkingConfig(total_slots=3, categories=[CAR])
        self.store = ParkingStore.create(self.config)
        self.clock = ManualClock(1_700_000_000_000)

    def test_park_then_release_records_history(self):
        slot = park_vehicle(self.store, CAR, "TN 38 AB 1234", "Priya", self.clock)
        self.clock.advance(minutes=45)
        record = release_vehicle(self.store, slot.id, self.clock, FeePolicy())

        self.assertFalse(self.store.registry.get(slot.id).occupied)
        self.assertEqual(len(self.store.ledger), 1)
        self.assertIs(self.store.ledger.snapshot()[0], record)
        self.assertEqual(record.vehicle_plate, "TN 38 AB 1234")
        self.assertEqual(record.owner_name, "Priya")
        self.assertEqual(record.category, CAR)
        self.assertEqual(record.slot_id, slot.id)
        self.assertEqual(record.entry_time, 1_700_000_000_000)
        self.assertEqual(record.exit_time, 1_700_000_000_000 + 45 * 60_000)
        self.assertEqual(record.duration_ms, 45 * 60_000)
        self.assertEqual(record.fee, 70)

    def test_history_is_most_recent_first(self):
        first = park_vehicle(self.store, CAR, "A", "A", self.clock)
        second = park_vehicle(self.store, CAR, "B", "B", self.clock)
        release_vehicle(self.store, first.id, self.clock)
        release_vehicle(self.store, second.id, self.clock)
        self.assertEqual([r.vehicle_plate for r in self.store.ledger], ["B", "A"])

    def test_release_free_slot_leaves_ledger_unchanged(self):
        with self.assertRaises(InvalidState):
            release_vehicle(self.store, 1, self.clock)
        with self.assertRaises(UnknownSlot):
            release_vehicle(self.store, 42, self.clock)
        self.assertEqual(len(self.store.ledger), 0)

    def test_double_release_rejected(self):
        slot = park_vehicle(self.store, CAR, "A", "A", self.clock)
        release_vehicle(self.store, slot.id, self.clock)
        with self.assertRaises(InvalidState):
            release_vehicle(self.store, slot.id, self.clock)
        self.assertEqual(len(self.store.ledger), 1)

    def test_clock_behind_entry_bills_zero_duration(self):
        slot = park_vehicle(self.store, CAR, "A", "A", self.clock)
        self.clock.advance(ms=-5000)
        record = release_vehicle(self.store, slot.id, self.clock)
        self.assertEqual(record.duration_ms, 0)
        self.assertEqual(record.exit_time, record.entry_time)
        self.assertEqual(record.fee, 20)

    def test_full_store_raises(self):
        for plate in ("A", "B", "C"):
            park_vehicle(self.store, CAR, plate, plate, self.clock)
        with self.assertRaises(CapacityExhausted):
            park_vehicle(self.store, CAR, "D", "D", self.clock)

    def test_reset_store(self):
        slot = park_vehicle(self.store, CAR, "A", "A", self.clock)
        release_vehicle(self.store, slot.id, self.clock)
        park_vehicle(self.store, CAR, "B", "B", self.clock)

        reset_store(self.store, self.config)

        self.assertEqual(len(self.store.registry), 3)
        self.assertEqual(self.store.registry.occupied_count(), 0)
        self.assertEqual(len(self.store.ledger), 0)


if __name__ == "__main__":
    unittest.main()
