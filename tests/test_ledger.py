import unittest

from parking_allotment.ledger import HistoryLedger
from parking_allotment.models import HistoryRecord, VehicleCategory


def make_record(plate, exit_time, fee=20, category=VehicleCategory.CAR):
    return HistoryRecord(plate, "Owner", category, 1, exit_time - 1000, exit_time, 1000, fee)


class HistoryLedgerTests(unittest.TestCase):

    def setUp(self):
        self.ledger = HistoryLedger()
        for i, plate in enumerate(["A", "B", "C", "D"]):
            self.ledger.append(make_record(plate, exit_time=(i + 1) * 10_000))

    def test_append_prepends(self):
        self.assertEqual([r.vehicle_plate for r in self.ledger], ["D", "C", "B", "A"])

    def test_snapshot_limit(self):
        self.assertEqual([r.vehicle_plate for r in self.ledger.snapshot(2)], ["D", "C"])
        self.assertEqual(len(self.ledger.snapshot()), 4)
        self.assertEqual(self.ledger.snapshot(0), [])
        with self.assertRaises(ValueError):
            self.ledger.snapshot(-1)

    def test_snapshot_is_a_copy(self):
        snapshot = self.ledger.snapshot()
        snapshot.clear()
        self.assertEqual(len(self.ledger), 4)

    def test_query_is_restartable(self):
        query = self.ledger.query(lambda r: r.vehicle_plate in ("A", "C"))
        self.assertEqual([r.vehicle_plate for r in query], ["C", "A"])
        self.assertEqual([r.vehicle_plate for r in query], ["C", "A"])
        self.assertEqual(query.count(), 2)

    def test_query_does_not_see_later_appends(self):
        query = self.ledger.query()
        self.ledger.append(make_record("E", exit_time=50_000))
        self.assertEqual(len(query.to_list()), 4)
        self.assertEqual(len(self.ledger), 5)

    def test_between_is_inclusive(self):
        plates = [r.vehicle_plate for r in self.ledger.between(20_000, 30_000)]
        self.assertEqual(plates, ["C", "B"])

    def test_clear(self):
        self.ledger.clear()
        self.assertEqual(len(self.ledger), 0)


if __name__ == "__main__":
    unittest.main()
