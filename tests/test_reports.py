import csv
import io
import unittest
from datetime import datetime

from parking_allotment.models import HistoryRecord, VehicleCategory
from parking_allotment.reports import (
    HISTORY_HEADERS, format_duration, format_timestamp, history_row,
    export_csv, export_tsv, invoice_text
)
from parking_allotment.validation import normalize_plate, is_valid_plate, normalize_owner, is_valid_owner


def ms(*args) -> int:
    return int(datetime(*args).timestamp() * 1000)


RECORD = HistoryRecord(
    vehicle_plate="TN 38 AB 1234",
    owner_name="Priya Raman",
    category=VehicleCategory.TRUCK,
    slot_id=5,
    entry_time=ms(2024, 3, 14, 9, 0, 0),
    exit_time=ms(2024, 3, 14, 10, 2, 3),
    duration_ms=3_723_000,
    fee=70
)


class ReportTests(unittest.TestCase):

    def test_format_duration(self):
        self.assertEqual(format_duration(0), "00h 00m 00s")
        self.assertEqual(format_duration(3_723_999), "01h 02m 03s")
        self.assertEqual(format_duration(-5), "00h 00m 00s")
        self.assertEqual(format_duration(100 * 3_600_000), "100h 00m 00s")

    def test_format_timestamp(self):
        self.assertEqual(format_timestamp(ms(2024, 3, 14, 9, 5, 7)), "2024-03-14 09:05:07")

    def test_history_row_field_order(self):
        self.assertEqual(history_row(RECORD), [
            "TN 38 AB 1234",
            "Priya Raman",
            "Truck",
            "5",
            "2024-03-14 09:00:00",
            "2024-03-14 10:02:03",
            "01h 02m 03s",
            "70"
        ])

    def test_export_csv(self):
        rows = list(csv.reader(io.StringIO(export_csv([RECORD, RECORD]))))
        self.assertEqual(rows[0], HISTORY_HEADERS)
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[1], history_row(RECORD))
        self.assertTrue(export_csv([]).startswith('"Vehicle number","Owner"'))

    def test_export_tsv(self):
        lines = export_tsv([RECORD]).split("\n")
        self.assertEqual(lines[0].split("\t"), HISTORY_HEADERS)
        self.assertEqual(lines[1].split("\t"), history_row(RECORD))

    def test_invoice_text(self):
        lines = invoice_text(RECORD).split("\n")
        self.assertEqual(lines[0], "INVOICE")
        self.assertEqual(lines[1], "Vehicle: TN 38 AB 1234")
        self.assertEqual(lines[4], "Slot: 5")
        self.assertEqual(lines[-1], "Total Fee: ₹70")


class ValidationTests(unittest.TestCase):

    def test_plates(self):
        self.assertEqual(normalize_plate("  tn 38   ab 1234 "), "TN 38 AB 1234")
        self.assertTrue(is_valid_plate("tn 38 ab 1234"))
        self.assertTrue(is_valid_plate("KA05M999"))
        self.assertFalse(is_valid_plate("ABC-123"))
        self.assertFalse(is_valid_plate(None))

    def test_owner(self):
        self.assertEqual(normalize_owner("  priya raman "), "Priya Raman")
        self.assertTrue(is_valid_owner("Al"))
        self.assertFalse(is_valid_owner(" a "))


if __name__ == "__main__":
    unittest.main()
