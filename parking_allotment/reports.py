"""
Report formatting for parking history: durations, export rows and invoices.

Column order everywhere is vehicle number, owner, category, slot, entry
time, exit time, duration, fee.
"""

import csv
import io
from datetime import datetime
from typing import Iterable, List

from .models import HistoryRecord

HISTORY_HEADERS = [
    "Vehicle number",
    "Owner",
    "Vehicle type",
    "Slot number",
    "Entry time",
    "Exit time",
    "Total duration",
    "Fee collected"
]


def format_duration(ms: int) -> str:
    """Render milliseconds as ``HHh MMm SSs``"""
    total = max(0, ms)
    hours = total // 3_600_000
    minutes = (total % 3_600_000) // 60_000
    seconds = (total % 60_000) // 1000
    return f"{hours:02d}h {minutes:02d}m {seconds:02d}s"


def format_timestamp(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def history_row(record: HistoryRecord) -> List[str]:
    return [
        record.vehicle_plate,
        record.owner_name,
        record.category.label,
        str(record.slot_id),
        format_timestamp(record.entry_time),
        format_timestamp(record.exit_time),
        format_duration(record.duration_ms),
        str(record.fee)
    ]


def export_csv(records: Iterable[HistoryRecord]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(HISTORY_HEADERS)
    writer.writerows(history_row(r) for r in records)
    return buffer.getvalue()


def export_tsv(records: Iterable[HistoryRecord]) -> str:
    """Tab-separated export that spreadsheet tools open directly"""
    rows = [HISTORY_HEADERS] + [history_row(r) for r in records]
    return "\n".join("\t".join(row) for row in rows)


def invoice_text(record: HistoryRecord, currency: str = "₹") -> str:
    lines = [
        "INVOICE",
        f"Vehicle: {record.vehicle_plate}",
        f"Owner: {record.owner_name}",
        f"Type: {record.category.label}",
        f"Slot: {record.slot_id}",
        f"Entry: {format_timestamp(record.entry_time)}",
        f"Exit: {format_timestamp(record.exit_time)}",
        f"Duration: {format_duration(record.duration_ms)}",
        f"Total Fee: {currency}{record.fee}"
    ]
    return "\n".join(lines)
