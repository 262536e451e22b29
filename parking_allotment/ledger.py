"""
History Ledger: append-only record of completed parking sessions,
most recent first.
"""

import logging
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from .models import HistoryRecord

logger = logging.getLogger(__name__)

RecordPredicate = Callable[[HistoryRecord], bool]


class LedgerQuery:
    """
    Lazy, restartable view over the ledger as it was when queried.

    Each iteration filters the captured records again; the ledger itself is
    never modified.
    """

    def __init__(self, records: Tuple[HistoryRecord, ...], predicate: Optional[RecordPredicate] = None):
        self._records = records
        self._predicate = predicate

    def __iter__(self) -> Iterator[HistoryRecord]:
        if self._predicate is None:
            return iter(self._records)
        return (r for r in self._records if self._predicate(r))

    def count(self) -> int:
        return sum(1 for _ in self)

    def to_list(self) -> List[HistoryRecord]:
        return list(self)


class HistoryLedger:
    """Ordered sequence of HistoryRecords, newest at index 0"""

    def __init__(self, records: Iterable[HistoryRecord] = ()):
        self._records: List[HistoryRecord] = list(records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[HistoryRecord]:
        return iter(tuple(self._records))

    def append(self, record: HistoryRecord):
        """Add a record at the front of the ledger"""
        self._records.insert(0, record)
        logger.debug(
            f"Ledger append: {record.vehicle_plate} slot {record.slot_id} fee {record.fee}"
        )

    def query(self, predicate: Optional[RecordPredicate] = None) -> LedgerQuery:
        """Records matching ``predicate`` (all records when omitted)"""
        return LedgerQuery(tuple(self._records), predicate)

    def between(self, start_ms: int, end_ms: int) -> LedgerQuery:
        """Records whose exit time lies in the inclusive range"""
        return self.query(lambda r: start_ms <= r.exit_time <= end_ms)

    def snapshot(self, limit: Optional[int] = None) -> List[HistoryRecord]:
        """The ``limit`` most recent records, or all of them"""
        if limit is None:
            return list(self._records)
        if limit < 0:
            raise ValueError(f"limit must not be negative, got {limit}")
        return self._records[:limit]

    def clear(self):
        """Drop every record; only used by a full reset"""
        self._records.clear()
