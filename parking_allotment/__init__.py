"""
Smart Parking Allotment: slot allocation, billing, history and analytics
for a fixed-capacity parking facility
"""

from .errors import (
    ParkingError,
    CapacityExhausted,
    UnknownSlot,
    InvalidState,
    CorruptStore,
    InvalidCategory,
    ConfigurationError
)
from .models import (
    VehicleCategory,
    Session,
    Slot,
    HistoryRecord,
    FeeConfig,
    ParkingConfig
)
from .clock import SystemClock, ManualClock
from .fees import FeePolicy, compute_fee
from .registry import SlotRegistry
from .ledger import HistoryLedger
from .lifecycle import ParkingStore, park_vehicle, release_vehicle
from .persistence import SnapshotPersistence, InMemoryKeyValueStore, JsonFileKeyValueStore
from .service import ParkingService, AllocationResult, ReleaseResult

__version__ = "0.1.0"

__all__ = [
    'ParkingError',
    'CapacityExhausted',
    'UnknownSlot',
    'InvalidState',
    'CorruptStore',
    'InvalidCategory',
    'ConfigurationError',
    'VehicleCategory',
    'Session',
    'Slot',
    'HistoryRecord',
    'FeeConfig',
    'ParkingConfig',
    'SystemClock',
    'ManualClock',
    'FeePolicy',
    'compute_fee',
    'SlotRegistry',
    'HistoryLedger',
    'ParkingStore',
    'park_vehicle',
    'release_vehicle',
    'SnapshotPersistence',
    'InMemoryKeyValueStore',
    'JsonFileKeyValueStore',
    'ParkingService',
    'AllocationResult',
    'ReleaseResult'
]
