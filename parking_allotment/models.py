"""
Data Models for the Smart Parking Allotment engine

This module contains the data structures shared by the registry, the session
lifecycle, the history ledger, analytics and persistence.

Instants are integer epoch milliseconds and durations integer milliseconds.
The ``to_dict``/``from_dict`` pairs use the persisted wire field names.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from enum import Enum

from .errors import InvalidCategory, ConfigurationError


class VehicleCategory(Enum):
    """Closed set of vehicle and slot categories"""
    CAR = "car"
    BIKE = "bike"
    TRUCK = "truck"

    @classmethod
    def parse(cls, value: Any) -> 'VehicleCategory':
        """Parse a category name, rejecting anything outside the enumeration"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidCategory(f"Unknown vehicle category: {value!r}")

    @property
    def label(self) -> str:
        return self.value.capitalize()


def _require_int(data: Dict[str, Any], key: str, minimum: int = 0) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"'{key}' must be an integer, got {value!r}")
    if value < minimum:
        raise ValueError(f"'{key}' must be >= {minimum}, got {value}")
    return value


def _require_str(data: Dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"'{key}' must be a string, got {value!r}")
    return value


@dataclass(frozen=True)
class Session:
    """A vehicle currently occupying a slot"""
    vehicle_plate: str
    owner_name: str
    category: VehicleCategory
    slot_id: int
    entry_time: int

    def elapsed_ms(self, now_ms: int) -> int:
        """Milliseconds parked so far, never negative"""
        return max(0, now_ms - self.entry_time)


@dataclass
class Slot:
    """A fixed parking space; occupied exactly while it holds a session"""
    id: int
    category: VehicleCategory
    session: Optional[Session] = None

    @property
    def occupied(self) -> bool:
        return self.session is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted dictionary form"""
        vehicle = None
        if self.session is not None:
            vehicle = {
                "number": self.session.vehicle_plate,
                "owner": self.session.owner_name,
                "type": self.session.category.value
            }
        return {
            "id": self.id,
            "type": self.category.value,
            "occupied": self.occupied,
            "vehicle": vehicle,
            "entryTime": self.session.entry_time if self.session else None
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Slot':
        """Create a Slot from its persisted dictionary form"""
        slot_id = _require_int(data, "id", minimum=1)
        category = VehicleCategory.parse(data["type"])
        occupied = data.get("occupied", False)
        vehicle = data.get("vehicle")

        if not isinstance(occupied, bool):
            raise TypeError(f"Slot {slot_id}: 'occupied' must be a boolean")
        if occupied != (vehicle is not None):
            raise ValueError(f"Slot {slot_id}: occupancy flag disagrees with vehicle data")
        if vehicle is None:
            return cls(id=slot_id, category=category)

        session = Session(
            vehicle_plate=_require_str(vehicle, "number"),
            owner_name=_require_str(vehicle, "owner"),
            category=VehicleCategory.parse(vehicle["type"]),
            slot_id=slot_id,
            entry_time=_require_int(data, "entryTime")
        )
        return cls(id=slot_id, category=category, session=session)


@dataclass(frozen=True)
class HistoryRecord:
    """Closed record of a completed parking session"""
    vehicle_plate: str
    owner_name: str
    category: VehicleCategory
    slot_id: int
    entry_time: int
    exit_time: int
    duration_ms: int
    fee: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted dictionary form"""
        return {
            "vehicleNumber": self.vehicle_plate,
            "owner": self.owner_name,
            "type": self.category.value,
            "slotId": self.slot_id,
            "entryTime": self.entry_time,
            "exitTime": self.exit_time,
            "durationMs": self.duration_ms,
            "fee": self.fee
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HistoryRecord':
        """Create a HistoryRecord from its persisted dictionary form"""
        entry_time = _require_int(data, "entryTime")
        exit_time = _require_int(data, "exitTime")
        duration_ms = _require_int(data, "durationMs")
        if exit_time < entry_time:
            raise ValueError("History record exits before it enters")
        if duration_ms != exit_time - entry_time:
            raise ValueError(
                f"History record duration {duration_ms} does not match exit - entry ({exit_time - entry_time})"
            )
        return cls(
            vehicle_plate=_require_str(data, "vehicleNumber"),
            owner_name=_require_str(data, "owner"),
            category=VehicleCategory.parse(data["type"]),
            slot_id=_require_int(data, "slotId", minimum=1),
            entry_time=entry_time,
            exit_time=exit_time,
            duration_ms=duration_ms,
            fee=_require_int(data, "fee")
        )


DEFAULT_CATEGORIES = [VehicleCategory.CAR, VehicleCategory.BIKE, VehicleCategory.TRUCK]


def _positive_int(value: Any, name: str, allow_zero: bool = False) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < 0 or (value == 0 and not allow_zero):
        bound = "non-negative" if allow_zero else "positive"
        raise ConfigurationError(f"{name} must be {bound}, got {value}")
    return value


@dataclass
class FeeConfig:
    """Tiered pricing parameters"""
    base_minutes: int = 30
    base_price: int = 20
    hourly_rate: int = 50

    def __post_init__(self):
        _positive_int(self.base_minutes, "fee.baseMinutes")
        _positive_int(self.base_price, "fee.basePrice", allow_zero=True)
        _positive_int(self.hourly_rate, "fee.hourlyRate", allow_zero=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FeeConfig':
        """Create from dictionary"""
        defaults = cls()
        return cls(
            base_minutes=data.get("baseMinutes", defaults.base_minutes),
            base_price=data.get("basePrice", defaults.base_price),
            hourly_rate=data.get("hourlyRate", defaults.hourly_rate)
        )


@dataclass
class ParkingConfig:
    """Configuration for the parking facility"""
    total_slots: int = 48
    categories: List[VehicleCategory] = field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    fee: FeeConfig = field(default_factory=FeeConfig)

    def __post_init__(self):
        _positive_int(self.total_slots, "totalSlots")
        if not self.categories:
            raise ConfigurationError("categories must not be empty")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ParkingConfig':
        """Create from dictionary"""
        data = data or {}
        try:
            categories = [
                VehicleCategory.parse(c)
                for c in data.get("categories", [c.value for c in DEFAULT_CATEGORIES])
            ]
        except InvalidCategory as e:
            raise ConfigurationError(str(e)) from e
        return cls(
            total_slots=data.get("totalSlots", 48),
            categories=categories,
            fee=FeeConfig.from_dict(data.get("fee") or {})
        )

    def category_for(self, slot_id: int) -> VehicleCategory:
        """Category of the slot with the given 1-based id"""
        return self.categories[slot_id % len(self.categories)]
