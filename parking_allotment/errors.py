"""
Error hierarchy for the Smart Parking Allotment engine.

All errors are recoverable. The registry and session lifecycle raise them;
the parking service turns the operational ones into result objects so the
presentation layer can show a message instead of handling exceptions.
"""


class ParkingError(Exception):
    """Base error for the parking core"""
    code = "parking_error"


class CapacityExhausted(ParkingError):
    """No free slot is left in the facility"""
    code = "facility_full"


class UnknownSlot(ParkingError):
    """A slot id that the registry does not know"""
    code = "slot_not_found"

    def __init__(self, slot_id):
        super().__init__(f"Slot {slot_id} not found")
        self.slot_id = slot_id


class InvalidState(ParkingError):
    """Transition not allowed from the slot's current state"""
    code = "invalid_state"


class CorruptStore(ParkingError):
    """Persisted snapshot could not be decoded"""
    code = "corrupt_store"


class InvalidCategory(ParkingError, ValueError):
    """Vehicle category outside car/bike/truck"""
    code = "invalid_category"


class ConfigurationError(ParkingError):
    """Configuration value out of range"""
    code = "invalid_configuration"
