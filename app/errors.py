"""
Error kinds raised by the parking core.

Every failure is scoped to the single requested operation. Services raise these
directly; the HTTP layer turns them into status codes via ``status_code``.
"""


class ParkingError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ── NotFound ──────────────────────────────────────────────────────────────────
class NotFound(ParkingError):
    status_code = 404


class FloorNotFound(NotFound):
    pass


class SlotNotFound(NotFound):
    pass


class EntryNotFound(NotFound):
    pass


# ── Conflict ──────────────────────────────────────────────────────────────────
class Conflict(ParkingError):
    status_code = 409


class SlotAlreadyOccupied(Conflict):
    pass


class TargetOccupied(Conflict):
    pass


class DuplicateSlot(Conflict):
    pass


class DuplicateFloor(Conflict):
    pass


class SlotOccupied(Conflict):
    """Slot cannot be deleted while a vehicle is parked in it."""


class NoSlotAvailable(Conflict):
    pass


# ── InvalidState ──────────────────────────────────────────────────────────────
class InvalidState(ParkingError):
    status_code = 409


class AlreadyClosed(InvalidState):
    pass


class NotOpen(InvalidState):
    pass


class VehicleStillPresent(InvalidState):
    pass


# ── ValidationError ───────────────────────────────────────────────────────────
class ValidationError(ParkingError):
    status_code = 422


class VehicleClassMismatch(ValidationError):
    pass
