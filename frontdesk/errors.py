"""Domain exceptions raised by the front desk services."""

from typing import Optional


class FrontDeskError(Exception):
    """Base exception for front desk operations."""

    pass


class FrontDeskValidationError(FrontDeskError):
    """Raised when input is rejected before reaching the data store."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        message = "; ".join(f"{field}: {msg}" for field, msg in errors.items())
        super().__init__(message or "Invalid input")


class StateConflictError(FrontDeskError):
    """Raised when an action does not fit the current status of a record."""

    def __init__(self, message: str, current_status: Optional[str] = None):
        self.current_status = current_status
        super().__init__(message)


class HasActiveReservationsError(StateConflictError):
    """Raised when archiving a room or guest that still has active reservations."""

    def __init__(self, entity: str, entity_id: str, reservation_count: int):
        self.entity = entity
        self.entity_id = entity_id
        self.reservation_count = reservation_count
        super().__init__(
            f"Cannot archive {entity} {entity_id}: it has "
            f"{reservation_count} active reservation(s)"
        )


class RoomUnavailableError(StateConflictError):
    """Raised when a new reservation overlaps an active one for the same room."""

    def __init__(self, room_id: str, conflicting_ids: list[str]):
        self.room_id = room_id
        self.conflicting_ids = conflicting_ids
        super().__init__(
            f"Room {room_id} is already reserved for the requested dates "
            f"(reservations: {', '.join(conflicting_ids)})"
        )


class RecordNotFoundError(FrontDeskError):
    """Raised when a referenced record does not exist."""

    pass


class RecordParseError(FrontDeskError):
    """Raised when a data store row cannot be mapped to a domain model."""

    pass


class PersistenceError(FrontDeskError):
    """Raised when the data store rejects or fails a request."""

    pass


class PartialUpdateError(PersistenceError):
    """Raised when a multi-record write failed and could not be rolled back."""

    def __init__(self, message: str, completed_steps: list[str]):
        self.completed_steps = completed_steps
        super().__init__(message)
