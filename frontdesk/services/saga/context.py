"""Saga context for sharing data between status transition steps."""

from datetime import datetime, timezone
from typing import Any, Optional

from frontdesk.models.status import ReservationAction, ReservationStatus, RoomStatus


class SagaContext:
    """Context object passed to each step of a status transition.

    Steps record the values they overwrote so that their compensating
    writes can restore them.
    """

    def __init__(
        self,
        reservation_id: str,
        action: ReservationAction,
        room_id: Optional[str] = None,
    ):
        """Initialize saga context.

        Args:
            reservation_id: Reservation being transitioned
            action: Front desk action being applied
            room_id: Room of the reservation, when the action touches it
        """
        self.reservation_id = reservation_id
        self.room_id = room_id
        self.action = action
        self.start_time = datetime.now(timezone.utc)

        # Reservation status before and after the transition
        self.previous_status: Optional[ReservationStatus] = None
        self.target_status: Optional[ReservationStatus] = None

        # Room status before and after the transition
        self.previous_room_status: Optional[RoomStatus] = None
        self.target_room_status: Optional[RoomStatus] = None

        # Reservation row returned by the status write
        self.reservation_row: Optional[dict[str, Any]] = None

        self.completed_steps: list[str] = []
        self.compensated_steps: list[str] = []
        self.errors: list[dict[str, str]] = []
        self.success: bool = False

    def add_error(self, step_name: str, error_message: str) -> None:
        """Add an error to the context.

        Args:
            step_name: Name of the step where error occurred
            error_message: Error message
        """
        self.errors.append({
            "step": step_name,
            "message": error_message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    def get_results(self) -> dict[str, Any]:
        """Get final results dictionary."""
        end_time = datetime.now(timezone.utc)
        return {
            "reservation_id": self.reservation_id,
            "room_id": self.room_id,
            "action": self.action.value,
            "success": self.success,
            "previous_status": self.previous_status.value if self.previous_status else None,
            "status": self.target_status.value if self.target_status else None,
            "room_status": self.target_room_status.value if self.target_room_status else None,
            "duration_seconds": (end_time - self.start_time).total_seconds(),
            "completed_steps": self.completed_steps,
            "compensated_steps": self.compensated_steps,
            "errors": self.errors,
        }
