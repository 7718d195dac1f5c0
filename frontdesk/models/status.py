"""Status enums and lifecycle transitions for reservations and rooms."""

from enum import Enum

from frontdesk.errors import StateConflictError


class ReservationStatus(str, Enum):
    """Reservation lifecycle status.

    - booked: created, guest not yet arrived (initial)
    - checked_in: guest in the room
    - checked_out: stay finished (terminal)
    - cancelled: cancelled before arrival (terminal)
    - no_show: guest never arrived (terminal)
    """
    BOOKED = "booked"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class RoomStatus(str, Enum):
    """Housekeeping status of a room."""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    CLEANING = "cleaning"
    MAINTENANCE = "maintenance"


class RoomType(str, Enum):
    """Room categories offered by the hotel."""
    SINGLE = "single"
    DOUBLE = "double"
    SUITE = "suite"
    DELUXE = "deluxe"


class ReservationAction(str, Enum):
    """Front desk actions that move a reservation through its lifecycle."""
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    CANCEL = "cancel"
    NO_SHOW = "no_show"


# Statuses that still hold a room for their date range
ACTIVE_RESERVATION_STATUSES = (ReservationStatus.BOOKED, ReservationStatus.CHECKED_IN)

TERMINAL_RESERVATION_STATUSES = frozenset(
    {
        ReservationStatus.CHECKED_OUT,
        ReservationStatus.CANCELLED,
        ReservationStatus.NO_SHOW,
    }
)


class ReservationLifecycle:
    """Transition table for reservations and the room status each action drives."""

    TRANSITIONS: dict[ReservationAction, tuple[ReservationStatus, ReservationStatus]] = {
        ReservationAction.CHECK_IN: (ReservationStatus.BOOKED, ReservationStatus.CHECKED_IN),
        ReservationAction.CHECK_OUT: (ReservationStatus.CHECKED_IN, ReservationStatus.CHECKED_OUT),
        ReservationAction.CANCEL: (ReservationStatus.BOOKED, ReservationStatus.CANCELLED),
        ReservationAction.NO_SHOW: (ReservationStatus.BOOKED, ReservationStatus.NO_SHOW),
    }

    ROOM_EFFECTS: dict[ReservationAction, RoomStatus] = {
        ReservationAction.CHECK_IN: RoomStatus.OCCUPIED,
        ReservationAction.CHECK_OUT: RoomStatus.CLEANING,
    }

    @staticmethod
    def target_status(
        current: ReservationStatus,
        action: ReservationAction,
    ) -> ReservationStatus:
        """Resolve the status a reservation moves to when an action is applied.

        Args:
            current: Current reservation status
            action: Front desk action being attempted

        Returns:
            The new reservation status

        Raises:
            StateConflictError: If the action is not allowed from the current status
        """
        required, target = ReservationLifecycle.TRANSITIONS[action]
        if current != required:
            raise StateConflictError(
                f"Cannot {action.value.replace('_', '-')} reservation: "
                f"current status is '{current.value}'",
                current_status=current.value,
            )
        return target

    @staticmethod
    def room_effect(action: ReservationAction) -> RoomStatus | None:
        """Room status driven by an action, or None when the room is untouched."""
        return ReservationLifecycle.ROOM_EFFECTS.get(action)

    @staticmethod
    def is_terminal(status: ReservationStatus) -> bool:
        return status in TERMINAL_RESERVATION_STATUSES

    @staticmethod
    def allowed_actions(status: ReservationStatus) -> list[ReservationAction]:
        """Actions the front desk may offer for a reservation in this status."""
        return [
            action
            for action, (required, _) in ReservationLifecycle.TRANSITIONS.items()
            if required == status
        ]
