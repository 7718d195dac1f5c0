"""Business services package."""

from frontdesk.services.daily_operations import DailyOperations
from frontdesk.services.dashboard import FrontDeskDashboard
from frontdesk.services.guest_registry import GuestRegistry
from frontdesk.services.reservation_ledger import ReservationLedger
from frontdesk.services.room_registry import RoomRegistry
from frontdesk.services.session_manager import SessionManager
from frontdesk.services.status_transitions import ReservationTransitions

__all__ = [
    "FrontDeskDashboard",
    "DailyOperations",
    "GuestRegistry",
    "ReservationLedger",
    "ReservationTransitions",
    "RoomRegistry",
    "SessionManager",
]
