"""Reservation lookups shared by the registries and the ledger."""

from datetime import date

from frontdesk.clients import query as q
from frontdesk.clients.data_store_client import DataStoreClient
from frontdesk.models.status import ACTIVE_RESERVATION_STATUSES

RESERVATIONS_TABLE = "reservations"

# Reservation columns with room number and guest name joined in
LIST_COLUMNS = (
    "id, room_id, guest_id, check_in_date, check_out_date, status, final_price,"
    " rooms:room_id(number), guests:guest_id(name)"
)


async def active_reservation_ids(
    store: DataStoreClient,
    column: str,
    value: str,
    since: date,
) -> list[str]:
    """Ids of booked/checked-in reservations for a room or guest ending on or after ``since``.

    Args:
        store: Data store client
        column: "room_id" or "guest_id"
        value: Id of the room or guest
        since: First day that still counts (usually today)
    """
    rows = await store.select(
        RESERVATIONS_TABLE,
        columns="id",
        filters=[
            q.eq(column, value),
            q.gte("check_out_date", since),
            q.in_("status", ACTIVE_RESERVATION_STATUSES),
        ],
    )
    return [str(row["id"]) for row in rows]


async def overlapping_reservation_ids(
    store: DataStoreClient,
    room_id: str,
    check_in_date: date,
    check_out_date: date,
) -> list[str]:
    """Ids of active reservations of a room that overlap [check_in_date, check_out_date).

    A stay ending on the day another begins does not overlap it.
    """
    rows = await store.select(
        RESERVATIONS_TABLE,
        columns="id",
        filters=[
            q.eq("room_id", room_id),
            q.in_("status", ACTIVE_RESERVATION_STATUSES),
            q.lt("check_in_date", check_out_date),
            q.gt("check_out_date", check_in_date),
        ],
    )
    return [str(row["id"]) for row in rows]
