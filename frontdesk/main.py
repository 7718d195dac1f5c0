"""Command line entry point for the front desk dashboard."""

import argparse
import asyncio
import json
import sys
from typing import Any, Optional

from pydantic import BaseModel

from frontdesk.clients.auth_client import AuthClientError
from frontdesk.config import configure_logging, get_logger, settings
from frontdesk.errors import FrontDeskError, StateConflictError
from frontdesk.services import FrontDeskDashboard

logger = get_logger(__name__)


def _to_jsonable(result: Any) -> Any:
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json")
    if isinstance(result, list):
        return [_to_jsonable(item) for item in result]
    return result


def _fields(args: argparse.Namespace, names: list[str]) -> dict[str, Any]:
    """Collect the options the user actually passed."""
    return {name: getattr(args, name) for name in names if getattr(args, name, None) is not None}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="frontdesk", description="Hotel front desk dashboard")
    parser.add_argument("--email", help="Sign in with this email before running the command")
    parser.add_argument("--password", help="Password for --email")
    commands = parser.add_subparsers(dest="command", required=True)

    login = commands.add_parser("login", help="Sign in (session is cached when SESSION_CACHE_ENABLED)")
    login.add_argument("login_email", metavar="email")
    login.add_argument("login_password", metavar="password")
    commands.add_parser("logout", help="Sign out")
    commands.add_parser("whoami", help="Show the signed-in user")

    # Rooms
    rooms = commands.add_parser("rooms", help="Room registry").add_subparsers(dest="action", required=True)
    rooms.add_parser("list")
    room_create = rooms.add_parser("create")
    room_create.add_argument("--number", required=True)
    room_create.add_argument("--type", required=True)
    room_create.add_argument("--base-price", dest="base_price", type=float, required=True)
    room_create.add_argument("--status")
    room_create.add_argument("--notes")
    room_update = rooms.add_parser("update")
    room_update.add_argument("id")
    room_update.add_argument("--number")
    room_update.add_argument("--type")
    room_update.add_argument("--base-price", dest="base_price", type=float)
    room_update.add_argument("--status")
    room_update.add_argument("--notes")
    rooms.add_parser("archive").add_argument("id")
    rooms.add_parser("clean").add_argument("id")
    rooms.add_parser("upcoming").add_argument("id")

    # Guests
    guests = commands.add_parser("guests", help="Guest registry").add_subparsers(dest="action", required=True)
    guests.add_parser("list").add_argument("--search")
    for name in ("create", "update"):
        sub = guests.add_parser(name)
        if name == "update":
            sub.add_argument("id")
        sub.add_argument("--name", required=name == "create")
        sub.add_argument("--document")
        sub.add_argument("--phone")
        sub.add_argument("--email", dest="guest_email")
    guests.add_parser("archive").add_argument("id")

    # Reservations
    reservations = commands.add_parser("reservations", help="Reservation ledger").add_subparsers(
        dest="action", required=True
    )
    reservations.add_parser("list")
    reservations.add_parser("show").add_argument("id")
    res_create = reservations.add_parser("create")
    res_create.add_argument("--room", dest="room_id", required=True)
    res_create.add_argument("--guest", dest="guest_id", required=True)
    res_create.add_argument("--check-in", dest="check_in_date", required=True)
    res_create.add_argument("--check-out", dest="check_out_date", required=True)
    res_create.add_argument("--discount", type=float)
    res_create.add_argument("--notes")
    reservations.add_parser("cancel").add_argument("id")

    # Daily operations
    commands.add_parser("arrivals", help="Today's arrivals")
    commands.add_parser("departures", help="Today's departures")
    commands.add_parser("check-in").add_argument("id")
    commands.add_parser("check-out").add_argument("id")
    commands.add_parser("no-show").add_argument("id")

    return parser


async def dispatch(dashboard: FrontDeskDashboard, args: argparse.Namespace) -> Any:
    """Run the operation selected on the command line and return its result."""
    command = args.command
    action = getattr(args, "action", None)

    if command == "login":
        session = await dashboard.sessions.sign_in(args.login_email, args.login_password)
        role = dashboard.sessions.role
        return {"email": session.user.email, "role": role.value if role else None}
    if command == "logout":
        await dashboard.sessions.sign_out()
        return {"signed_in": False}
    if command == "whoami":
        return _to_jsonable(dashboard.sessions.current_user)

    if command == "rooms":
        if action == "list":
            return await dashboard.rooms.list_active()
        if action == "create":
            return await dashboard.rooms.create(
                _fields(args, ["number", "type", "base_price", "status", "notes"])
            )
        if action == "update":
            return await dashboard.rooms.update(
                args.id, _fields(args, ["number", "type", "base_price", "status", "notes"])
            )
        if action == "archive":
            return await dashboard.rooms.archive(args.id)
        if action == "clean":
            return await dashboard.operations.mark_room_clean(args.id)
        if action == "upcoming":
            return await dashboard.rooms.upcoming_reservations(args.id)

    if command == "guests":
        if action == "list":
            return await dashboard.guests.list_active(args.search)
        if action in ("create", "update"):
            fields = _fields(args, ["name", "document", "phone"])
            if args.guest_email is not None:
                fields["email"] = args.guest_email
            if action == "create":
                return await dashboard.guests.create(fields)
            return await dashboard.guests.update(args.id, fields)
        if action == "archive":
            return await dashboard.guests.archive(args.id)

    if command == "reservations":
        if action == "list":
            return await dashboard.reservations.list_all()
        if action == "show":
            return await dashboard.reservations.get(args.id)
        if action == "create":
            return await dashboard.reservations.create(
                _fields(
                    args,
                    ["room_id", "guest_id", "check_in_date", "check_out_date", "discount", "notes"],
                )
            )
        if action == "cancel":
            return await dashboard.reservations.cancel(args.id)

    if command == "arrivals":
        return await dashboard.operations.arrivals_today()
    if command == "departures":
        return await dashboard.operations.departures_today()
    if command == "check-in":
        return await dashboard.operations.check_in(args.id)
    if command == "check-out":
        return await dashboard.operations.check_out(args.id)
    if command == "no-show":
        return await dashboard.operations.mark_no_show(args.id)

    raise ValueError(f"Unknown command: {command} {action or ''}".strip())


async def main(argv: Optional[list[str]] = None, dashboard: Optional[FrontDeskDashboard] = None) -> int:
    """Parse arguments, run one operation and print the result as JSON.

    Returns:
        Exit code: 0 on success, 1 on any handled failure
    """
    args = build_parser().parse_args(argv)

    missing = settings.validate_backend()
    if missing and dashboard is None:
        logger.error("Backend config incomplete", missing=missing)
        print(json.dumps({"success": False, "error": f"Missing: {', '.join(missing)}"}))
        return 1

    dashboard = dashboard or FrontDeskDashboard()
    try:
        async with dashboard:
            if args.email and args.password and args.command != "login":
                await dashboard.sessions.sign_in(args.email, args.password)
            result = await dispatch(dashboard, args)
    except StateConflictError as e:
        logger.warning("Action rejected", command=args.command, error=str(e))
        print(json.dumps({"success": False, "error": str(e), "current_status": e.current_status}))
        return 1
    except (FrontDeskError, AuthClientError) as e:
        logger.error("Command failed", command=args.command, error=str(e))
        print(json.dumps({"success": False, "error": str(e)}))
        return 1

    print(json.dumps({"success": True, "result": _to_jsonable(result)}, indent=2, default=str))
    return 0


def run_sync() -> int:
    """Run the async main function synchronously.

    Returns:
        Exit code from main()
    """
    configure_logging()
    return asyncio.run(main())


if __name__ == "__main__":
    sys.exit(run_sync())
