"""Command line entry point.

    event-payroll serve [--host HOST] [--port PORT] [--reload]
    event-payroll event EVENT_ID

``serve`` runs the API under uvicorn; ``event`` computes one event's payroll
and prints it as JSON.
"""

import argparse
import asyncio
import logging
import sys
from uuid import UUID

import uvicorn

from event_payroll.config import get_settings


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="event-payroll",
        description="Event payroll computation engine",
    )
    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", help="Bind address (default: HOST setting)")
    serve.add_argument("--port", type=int, help="Bind port (default: PORT setting)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")

    event = subparsers.add_parser("event", help="Compute one event's payroll")
    event.add_argument("event_id", type=UUID, help="Event ID")

    return parser


async def _print_event_payroll(event_id: UUID) -> int:
    from event_payroll.api.schemas import EventPayrollResponse
    from event_payroll.calculators.engine import EventNotFoundError, PayrollEngine
    from event_payroll.database import dispose_db, get_session

    try:
        async with get_session() as session:
            result = await PayrollEngine(session).calculate_event(event_id)
    except EventNotFoundError as e:
        print(str(e), file=sys.stderr)
        return 1
    finally:
        await dispose_db()

    print(EventPayrollResponse.from_result(result).model_dump_json(indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the command line."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    args = _build_parser().parse_args(argv)

    if args.command == "event":
        return asyncio.run(_print_event_payroll(args.event_id))

    uvicorn.run(
        "event_payroll.api.app:app",
        host=getattr(args, "host", None) or settings.host,
        port=getattr(args, "port", None) or settings.port,
        reload=getattr(args, "reload", False) or settings.debug,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
