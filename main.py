"""
Courtside entry point.

Browses the live class-session board through the Booking Backend, or
runs the offline console demo for development.

Usage:
    Live board:   python main.py browse 42
    Console mode: python main.py console
"""

import asyncio
import logging
import sys

from courtside.config import settings

logger = logging.getLogger(__name__)


async def _browse(user_id: str) -> None:
    """Print the grouped session board for one member (requires an API token)."""
    from courtside.backend.client import HttpBookingBackend
    from courtside.sessions.board import SessionBoard
    from courtside.utils import format_money

    async with HttpBookingBackend(lambda: settings.backend.api_token) as backend:
        board = SessionBoard(backend, user_id)
        entries = await board.refresh()
        for entry in entries:
            group = entry.group
            print(
                f"{group.key:>12}  {group.title} | {group.coach_name} | {group.venue_name} | "
                f"{group.date_range_label} | {format_money(group.total_price)} | {entry.label}"
            )
        logger.info("Listed %d bookable units from %s", len(entries), settings.backend.base_url)


def _run_browse_mode(args: list[str]) -> None:
    if not args:
        print("Usage: python main.py browse <user_id>")
        sys.exit(2)
    if not settings.backend.api_token:
        logger.error("BACKEND_API_TOKEN is not set")
        sys.exit(1)
    asyncio.run(_browse(args[0]))


def _run_console_mode() -> None:
    """Start the offline console demo (no Backend required)."""
    from console_demo import run_scenario

    asyncio.run(run_scenario("group"))


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "browse":
        _run_browse_mode(sys.argv[2:])
    else:
        _run_console_mode()
