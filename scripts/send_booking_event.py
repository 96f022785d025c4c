"""Utility script to publish a booking event notification from the command line."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from pathlib import Path

import anyio

from marketplace.application.services import build_services
from marketplace.config import get_settings
from marketplace.domain.entities import BookingEvent, NotificationType
from marketplace.infrastructure.document_store import DocumentStoreError


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments for the booking event."""

    parser = argparse.ArgumentParser(
        description="Store a booking notification for a user and attempt a device push.",
    )
    parser.add_argument(
        "--type",
        required=True,
        choices=[item.value for item in NotificationType],
        help="Booking event that happened",
    )
    parser.add_argument("--recipient", required=True, help="Identifier of the notified user")
    parser.add_argument(
        "--booking",
        required=True,
        help="Booking as a JSON object, or @path to a file holding one",
    )
    return parser.parse_args(argv)


def load_booking(raw: str) -> BookingEvent:
    """Return the booking described by ``raw``."""

    if raw.startswith("@"):
        raw = Path(raw[1:]).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("The booking must be a JSON object")
    return BookingEvent.from_mapping(data)


def main(argv: Sequence[str] | None = None) -> str:
    """Publish the event described by the command line arguments."""

    args = parse_args(argv)
    try:
        booking = load_booking(args.booking)
    except (OSError, ValueError) as exc:
        raise SystemExit(f"Invalid booking: {exc}") from exc

    services = build_services(get_settings())
    try:
        notification_id = anyio.run(
            services.notifier.notify, NotificationType(args.type), args.recipient, booking
        )
    except DocumentStoreError as exc:
        raise SystemExit(f"Could not store the notification: {exc}") from exc
    finally:
        dispose = getattr(services.store, "dispose", None)
        if callable(dispose):
            dispose()

    print(
        "Notification stored:\n"
        f"  ID: {notification_id}\n"
        f"  Recipient: {args.recipient}\n"
        f"  Type: {args.type}"
    )
    return notification_id


if __name__ == "__main__":
    main(sys.argv[1:])
