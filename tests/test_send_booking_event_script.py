"""Tests for the booking event command line script."""

from __future__ import annotations

import json

import anyio
import pytest

from marketplace.application.services import build_store
from marketplace.config import get_settings, reset_settings_cache
from marketplace.infrastructure.repositories import NotificationRepository
from scripts.send_booking_event import load_booking, main


@pytest.fixture
def database_url(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'script.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.delenv("FIREBASE_SERVICE_ACCOUNT", raising=False)
    monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
    reset_settings_cache()
    yield url
    reset_settings_cache()


def test_main_stores_reminder(database_url, tmp_path, capsys) -> None:
    booking_file = tmp_path / "booking.json"
    booking_file.write_text(
        json.dumps({"id": "b7", "date": "2024-06-01", "time": "09:30", "serviceName": "Wash"}),
        encoding="utf-8",
    )

    notification_id = main(
        ["--type", "booking_reminder", "--recipient", "cust", "--booking", f"@{booking_file}"]
    )

    assert notification_id in capsys.readouterr().out
    store = build_store(get_settings())
    try:
        notification = anyio.run(NotificationRepository(store).get, notification_id)
    finally:
        store.dispose()
    assert notification.message == "Reminder: You have a booking for Wash tomorrow at 09:30"


def test_main_rejects_invalid_booking(database_url) -> None:
    with pytest.raises(SystemExit):
        main(["--type", "new_booking", "--recipient", "p", "--booking", "[1]"])


def test_load_booking_inline_json() -> None:
    booking = load_booking('{"id": "b1", "services": [{"name": "Wax"}]}')

    assert booking.service_summary() == "Wax"
