"""Booking payloads consumed by the notification pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class BookingService:
    """A single service line of a booking."""

    name: str


@dataclass(frozen=True)
class BookingEvent:
    """Snapshot of the booking fields that notifications describe."""

    id: str
    date: str | None = None
    time: str | None = None
    services: tuple[BookingService, ...] = ()
    service_name: str | None = None
    customer_email: str | None = None
    price: float | int | None = None
    total_price: float | int | None = None

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "BookingEvent":
        """Build an event from a loosely typed booking document."""

        raw_services = data.get("services") or []
        services = tuple(
            BookingService(name=str(item.get("name") or "service"))
            if isinstance(item, dict)
            else BookingService(name=str(item))
            for item in raw_services
        )
        return cls(
            id=str(data.get("id") or ""),
            date=data.get("date"),
            time=data.get("time"),
            services=services,
            service_name=data.get("serviceName") or data.get("service_name"),
            customer_email=data.get("customerEmail") or data.get("customer_email"),
            price=data.get("price"),
            total_price=data.get("totalPrice") or data.get("total_price"),
        )

    def service_summary(self) -> str:
        """Describe the booked services in bounded length."""

        if len(self.services) == 1:
            return self.services[0].name
        if self.services:
            return f"{len(self.services)} services"
        return self.service_name or "service"

    def amount(self) -> float | int:
        return self.price or self.total_price or 0


__all__ = ["BookingEvent", "BookingService"]
