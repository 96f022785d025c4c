"""Value objects used by the tax and payment computations."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Jurisdiction:
    """Address information used to resolve the applicable tax rules.

    For a service performed on location the taxable place is where the work
    happens, so ``service_address`` takes precedence over the billing postal
    code when both are known.
    """

    postal_code: str | None = None
    state: str | None = None
    service_address: str | None = None

    @property
    def has_address(self) -> bool:
        return bool(self.postal_code or self.service_address)

    @property
    def is_empty(self) -> bool:
        return not (self.postal_code or self.state or self.service_address)


@dataclass(frozen=True)
class TaxBreakdown:
    """Subtotal, tax and total expressed in minor currency units."""

    subtotal: int
    tax: int
    total: int
    source: str = "heuristic"

    def __post_init__(self) -> None:
        if self.tax < 0:
            raise ValueError("Tax cannot be negative")
        if self.total != self.subtotal + self.tax:
            raise ValueError("Total must equal subtotal plus tax")

    @classmethod
    def from_parts(cls, subtotal: int, tax: int, *, source: str) -> "TaxBreakdown":
        return cls(subtotal=subtotal, tax=tax, total=subtotal + tax, source=source)


__all__ = ["Jurisdiction", "TaxBreakdown"]
