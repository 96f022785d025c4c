"""Tax estimation and payment intent use cases."""

from .intents import InvalidAmountError, PaymentGateway, PaymentIntentBuilder, validate_amount
from .tax import DEFAULT_FLAT_RATE, TaxEstimator, TaxService, coerce_subtotal, flat_rate_tax

__all__ = [
    "DEFAULT_FLAT_RATE",
    "InvalidAmountError",
    "PaymentGateway",
    "PaymentIntentBuilder",
    "TaxEstimator",
    "TaxService",
    "coerce_subtotal",
    "flat_rate_tax",
    "validate_amount",
]
