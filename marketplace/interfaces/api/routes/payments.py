"""Checkout endpoints: tax estimation and payment intents."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, status

from marketplace.application.services import Services
from marketplace.application.use_cases.payments import InvalidAmountError
from marketplace.domain.entities import Jurisdiction
from marketplace.infrastructure.payments import PaymentGatewayError
from marketplace.interfaces.api.dependencies import get_services
from marketplace.interfaces.api.schemas import (
    PaymentIntentRequest,
    PaymentIntentResponse,
    TaxCalculationRequest,
    TaxCalculationResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["payments"])


@router.post("/calculate-tax", response_model=TaxCalculationResponse)
async def calculate_tax(
    payload: TaxCalculationRequest,
    services: Services = Depends(get_services),
) -> TaxCalculationResponse:
    """Return a tax breakdown; upstream failures degrade to the flat rate."""

    breakdown = await services.tax_estimator.estimate(
        payload.amount_cents,
        Jurisdiction(
            postal_code=payload.zip_code,
            state=payload.state,
            service_address=payload.service_address,
        ),
    )
    return TaxCalculationResponse(
        subtotal=breakdown.subtotal, tax=breakdown.tax, total=breakdown.total
    )


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    payload: PaymentIntentRequest,
    services: Services = Depends(get_services),
    idempotency_key: str | None = Header(default=None),
) -> PaymentIntentResponse:
    """Create a pending charge and return the secret the client confirms with."""

    jurisdiction = None
    if payload.service_address or payload.zip_code or payload.state:
        jurisdiction = Jurisdiction(
            postal_code=payload.zip_code,
            state=payload.state,
            service_address=payload.service_address,
        )
    try:
        client_secret = await services.payment_intents.create_intent(
            payload.amount_cents,
            jurisdiction=jurisdiction,
            metadata=payload.metadata,
            idempotency_key=idempotency_key,
        )
    except InvalidAmountError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except PaymentGatewayError as exc:
        logger.error("Payment intent creation failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return PaymentIntentResponse(client_secret=client_secret)
