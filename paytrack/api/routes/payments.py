from fastapi import APIRouter, Depends, Response, status

from paytrack.core.dependencies import get_payment_toggle
from paytrack.schemas.payment import PaymentResponse, PaymentToggleRequest
from paytrack.services.payment_service import UNSET, PaymentToggle

router = APIRouter(prefix="/api/payments", tags=["Payments"])


@router.get("", response_model=list[PaymentResponse])
def get_all_payments(toggle: PaymentToggle = Depends(get_payment_toggle)):
    return toggle.list_payments()


@router.get("/{client_id}", response_model=list[PaymentResponse])
def get_client_payments(
    client_id: int,
    toggle: PaymentToggle = Depends(get_payment_toggle),
):
    return toggle.list_payments(client_id)


@router.post("/toggle", response_model=PaymentResponse)
def toggle_payment(
    payload: PaymentToggleRequest,
    response: Response,
    toggle: PaymentToggle = Depends(get_payment_toggle),
):
    notes = payload.notes if "notes" in payload.model_fields_set else UNSET

    result = toggle.set_payment_state(
        client_id=payload.client_id,
        month=payload.month,
        year=payload.year,
        paid=payload.paid,
        notes=notes,
    )

    if result.created:
        response.status_code = status.HTTP_201_CREATED

    return result.payment
