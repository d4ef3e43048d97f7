from typing import Optional

from pydantic import BaseModel


class PaymentToggleRequest(BaseModel):
    client_id: int
    month: int
    year: int
    paid: bool
    # Omitting the key keeps the stored notes; "" or null clears them
    notes: Optional[str] = None


class PaymentResponse(BaseModel):
    id: int
    client_id: int
    month: int
    year: int
    paid: bool
    notes: Optional[str] = None

    class Config:
        from_attributes = True
