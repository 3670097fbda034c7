from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from settlement.database import MAX_RECORD_ID


class PaymentRequest(BaseModel):
    # Omitted fields take zero values; order_id is not checked against the Order Service
    order_id: int = Field(default=0, ge=0, le=MAX_RECORD_ID)
    amount: int = 0
    status: Optional[str] = None    # ignored, the service decides the status


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_id: int
    amount: int
    status: str
