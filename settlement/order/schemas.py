from typing import Optional

from pydantic import BaseModel, ConfigDict


class OrderCreate(BaseModel):
    # Omitted fields take zero values; only undecodable or mistyped bodies are rejected
    item: str = ""
    amount: int = 0
    paid: bool = False


class OrderUpdate(BaseModel):
    item: Optional[str] = None
    amount: Optional[int] = None
    paid: Optional[bool] = None


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    item: str
    amount: int
    paid: bool


class PaymentView(BaseModel):
    """Payment as reported by the Payment Service; unknown fields pass through."""

    model_config = ConfigDict(extra="allow")

    id: int
    order_id: int
    amount: int
    status: str
