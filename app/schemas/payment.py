from typing import Optional, List
from decimal import Decimal
from pydantic import Field
from .common import APIModel
from .order import OrderItemIn, OrderResponse


class PaymentRequest(APIModel):
    amount: Decimal = Field(..., gt=0)
    payment_method: str = "UPI"


class PaymentQRResponse(APIModel):
    success: bool = True
    qr_code: str
    upi_link: str
    upi_id: str
    name: str
    total_amount: Decimal


class UPITransactionSubmit(APIModel):
    amount: Decimal = Field(..., gt=0)
    txn_id: Optional[str] = None
    items: List[OrderItemIn] = Field(default_factory=list)
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class UPITransactionResponse(APIModel):
    success: bool = True
    message: str
    order_id: int
    reference: str


class PaymentVerificationResponse(APIModel):
    success: bool = True
    order: OrderResponse
