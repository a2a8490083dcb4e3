"""Pydantic schemas for store service.

Request bodies use the storefront's camelCase keys; responses echo them.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from services.store_service.models import (
    OrderStatus,
    PaymentStatus,
    ReconciliationStatus,
)

SHIPPING_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "address",
    "city",
    "postal_code",
    "state",
    "country",
    "phone",
)


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ============================================================================
# CHECKOUT SCHEMAS
# ============================================================================


class ShippingDetails(CamelModel):
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    email: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = Field("", alias="postalCode")
    state: str = ""
    country: str = ""
    phone: str = ""

    def missing_fields(self) -> list[str]:
        """Required fields that are empty or whitespace-only."""
        return [name for name in SHIPPING_FIELDS if not getattr(self, name).strip()]

    def is_complete(self) -> bool:
        return not self.missing_fields()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class CartLine(CamelModel):
    """A cart entry as posted by the storefront at checkout."""

    id: Optional[str] = None
    name: str = "Unknown Product"
    price: Decimal = Field(Decimal("0"), ge=0)
    discount: Decimal = Field(Decimal("0"), ge=0, le=1)  # fraction of price
    quantity: int = 1
    selected_color: Optional[str] = Field(None, alias="selectedColor")
    selected_shade: Optional[str] = Field(None, alias="selectedShade")
    image_urls: list[str] = Field(default_factory=list)
    image: Optional[str] = None
    cost_price: Optional[Decimal] = Field(None, alias="costPrice")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        return str(v).strip()

    @property
    def image_url(self) -> Optional[str]:
        return self.image_urls[0] if self.image_urls else self.image


class CreatePaymentIntentRequest(BaseModel):
    amount: Decimal


class CreatePaymentIntentResponse(CamelModel):
    client_secret: str = Field(..., alias="clientSecret")


class CreateOrderRequest(CamelModel):
    payment_intent_id: Optional[str] = Field(None, alias="paymentIntentId")
    user_id: Optional[str] = Field(None, alias="userId")
    cart_items: list[CartLine] = Field(default_factory=list, alias="cartItems")
    shipping_details: ShippingDetails = Field(
        default_factory=ShippingDetails, alias="shippingDetails"
    )
    total_amount: Decimal = Field(..., alias="totalAmount")
    shipping_cost: Decimal = Field(Decimal("0"), alias="shippingCost")
    save_address: bool = Field(False, alias="saveAddress")


class CreateOrderResponse(CamelModel):
    success: bool = True
    order_id: uuid.UUID = Field(..., alias="orderId")
    message: str


class SendEmailRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to: Union[EmailStr, list[EmailStr]]
    subject: str = Field(..., min_length=1)
    html: str = Field(..., min_length=1)
    from_: Optional[str] = Field(None, alias="from")


class SendEmailResponse(BaseModel):
    success: bool = True
    data: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    error: str


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    cost_price: Decimal
    cost_price_estimated: bool
    subtotal: Decimal
    color: Optional[str] = None
    shade: Optional[str] = None
    image_url: Optional[str] = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: Optional[str] = None
    total_amount: Decimal
    shipping_cost: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    status: OrderStatus
    payment_status: PaymentStatus
    shipping_address: dict
    billing_address: dict
    payment_intent_id: str
    created_at: datetime
    updated_at: datetime
    items: list[OrderItemResponse] = []


class PurchaserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class AdminOrderResponse(OrderResponse):
    customer: Optional[PurchaserResponse] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class ReconciliationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    payment_intent_id: str
    error: Optional[str] = None
    attempts: int
    status: ReconciliationStatus
    order_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime
