from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field, field_validator

from oceanview.schemas.common import ApiModel, Entity
from oceanview.schemas.enums import PaymentMethod, PaymentStatus


class PaymentCreate(ApiModel):
    booking_id: int
    amount: int = Field(ge=0)
    currency: str = "USD"
    status: PaymentStatus = PaymentStatus.pending
    payment_method: PaymentMethod
    transaction_id: Optional[str] = None
    payment_intent_id: Optional[str] = None
    billing_address: Optional[Dict[str, Any]] = None
    card_last4: Optional[str] = Field(default=None, pattern=r"^\d{4}$")
    expiry_month: Optional[str] = None
    expiry_year: Optional[str] = None
    cardholder_name: Optional[str] = None


class Payment(Entity):
    id: int
    booking_id: int
    amount: int
    currency: str = "USD"
    status: PaymentStatus = PaymentStatus.pending
    payment_method: PaymentMethod
    transaction_id: Optional[str] = None
    payment_intent_id: Optional[str] = None
    payment_date: datetime
    billing_address: Optional[Dict[str, Any]] = None
    card_last4: Optional[str] = None
    expiry_month: Optional[str] = None
    expiry_year: Optional[str] = None
    cardholder_name: Optional[str] = None
    refund_amount: Optional[int] = None
    refund_date: Optional[datetime] = None
    gateway_response: Optional[Dict[str, Any]] = None

    @property
    def refundable(self) -> int:
        return self.amount - (self.refund_amount or 0)


class StripePaymentData(ApiModel):
    """Masked card metadata handed to the store. Never a full card number or CVV."""
    payment_intent_id: Optional[str] = None
    billing_address: Optional[Dict[str, Any]] = None
    card_last4: Optional[str] = Field(default=None, pattern=r"^\d{4}$")
    expiry_month: Optional[str] = None
    expiry_year: Optional[str] = None
    cardholder_name: Optional[str] = None


class CheckoutPaymentIn(ApiModel):
    # Raw card form from the checkout page; masked by to_stripe_data() before it reaches the store.
    card_number: str = Field(min_length=16, max_length=16, pattern=r"^\d{16}$")
    card_name: str = Field(min_length=1)
    expiry_date: str = Field(pattern=r"^(0[1-9]|1[0-2])/\d{2}$")  # MM/YY
    cvv: str = Field(min_length=3, max_length=4, pattern=r"^\d{3,4}$")
    billing_address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    zip_code: str = Field(min_length=1)
    country: str = Field(min_length=1)
    payment_intent_id: Optional[str] = None

    @field_validator("card_number", mode="before")
    @classmethod
    def strip_spaces(cls, v):
        return v.replace(" ", "") if isinstance(v, str) else v

    def to_stripe_data(self) -> StripePaymentData:
        month, year = self.expiry_date.split("/")
        return StripePaymentData(
            payment_intent_id=self.payment_intent_id,
            billing_address={
                "address": self.billing_address,
                "city": self.city,
                "zipCode": self.zip_code,
                "country": self.country,
            },
            card_last4=self.card_number[-4:],
            expiry_month=month,
            expiry_year=year,
            cardholder_name=self.card_name,
        )


class PaymentStatusUpdate(ApiModel):
    status: PaymentStatus


class PaymentWebhookIn(ApiModel):
    payment_id: int
    status: PaymentStatus
    transaction_id: Optional[str] = None


class PaymentReceipt(ApiModel):
    message: str
    payment: Payment
