from enum import Enum


class BookingStatus(str, Enum):
    pending = "pending"            # created, awaiting payment
    confirmed = "confirmed"        # payment received
    in_progress = "in_progress"    # the cruise has started
    completed = "completed"        # the cruise has ended
    cancelled = "cancelled"
    refunded = "refunded"


class PaymentStatus(str, Enum):
    pending = "pending"
    processing = "processing"      # waiting on the gateway callback
    completed = "completed"
    failed = "failed"
    refunded = "refunded"
    partially_refunded = "partially_refunded"


class PaymentMethod(str, Enum):
    credit_card = "credit_card"
    debit_card = "debit_card"
    paypal = "paypal"
    bank_transfer = "bank_transfer"
    stripe = "stripe"
    apple_pay = "apple_pay"
    google_pay = "google_pay"


class EnquiryStatus(str, Enum):
    submitted = "submitted"
    in_review = "in_review"
    responded = "responded"
    closed = "closed"


class CancellationReason(str, Enum):
    customer_request = "customer_request"
    schedule_change = "schedule_change"
    medical = "medical"
    weather = "weather"
    emergency = "emergency"
    policy_violation = "policy_violation"
    other = "other"


class UserRole(str, Enum):
    customer = "customer"
    staff = "staff"
    admin = "admin"
