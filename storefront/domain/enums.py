# storefront/domain/enums.py
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    PROCESSING = "Processing"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"
    FAILED = "Failed"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


# zamowienie mozna anulowac tylko przed weryfikacja platnosci
CANCELLABLE_ORDER_STATUSES = frozenset({OrderStatus.PENDING.value, OrderStatus.CONFIRMED.value})
