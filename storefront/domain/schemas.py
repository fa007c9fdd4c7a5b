# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List, Optional
from decimal import Decimal
from datetime import datetime


class CamelModel(BaseModel):
    """API mowi camelCase (productId, sessionId), w kodzie snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MessageOut(CamelModel):
    success: bool = True
    message: str


# ---------------- cart ----------------

class CartItemIn(CamelModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi byc > 0)")
    quantity: int = Field(1, gt=0, description="Ilosc produktu (musi byc > 0)")


class CartQuantityIn(CamelModel):
    """Schema dla zmiany ilosci, ilosc <= 0 usuwa pozycje."""

    product_id: int = Field(..., gt=0)
    quantity: int


class CartLineOut(CamelModel):
    product_id: int
    name: str
    price: Decimal
    original_price: Optional[Decimal] = None
    quantity: int
    category: Optional[str] = None
    stock: int
    image: str
    item_total: Decimal


class CartSummaryOut(CamelModel):
    item_count: int
    subtotal: Decimal
    shipping: Decimal
    total: Decimal


class CartOut(CamelModel):
    items: List[CartLineOut]
    summary: CartSummaryOut


class CartResponse(CamelModel):
    success: bool = True
    cart: CartOut


class GuestSessionOut(CamelModel):
    success: bool = True
    session_id: str
    message: str = "Session created successfully"


# ---------------- favorites ----------------

class FavoriteIn(CamelModel):
    product_id: int = Field(..., gt=0)


class FavoriteOut(CamelModel):
    product_id: int
    name: str
    price: Decimal
    original_price: Optional[Decimal] = None
    discount: Decimal
    category: Optional[str] = None
    stock: int
    image: str


class FavoritesResponse(CamelModel):
    success: bool = True
    favorites: List[FavoriteOut]


class FavoriteCheckOut(CamelModel):
    success: bool = True
    is_favorite: bool


class FavoriteCountOut(CamelModel):
    success: bool = True
    count: int


# ---------------- auth ----------------

class RegisterIn(CamelModel):
    """Schema dla rejestracji, opcjonalnie z sesja goscia do przeniesienia."""

    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6)
    phone: Optional[str] = None
    session_id: Optional[str] = None


class LoginIn(CamelModel):
    """email albo numer telefonu w polu email."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    session_id: Optional[str] = None


class UserOut(CamelModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    created_at: datetime


class MigrationOut(CamelModel):
    cart_transferred: bool
    favorites_transferred: bool
    message: str


class AuthResponse(CamelModel):
    success: bool = True
    token: str
    user: UserOut
    migration: Optional[MigrationOut] = None
    message: str


class TokenCheckOut(CamelModel):
    success: bool = True
    user_id: int


# ---------------- orders ----------------

class CreateOrderIn(CamelModel):
    shipping_address: Optional[str] = None


class OrderLineOut(CamelModel):
    product_id: int
    product_name: str
    product_price: float
    quantity: int
    total_price: float


class CreatedOrderOut(CamelModel):
    id: int
    order_number: str
    subtotal: Decimal
    shipping_amount: Decimal
    total_amount: Decimal
    items: List[OrderLineOut]
    payment_status: str
    order_status: str
    shipping_address: str
    created_at: datetime


class CreatedOrderResponse(CamelModel):
    success: bool = True
    order: CreatedOrderOut


class PaymentVerificationSummaryOut(CamelModel):
    id: int
    transaction_id: str
    status: str
    notes: Optional[str] = None
    submitted_at: datetime


class OrderOut(CamelModel):
    id: int
    order_number: str
    items: List[OrderLineOut]
    total_amount: Decimal
    payment_status: str
    order_status: str
    shipping_address: str
    ordered_at: datetime
    payment_verification: Optional[PaymentVerificationSummaryOut] = None


class OrderResponse(CamelModel):
    success: bool = True
    order: OrderOut


class OrderListItemOut(CamelModel):
    id: int
    order_number: str
    order_status: str
    payment_status: str
    total_amount: Decimal
    item_count: int
    ordered_at: datetime
    shipping_address: str
    items: List[OrderLineOut]


class OrderListResponse(CamelModel):
    success: bool = True
    orders: List[OrderListItemOut]


class AdminOrderOut(OrderListItemOut):
    user_id: int
    user_name: Optional[str] = None
    user_email: Optional[str] = None


class AdminOrderListResponse(CamelModel):
    success: bool = True
    orders: List[AdminOrderOut]


class OrderStatusIn(CamelModel):
    status: str = Field(..., min_length=1)


class OrderStatusOut(CamelModel):
    success: bool = True
    message: str
    id: int
    order_status: str
    payment_status: str


# ---------------- payment ----------------

class PaymentVerificationIn(CamelModel):
    """Schema dla zgloszenia platnosci (przelew/UPI) do recznej weryfikacji."""

    order_id: int = Field(..., gt=0)
    transaction_id: str = Field(..., min_length=1)
    reference_number: Optional[str] = None
    screenshot_url: Optional[str] = None
    amount_paid: Decimal = Field(..., gt=0)


class ReviewIn(CamelModel):
    status: str = Field(..., description="verified albo rejected")
    notes: Optional[str] = None


class VerificationOut(CamelModel):
    id: int
    order_id: int
    transaction_id: str
    reference_number: Optional[str] = None
    screenshot_url: Optional[str] = None
    amount_paid: Decimal
    payment_date: datetime
    status: str
    verified_by: Optional[int] = None
    notes: Optional[str] = None
    submitted_at: datetime


class VerificationListResponse(CamelModel):
    success: bool = True
    verifications: List[VerificationOut]
