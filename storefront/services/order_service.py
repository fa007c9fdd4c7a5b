# storefront/services/order_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Any, List

from sqlalchemy.orm import Session

from storefront.data.database import transaction
from storefront.data.models.order import OrderModel
from storefront.domain.enums import OrderStatus, PaymentStatus, VerificationStatus, CANCELLABLE_ORDER_STATUSES
from storefront.domain.pricing import round2, SHIPPING_FLAT, ZERO
from storefront.exceptions import EmptyCart, InvalidTransition, NotFound, ValidationError
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.payment_repo import PaymentVerificationRepo
from storefront.services.audit_service import AuditTrail
from storefront.services.catalog import Catalog, project_product
from storefront.services.notification_service import NotificationService
from storefront.utils.settings import DEFAULT_SHIPPING_ADDRESS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def order_number(order: OrderModel) -> str:
    """Numer do wyswietlenia, wyliczany z id i daty utworzenia, nie przechowywany."""
    ordered_at = order.ordered_at
    if ordered_at.tzinfo is None:
        ordered_at = ordered_at.replace(tzinfo=timezone.utc)
    return f"ORD{order.id}{int(ordered_at.timestamp() * 1000)}"[:15]


class OrderService:
    """
    Order Materializer: koszyk uzytkownika -> niezmienny snapshot zamowienia.
    Utworzenie zamowienia i wyczyszczenie koszyka to jedna transakcja.
    Stan magazynu nie jest tu zmniejszany.
    """

    def __init__(self, db: Session, notification_service: NotificationService | None = None):
        self.db = db
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.payment_repo = PaymentVerificationRepo(db)
        self.catalog = Catalog(db)
        self.audit = AuditTrail(db)
        self.notification_service = notification_service or NotificationService()

    def create_from_cart(self, user_id: int, shipping_address: str | None = None) -> Dict[str, Any]:
        with transaction(self.db):
            cart_items = self.cart_repo.get_cart_items(user_id)
            products = self.catalog.by_ids(i.product_id for i in cart_items)

            snapshot = []
            subtotal = ZERO
            for item in cart_items:
                product = products.get(item.product_id)
                if product is None:
                    continue

                view = project_product(product)
                line_total = view["price"] * item.quantity
                subtotal += line_total

                # kopia wartosci, zamowienie nie odwoluje sie potem do products
                snapshot.append(
                    {
                        "productId": product.id,
                        "productName": product.name,
                        "productPrice": float(view["price"]),
                        "quantity": item.quantity,
                        "totalPrice": float(line_total),
                    }
                )

            if not snapshot:
                raise EmptyCart(user_id)

            total = subtotal + SHIPPING_FLAT

            order = self.repo.create_order(
                OrderModel(
                    user_id=user_id,
                    products=snapshot,
                    total_amount=round2(total),
                    payment_status=PaymentStatus.PENDING.value,
                    order_status=OrderStatus.PENDING.value,
                    shipping_address=(shipping_address or "").strip() or DEFAULT_SHIPPING_ADDRESS,
                    ordered_at=datetime.now(timezone.utc),
                )
            )

            self.cart_repo.delete_cart_items(user_id)

        logger.info(f"Order {order.id} created from cart of user {user_id}, total {round2(total)}")

        self.audit.record(order.id, OrderStatus.PENDING.value, "Order placed", changed_by=None)
        self.notification_service.order_placed(user_id, order.id)

        return {
            "id": order.id,
            "orderNumber": order_number(order),
            "subtotal": round2(subtotal),
            "shippingAmount": round2(SHIPPING_FLAT),
            "totalAmount": round2(total),
            "items": snapshot,
            "paymentStatus": order.payment_status,
            "orderStatus": order.order_status,
            "shippingAddress": order.shipping_address,
            "createdAt": order.ordered_at,
        }

    def cancel_order(self, user_id: int, order_id: int) -> None:
        with transaction(self.db):
            order = self.repo.get_user_order(order_id, user_id, lock=True)
            if order is None:
                raise NotFound("Order not found", details={"order_id": order_id})

            if order.order_status not in CANCELLABLE_ORDER_STATUSES:
                raise InvalidTransition("Order cannot be cancelled at this stage", order.order_status)

            order.order_status = OrderStatus.CANCELLED.value
            self._close_pending_verification(order.id, "Order cancelled by customer")

        logger.info(f"Order {order_id} cancelled by user {user_id}")
        self.audit.record(order_id, OrderStatus.CANCELLED.value, "Cancelled by customer", changed_by=user_id)

    def update_status(self, reviewer_id: int, order_id: int, status: str) -> Dict[str, Any]:
        """
        Reczna zmiana statusu przez admina (np. Processing -> Delivered).
        Anulowane zamowienie jest koncowe.
        """
        valid = {s.value for s in OrderStatus}
        if status not in valid:
            raise ValidationError("Invalid order status", details={"status": status, "allowed": sorted(valid)})

        with transaction(self.db):
            order = self.repo.get_order(order_id, lock=True)
            if order is None:
                raise NotFound("Order not found", details={"order_id": order_id})

            if order.order_status == OrderStatus.CANCELLED.value and status != OrderStatus.CANCELLED.value:
                raise InvalidTransition("Cancelled orders cannot be reopened", order.order_status)

            previous = order.order_status
            order.order_status = status
            if status == OrderStatus.CANCELLED.value:
                self._close_pending_verification(order.id, "Order cancelled by admin", reviewer_id)

        logger.info(f"Order {order_id} status {previous} -> {status} by reviewer {reviewer_id}")
        self.audit.record(order_id, status, "Status updated by admin", changed_by=reviewer_id)

        return {"id": order.id, "orderStatus": order.order_status, "paymentStatus": order.payment_status}

    def _close_pending_verification(self, order_id: int, notes: str, reviewer_id: int | None = None) -> None:
        # weryfikacja anulowanego zamowienia nie moze zostac w kolejce pending
        verification = self.payment_repo.get_by_order(order_id)
        if verification is None or verification.verification_status != VerificationStatus.PENDING.value:
            return
        verification.verification_status = VerificationStatus.REJECTED.value
        verification.verification_notes = notes
        verification.verified_by = reviewer_id
        logger.info(f"Pending verification {verification.id} of order {order_id} closed: {notes}")

    #query
    def get_order(self, user_id: int, order_id: int) -> Dict[str, Any]:
        order = self.repo.get_user_order(order_id, user_id)
        if order is None:
            raise NotFound("Order not found", details={"order_id": order_id})

        verification = self.payment_repo.get_by_order(order.id)
        payment_verification = None
        if verification is not None:
            payment_verification = {
                "id": verification.id,
                "transactionId": verification.upi_transaction_id,
                "status": verification.verification_status,
                "notes": verification.verification_notes,
                "submittedAt": verification.created_at,
            }

        return {
            "id": order.id,
            "orderNumber": order_number(order),
            "items": order.products,
            "totalAmount": Decimal(str(order.total_amount)),
            "paymentStatus": order.payment_status,
            "orderStatus": order.order_status,
            "shippingAddress": order.shipping_address,
            "orderedAt": order.ordered_at,
            "paymentVerification": payment_verification,
        }

    def list_orders(self, user_id: int, page: int = 1, limit: int = 10) -> List[Dict[str, Any]]:
        if page < 1 or limit < 1:
            raise ValidationError("Page and limit must be positive")

        orders = self.repo.list_user_orders(user_id, limit=limit, offset=(page - 1) * limit)
        return [
            {
                "id": o.id,
                "orderNumber": order_number(o),
                "orderStatus": o.order_status,
                "paymentStatus": o.payment_status,
                "totalAmount": Decimal(str(o.total_amount)),
                "itemCount": sum(i.get("quantity", 0) for i in o.products or []),
                "orderedAt": o.ordered_at,
                "shippingAddress": o.shipping_address,
                "items": o.products,
            }
            for o in orders
        ]

    def list_all_orders(self, page: int = 1, limit: int = 50) -> List[Dict[str, Any]]:
        if page < 1 or limit < 1:
            raise ValidationError("Page and limit must be positive")

        rows = self.repo.list_all_orders(limit=limit, offset=(page - 1) * limit)
        return [
            {
                "id": o.id,
                "orderNumber": order_number(o),
                "userId": o.user_id,
                "userName": user_name,
                "userEmail": user_email,
                "orderStatus": o.order_status,
                "paymentStatus": o.payment_status,
                "totalAmount": Decimal(str(o.total_amount)),
                "itemCount": sum(i.get("quantity", 0) for i in o.products or []),
                "orderedAt": o.ordered_at,
                "shippingAddress": o.shipping_address,
                "items": o.products,
            }
            for o, user_name, user_email in rows
        ]
