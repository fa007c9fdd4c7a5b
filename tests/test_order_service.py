"""
Unit Tests: OrderService

- create_from_cart(): snapshot, totals, cart clearing, atomicity
- cancel_order(): allowed only from Pending/Confirmed
"""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from storefront.data.models.order import OrderModel
from storefront.data.models.payment_verification import PaymentVerificationModel
from storefront.data.models.user import UserModel
from storefront.domain.enums import OrderStatus, PaymentStatus, VerificationStatus
from storefront.domain.identity import UserIdentity
from storefront.exceptions import DependencyUnavailable, EmptyCart, InvalidTransition, NotFound, ValidationError
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.services.cart_service import CartService
from storefront.services.order_service import OrderService, order_number
from storefront.services.payment_service import PaymentVerificationService
from storefront.utils.settings import DEFAULT_SHIPPING_ADDRESS


@pytest.fixture
def notifier():
    return MagicMock()


@pytest.fixture
def service(db, products, notifier):
    return OrderService(db, notification_service=notifier)


@pytest.fixture
def cart(db, store, products):
    return CartService(db=db, session_store=store)


@pytest.fixture
def filled_cart(cart, member):
    cart.add_item(member, 1, 2)
    cart.add_item(member, 2, 1)
    return cart


def test_create_from_cart_snapshot_and_totals(service, filled_cart, member, notifier):
    order = service.create_from_cart(member.user_id, "221B Baker Street")

    assert order["subtotal"] == Decimal("240.00")
    assert order["totalAmount"] == Decimal("240.00")
    assert order["shippingAmount"] == Decimal("0.00")
    assert order["paymentStatus"] == PaymentStatus.PENDING.value
    assert order["orderStatus"] == OrderStatus.PENDING.value
    assert order["shippingAddress"] == "221B Baker Street"

    lines = {i["productId"]: i for i in order["items"]}
    assert lines[1] == {"productId": 1, "productName": "Linen Shirt", "productPrice": 100.0, "quantity": 2, "totalPrice": 200.0}
    assert lines[2]["productPrice"] == 40.0
    assert lines[2]["totalPrice"] == 40.0

    assert filled_cart.get_cart(member)["items"] == []
    notifier.order_placed.assert_called_once_with(member.user_id, order["id"])


def test_snapshot_is_immune_to_catalog_changes(service, filled_cart, member, products, db):
    order = service.create_from_cart(member.user_id, None)

    products[1].price = Decimal("999.00")
    db.commit()
    db.expire_all()

    stored = db.get(OrderModel, order["id"])
    assert Decimal(str(stored.total_amount)) == Decimal("240.00")
    assert {i["productId"]: i["productPrice"] for i in stored.products} == {1: 100.0, 2: 40.0}


def test_missing_address_uses_placeholder(service, filled_cart, member):
    order = service.create_from_cart(member.user_id, "   ")

    assert order["shippingAddress"] == DEFAULT_SHIPPING_ADDRESS


def test_empty_cart_raises(service, member, db):
    with pytest.raises(EmptyCart):
        service.create_from_cart(member.user_id, "addr")

    assert db.query(OrderModel).count() == 0


def test_failure_after_insert_keeps_cart_and_creates_no_order(service, filled_cart, member, db, monkeypatch):
    def broken_clear(self, user_id):
        raise OperationalError("DELETE FROM cart_items", {}, Exception("ledger down"))

    monkeypatch.setattr(CartRepo, "delete_cart_items", broken_clear)

    with pytest.raises(DependencyUnavailable):
        service.create_from_cart(member.user_id, "addr")

    assert db.query(OrderModel).count() == 0
    assert len(CartRepo(db).get_cart_items(member.user_id)) == 2


def test_order_creation_writes_history(service, filled_cart, member, db):
    order = service.create_from_cart(member.user_id, "addr")

    history = OrderRepo(db).get_history(order["id"])
    assert [h.status for h in history] == [OrderStatus.PENDING.value]


def test_order_number_is_derived(service, filled_cart, member, db):
    order = service.create_from_cart(member.user_id, "addr")

    stored = db.get(OrderModel, order["id"])
    assert order["orderNumber"] == order_number(stored)
    assert order["orderNumber"].startswith(f"ORD{order['id']}")
    assert len(order["orderNumber"]) == 15


class TestCancelOrder:
    @pytest.mark.parametrize("status", [OrderStatus.PENDING.value, OrderStatus.CONFIRMED.value])
    def test_cancel_allowed(self, service, filled_cart, member, db, status):
        order_id = service.create_from_cart(member.user_id, "addr")["id"]
        db.get(OrderModel, order_id).order_status = status
        db.commit()

        service.cancel_order(member.user_id, order_id)

        assert db.get(OrderModel, order_id).order_status == OrderStatus.CANCELLED.value
        assert db.get(OrderModel, order_id).payment_status == PaymentStatus.PENDING.value

    @pytest.mark.parametrize(
        "status",
        [OrderStatus.PROCESSING.value, OrderStatus.DELIVERED.value, OrderStatus.CANCELLED.value],
    )
    def test_cancel_rejected(self, service, filled_cart, member, db, status):
        order_id = service.create_from_cart(member.user_id, "addr")["id"]
        db.get(OrderModel, order_id).order_status = status
        db.commit()

        with pytest.raises(InvalidTransition):
            service.cancel_order(member.user_id, order_id)

        assert db.get(OrderModel, order_id).order_status == status

    def test_cancel_closes_pending_verification(self, service, filled_cart, member, db):
        order_id = service.create_from_cart(member.user_id, "addr")["id"]
        payments = PaymentVerificationService(db, notification_service=MagicMock())
        submitted = payments.submit_verification(member.user_id, order_id, "UPI1", None, None, "240")

        service.cancel_order(member.user_id, order_id)

        verification = db.get(PaymentVerificationModel, submitted["id"])
        assert verification.verification_status == VerificationStatus.REJECTED.value
        assert verification.verification_notes == "Order cancelled by customer"
        assert payments.list_verifications(status="pending") == []

    def test_cancel_foreign_order_is_not_found(self, service, filled_cart, member):
        order_id = service.create_from_cart(member.user_id, "addr")["id"]

        with pytest.raises(NotFound):
            service.cancel_order(member.user_id + 1, order_id)


class TestQueries:
    def test_get_order(self, service, filled_cart, member):
        order_id = service.create_from_cart(member.user_id, "addr")["id"]

        order = service.get_order(member.user_id, order_id)

        assert order["totalAmount"] == Decimal("240.00")
        assert order["paymentVerification"] is None
        assert len(order["items"]) == 2

    def test_list_orders_newest_first(self, service, cart, member):
        cart.add_item(member, 1, 1)
        first = service.create_from_cart(member.user_id, "addr")["id"]
        cart.add_item(member, 2, 3)
        second = service.create_from_cart(member.user_id, "addr")["id"]

        orders = service.list_orders(member.user_id)

        assert [o["id"] for o in orders] == [second, first]
        assert orders[0]["itemCount"] == 3


class TestAdminOrders:
    def test_mark_delivered(self, service, filled_cart, member, reviewer_id, db):
        order_id = service.create_from_cart(member.user_id, "addr")["id"]

        result = service.update_status(reviewer_id, order_id, OrderStatus.DELIVERED.value)

        assert result["orderStatus"] == OrderStatus.DELIVERED.value
        history = OrderRepo(db).get_history(order_id)
        assert history[-1].status == OrderStatus.DELIVERED.value
        assert history[-1].changed_by == reviewer_id

        with pytest.raises(InvalidTransition):
            service.cancel_order(member.user_id, order_id)

    @pytest.mark.parametrize("status", ["Shipped", "delivered", ""])
    def test_unknown_status_is_rejected(self, service, filled_cart, member, reviewer_id, db, status):
        order_id = service.create_from_cart(member.user_id, "addr")["id"]

        with pytest.raises(ValidationError):
            service.update_status(reviewer_id, order_id, status)

        assert db.get(OrderModel, order_id).order_status == OrderStatus.PENDING.value

    def test_unknown_order(self, service, reviewer_id):
        with pytest.raises(NotFound):
            service.update_status(reviewer_id, 4242, OrderStatus.DELIVERED.value)

    def test_cancelled_order_stays_cancelled(self, service, filled_cart, member, reviewer_id):
        order_id = service.create_from_cart(member.user_id, "addr")["id"]
        service.cancel_order(member.user_id, order_id)

        with pytest.raises(InvalidTransition):
            service.update_status(reviewer_id, order_id, OrderStatus.PROCESSING.value)

    def test_admin_cancel_closes_pending_verification(self, service, filled_cart, member, reviewer_id, db):
        order_id = service.create_from_cart(member.user_id, "addr")["id"]
        payments = PaymentVerificationService(db, notification_service=MagicMock())
        submitted = payments.submit_verification(member.user_id, order_id, "UPI1", None, None, "240")

        service.update_status(reviewer_id, order_id, OrderStatus.CANCELLED.value)

        verification = db.get(PaymentVerificationModel, submitted["id"])
        assert verification.verification_status == VerificationStatus.REJECTED.value
        assert verification.verified_by == reviewer_id

    def test_list_all_orders_spans_users(self, service, cart, member, db):
        other = UserModel(name="Other Buyer", email="other@example.com")
        db.add(other)
        db.commit()

        cart.add_item(member, 1, 1)
        first = service.create_from_cart(member.user_id, "addr")["id"]
        cart.add_item(UserIdentity(other.id), 2, 2)
        second = service.create_from_cart(other.id, "addr")["id"]

        orders = service.list_all_orders()

        assert [o["id"] for o in orders] == [second, first]
        assert orders[0]["userEmail"] == "other@example.com"
        assert orders[1]["userName"] == "Test User"
        assert orders[0]["itemCount"] == 2
