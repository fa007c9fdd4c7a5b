"""
Unit Tests: PaymentVerificationService

Transition table:
    Pending   --submit-->           Confirmed  (payment Pending)
    Confirmed --review verified-->  Processing (payment Paid)
    Confirmed --review rejected-->  Cancelled  (payment Failed)
"""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from storefront.data.models.order import OrderModel
from storefront.data.models.payment_verification import PaymentVerificationModel
from storefront.domain.enums import OrderStatus, PaymentStatus, VerificationStatus
from storefront.exceptions import DuplicateSubmission, InvalidTransition, NotFound, ValidationError
from storefront.repos.order_repo import OrderRepo
from storefront.services.cart_service import CartService
from storefront.services.order_service import OrderService
from storefront.services.payment_service import PaymentVerificationService


@pytest.fixture
def notifier():
    return MagicMock()


@pytest.fixture
def service(db, notifier):
    return PaymentVerificationService(db, notification_service=notifier)


@pytest.fixture
def order_id(db, store, products, member):
    cart = CartService(db=db, session_store=store)
    cart.add_item(member, 1, 2)
    cart.add_item(member, 2, 1)
    return OrderService(db, notification_service=MagicMock()).create_from_cart(member.user_id, "addr")["id"]


@pytest.fixture
def submitted(service, member, order_id):
    return service.submit_verification(member.user_id, order_id, "UPI123", "REF9", None, "240.00")


def _order(db, order_id):
    db.expire_all()
    return db.get(OrderModel, order_id)


class TestSubmit:
    def test_submit_confirms_order_but_keeps_payment_pending(self, service, member, order_id, db):
        result = service.submit_verification(member.user_id, order_id, "UPI123", "REF9", "/uploads/s.png", Decimal("240"))

        assert result["status"] == VerificationStatus.PENDING.value
        order = _order(db, order_id)
        assert order.order_status == OrderStatus.CONFIRMED.value
        assert order.payment_status == PaymentStatus.PENDING.value

    def test_duplicate_submission_is_rejected(self, service, member, order_id, submitted, db):
        with pytest.raises(DuplicateSubmission):
            service.submit_verification(member.user_id, order_id, "OTHER", None, None, "1.00")

        db.expire_all()
        rows = db.query(PaymentVerificationModel).all()
        assert len(rows) == 1
        assert rows[0].upi_transaction_id == "UPI123"
        assert rows[0].verification_status == VerificationStatus.PENDING.value

    def test_foreign_order_is_not_found(self, service, member, order_id):
        with pytest.raises(NotFound):
            service.submit_verification(member.user_id + 1, order_id, "UPI123", None, None, "240")

    @pytest.mark.parametrize("amount", ["0", "-5", "abc"])
    def test_invalid_amount(self, service, member, order_id, amount):
        with pytest.raises(ValidationError):
            service.submit_verification(member.user_id, order_id, "UPI123", None, None, amount)

    def test_missing_transaction_id(self, service, member, order_id):
        with pytest.raises(ValidationError):
            service.submit_verification(member.user_id, order_id, "  ", None, None, "240")

    def test_cancelled_order_cannot_be_paid(self, service, member, order_id, db):
        OrderService(db, notification_service=MagicMock()).cancel_order(member.user_id, order_id)

        with pytest.raises(InvalidTransition):
            service.submit_verification(member.user_id, order_id, "UPI123", None, None, "240")


class TestReview:
    def test_verified(self, service, submitted, order_id, reviewer_id, db, notifier, member):
        result = service.review_verification(reviewer_id, submitted["id"], "verified", "ok")

        assert result["orderStatus"] == OrderStatus.PROCESSING.value
        assert result["paymentStatus"] == PaymentStatus.PAID.value

        order = _order(db, order_id)
        assert order.order_status == OrderStatus.PROCESSING.value
        assert order.payment_status == PaymentStatus.PAID.value

        verification = db.get(PaymentVerificationModel, submitted["id"])
        assert verification.verification_status == VerificationStatus.VERIFIED.value
        assert verification.verified_by == reviewer_id
        notifier.payment_reviewed.assert_called_once_with(member.user_id, order_id, "verified")

    def test_rejected(self, service, submitted, order_id, reviewer_id, db):
        service.review_verification(reviewer_id, submitted["id"], "rejected", "amount mismatch")

        order = _order(db, order_id)
        assert order.order_status == OrderStatus.CANCELLED.value
        assert order.payment_status == PaymentStatus.FAILED.value

        history = OrderRepo(db).get_history(order_id)
        assert history[-1].status == OrderStatus.CANCELLED.value
        assert history[-1].notes == "Payment verification rejected: amount mismatch"

    def test_unknown_verification(self, service, reviewer_id):
        with pytest.raises(NotFound):
            service.review_verification(reviewer_id, 12345, "verified", None)

    def test_invalid_decision(self, service, submitted, reviewer_id):
        with pytest.raises(ValidationError):
            service.review_verification(reviewer_id, submitted["id"], "approved", None)

    def test_terminal_states_cannot_be_reviewed_again(self, service, submitted, order_id, reviewer_id, db):
        service.review_verification(reviewer_id, submitted["id"], "verified", None)

        with pytest.raises(InvalidTransition):
            service.review_verification(reviewer_id, submitted["id"], "rejected", None)

        assert _order(db, order_id).order_status == OrderStatus.PROCESSING.value

    def test_processing_order_cannot_be_cancelled(self, service, submitted, order_id, reviewer_id, member, db):
        service.review_verification(reviewer_id, submitted["id"], "verified", None)

        with pytest.raises(InvalidTransition):
            OrderService(db, notification_service=MagicMock()).cancel_order(member.user_id, order_id)

    def test_audit_failure_does_not_undo_review(self, service, submitted, order_id, reviewer_id, db, monkeypatch):
        def broken_history(self, entry):
            raise OperationalError("INSERT INTO order_status_history", {}, Exception("table missing"))

        monkeypatch.setattr(OrderRepo, "add_history", broken_history)

        service.review_verification(reviewer_id, submitted["id"], "verified", None)

        assert _order(db, order_id).payment_status == PaymentStatus.PAID.value


class TestListing:
    def test_pending_queue(self, service, submitted, reviewer_id):
        pending = service.list_verifications(status="pending")
        assert [v["id"] for v in pending] == [submitted["id"]]

        service.review_verification(reviewer_id, submitted["id"], "verified", None)

        assert service.list_verifications(status="pending") == []
        assert service.list_verifications()[0]["status"] == "verified"

    def test_unknown_status_filter(self, service):
        with pytest.raises(ValidationError):
            service.list_verifications(status="done")
