# storefront/services/payment_service.py
from decimal import Decimal, InvalidOperation
from typing import Dict, Any, List

from sqlalchemy.orm import Session

from storefront.data.database import transaction
from storefront.data.models.payment_verification import PaymentVerificationModel
from storefront.domain.enums import OrderStatus, PaymentStatus, VerificationStatus
from storefront.exceptions import DuplicateSubmission, InvalidTransition, NotFound, ValidationError
from storefront.repos.order_repo import OrderRepo
from storefront.repos.payment_repo import PaymentVerificationRepo
from storefront.services.audit_service import AuditTrail
from storefront.services.notification_service import NotificationService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# decyzja recenzenta -> (status zamowienia, status platnosci)
REVIEW_TRANSITIONS = {
    VerificationStatus.VERIFIED.value: (OrderStatus.PROCESSING.value, PaymentStatus.PAID.value),
    VerificationStatus.REJECTED.value: (OrderStatus.CANCELLED.value, PaymentStatus.FAILED.value),
}


def _parse_amount(amount_paid) -> Decimal:
    try:
        amount = Decimal(str(amount_paid))
    except (InvalidOperation, ValueError):
        raise ValidationError("Amount paid must be a number")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("Amount paid must be greater than 0")
    return amount


class PaymentVerificationService:
    """
    Maszyna stanow weryfikacji platnosci: pending -> verified | rejected (koncowe).

    | order_status | zdarzenie           | -> order_status | -> payment_status |
    | Pending      | submit_verification | Confirmed       | bez zmian         |
    | Confirmed    | review verified     | Processing      | Paid              |
    | Confirmed    | review rejected     | Cancelled       | Failed            |
    """

    def __init__(self, db: Session, notification_service: NotificationService | None = None):
        self.db = db
        self.repo = PaymentVerificationRepo(db)
        self.order_repo = OrderRepo(db)
        self.audit = AuditTrail(db)
        self.notification_service = notification_service or NotificationService()

    def submit_verification(
        self,
        user_id: int,
        order_id: int,
        txn_ref: str,
        ref_number: str | None,
        screenshot: str | None,
        amount_paid,
    ) -> Dict[str, Any]:
        if not txn_ref or not str(txn_ref).strip():
            raise ValidationError("Transaction ID is required")
        amount = _parse_amount(amount_paid)

        with transaction(self.db):
            order = self.order_repo.get_user_order(order_id, user_id, lock=True)
            if order is None:
                raise NotFound("Order not found", details={"order_id": order_id})

            if self.repo.get_by_order(order_id) is not None:
                raise DuplicateSubmission(
                    "Payment verification already submitted for this order",
                    details={"order_id": order_id},
                )

            if order.order_status != OrderStatus.PENDING.value:
                raise InvalidTransition("Order is not awaiting payment", order.order_status)

            verification = self.repo.create_verification(
                PaymentVerificationModel(
                    order_id=order_id,
                    upi_transaction_id=str(txn_ref).strip(),
                    upi_reference_number=ref_number,
                    payment_screenshot_url=screenshot,
                    amount_paid=amount,
                    verification_status=VerificationStatus.PENDING.value,
                )
            )

            # payment_status zostaje Pending do decyzji recenzenta
            order.order_status = OrderStatus.CONFIRMED.value

        logger.info(f"Payment verification {verification.id} submitted for order {order_id}")
        self.audit.record(order_id, OrderStatus.CONFIRMED.value, "Payment verification submitted", changed_by=user_id)

        return {"id": verification.id, "orderId": order_id, "status": verification.verification_status}

    def review_verification(self, reviewer_id: int, verification_id: int, decision: str, notes: str | None = None) -> Dict[str, Any]:
        if decision not in REVIEW_TRANSITIONS:
            raise ValidationError("Invalid verification status")

        order_status, payment_status = REVIEW_TRANSITIONS[decision]

        with transaction(self.db):
            verification = self.repo.get_verification(verification_id, lock=True)
            if verification is None:
                raise NotFound("Payment verification not found", details={"verification_id": verification_id})

            if verification.verification_status != VerificationStatus.PENDING.value:
                raise InvalidTransition("Payment verification already reviewed", verification.verification_status)

            order = self.order_repo.get_order(verification.order_id, lock=True)
            if order is None:
                raise NotFound("Order not found", details={"order_id": verification.order_id})

            if order.order_status != OrderStatus.CONFIRMED.value:
                raise InvalidTransition("Order is not awaiting payment review", order.order_status)

            verification.verification_status = decision
            verification.verified_by = reviewer_id
            verification.verification_notes = notes

            order.payment_status = payment_status
            order.order_status = order_status

        logger.info(
            f"Payment verification {verification_id} {decision} by reviewer {reviewer_id}, "
            f"order {order.id} -> {order_status}/{payment_status}"
        )

        if decision == VerificationStatus.VERIFIED.value:
            history_note = "Payment verified by admin"
        else:
            history_note = f"Payment verification rejected: {notes or ''}".strip()
        self.audit.record(order.id, order_status, history_note, changed_by=reviewer_id)
        self.notification_service.payment_reviewed(order.user_id, order.id, decision)

        return {
            "id": verification.id,
            "orderId": order.id,
            "status": verification.verification_status,
            "orderStatus": order.order_status,
            "paymentStatus": order.payment_status,
        }

    def list_verifications(self, status: str | None = None, page: int = 1, limit: int = 20) -> List[Dict[str, Any]]:
        if status is not None and status not in {s.value for s in VerificationStatus}:
            raise ValidationError("Invalid verification status")
        if page < 1 or limit < 1:
            raise ValidationError("Page and limit must be positive")

        rows = self.repo.list_verifications(status, limit=limit, offset=(page - 1) * limit)
        return [
            {
                "id": v.id,
                "orderId": v.order_id,
                "transactionId": v.upi_transaction_id,
                "referenceNumber": v.upi_reference_number,
                "screenshotUrl": v.payment_screenshot_url,
                "amountPaid": Decimal(str(v.amount_paid)),
                "paymentDate": v.payment_date,
                "status": v.verification_status,
                "verifiedBy": v.verified_by,
                "notes": v.verification_notes,
                "submittedAt": v.created_at,
            }
            for v in rows
        ]
