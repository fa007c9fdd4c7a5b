# storefront/repos/payment_repo.py
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.payment_verification import PaymentVerificationModel
from storefront.domain.enums import VerificationStatus


class PaymentVerificationRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_verification(self, verification: PaymentVerificationModel) -> PaymentVerificationModel:
        self.db.add(verification)
        self.db.flush()
        return verification

    def get_verification(self, verification_id: int, lock: bool = False) -> PaymentVerificationModel | None:
        return self.db.get(PaymentVerificationModel, verification_id, with_for_update=True if lock else None)

    def get_by_order(self, order_id: int) -> PaymentVerificationModel | None:
        stmt = select(PaymentVerificationModel).where(
            PaymentVerificationModel.order_id == order_id
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_verifications(self, status: str | None, limit: int, offset: int) -> List[PaymentVerificationModel]:
        stmt = select(PaymentVerificationModel)
        if status:
            stmt = stmt.where(PaymentVerificationModel.verification_status == status)

        # kolejka pending od najstarszych, reszta od najnowszych
        if status == VerificationStatus.PENDING.value:
            stmt = stmt.order_by(PaymentVerificationModel.created_at.asc(), PaymentVerificationModel.id.asc())
        else:
            stmt = stmt.order_by(PaymentVerificationModel.created_at.desc(), PaymentVerificationModel.id.desc())

        return list(self.db.execute(stmt.limit(limit).offset(offset)).scalars().all())
