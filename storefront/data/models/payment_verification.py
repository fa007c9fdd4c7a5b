from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric
from datetime import datetime, timezone

from storefront.data.database import Base
from storefront.domain.enums import VerificationStatus


class PaymentVerificationModel(Base):
    __tablename__ = "payment_verifications"

    id = Column(Integer, primary_key=True)
    # jedna weryfikacja na zamowienie
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, unique=True)

    upi_transaction_id = Column(String, nullable=False)
    upi_reference_number = Column(String, nullable=True)
    payment_screenshot_url = Column(String, nullable=True)
    amount_paid = Column(Numeric(10, 2), nullable=False)
    payment_date = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    verification_status = Column(String, nullable=False, default=VerificationStatus.PENDING.value)
    verified_by = Column(Integer, nullable=True)
    verification_notes = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
