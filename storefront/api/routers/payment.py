# storefront/api/routers/payment.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_user_id, get_reviewer_id
from storefront.data.database import get_db
from storefront.domain.schemas import (
    PaymentVerificationIn,
    ReviewIn,
    MessageOut,
    VerificationListResponse,
)
from storefront.services.payment_service import PaymentVerificationService

router = APIRouter(prefix="/payment", tags=["payment"])


def get_service(db: Session):
    return PaymentVerificationService(db)


@router.post("/verify", response_model=MessageOut)
def submit_verification(
    payload: PaymentVerificationIn,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    get_service(db).submit_verification(
        user_id=user_id,
        order_id=payload.order_id,
        txn_ref=payload.transaction_id,
        ref_number=payload.reference_number,
        screenshot=payload.screenshot_url,
        amount_paid=payload.amount_paid,
    )
    return {"message": "Payment verification submitted successfully"}


@router.get("/admin/verifications", response_model=VerificationListResponse)
def list_verifications(
    status: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    reviewer_id: int = Depends(get_reviewer_id),
    db: Session = Depends(get_db),
):
    return {"verifications": get_service(db).list_verifications(status=status, page=page, limit=limit)}


@router.put("/admin/verify/{verification_id}", response_model=MessageOut)
def review_verification(
    verification_id: int,
    payload: ReviewIn,
    reviewer_id: int = Depends(get_reviewer_id),
    db: Session = Depends(get_db),
):
    result = get_service(db).review_verification(reviewer_id, verification_id, payload.status, payload.notes)
    return {"message": f"Payment {result['status']} successfully"}
