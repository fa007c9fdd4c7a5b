# storefront/api/routers/orders.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_user_id, get_reviewer_id
from storefront.data.database import get_db
from storefront.domain.schemas import (
    CreateOrderIn,
    CreatedOrderResponse,
    OrderResponse,
    OrderListResponse,
    AdminOrderListResponse,
    OrderStatusIn,
    OrderStatusOut,
    MessageOut,
)
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.post("/create-from-cart", response_model=CreatedOrderResponse, status_code=201)
def create_order(
    payload: CreateOrderIn,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Tworzy zamowienie z koszyka uzytkownika i czysci koszyk (jedna transakcja).
    """
    return {"order": get_service(db).create_from_cart(user_id, payload.shipping_address)}


@router.get("/my-orders", response_model=OrderListResponse)
def my_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return {"orders": get_service(db).list_orders(user_id, page=page, limit=limit)}


@router.get("/admin/all", response_model=AdminOrderListResponse)
def all_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    reviewer_id: int = Depends(get_reviewer_id),
    db: Session = Depends(get_db),
):
    return {"orders": get_service(db).list_all_orders(page=page, limit=limit)}


@router.put("/admin/{order_id}/status", response_model=OrderStatusOut)
def update_order_status(
    order_id: int,
    payload: OrderStatusIn,
    reviewer_id: int = Depends(get_reviewer_id),
    db: Session = Depends(get_db),
):
    result = get_service(db).update_status(reviewer_id, order_id, payload.status)
    return {**result, "message": "Order status updated successfully"}


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return {"order": get_service(db).get_order(user_id, order_id)}


@router.put("/{order_id}/cancel", response_model=MessageOut)
def cancel_order(
    order_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    get_service(db).cancel_order(user_id, order_id)
    return {"message": "Order cancelled successfully"}
