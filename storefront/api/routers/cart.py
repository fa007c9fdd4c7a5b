#storefront/api/routers/cart.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_identity, get_session_store
from storefront.data.database import get_db
from storefront.domain.identity import Identity
from storefront.domain.schemas import (
    CartItemIn,
    CartQuantityIn,
    CartResponse,
    GuestSessionOut,
    MessageOut,
)
from storefront.services.cart_service import CartService
from storefront.services.session_store import SessionStore

router = APIRouter(prefix="/cart", tags=["cart"])
guest_router = APIRouter(prefix="/guest", tags=["guest"])


def get_service(db: Session, store: SessionStore):
    return CartService(db=db, session_store=store)


@guest_router.post("/session", response_model=GuestSessionOut)
def create_guest_session(store: SessionStore = Depends(get_session_store)):
    return {"session_id": store.new_session_id()}


@router.post("", response_model=MessageOut)
def add_to_cart(
    payload: CartItemIn,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    get_service(db, store).add_item(identity, payload.product_id, payload.quantity)
    return {"message": "Item added to cart successfully"}


@router.get("", response_model=CartResponse)
def get_cart(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    return {"cart": get_service(db, store).get_cart(identity)}


@router.put("", response_model=MessageOut)
def update_quantity(
    payload: CartQuantityIn,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    get_service(db, store).set_quantity(identity, payload.product_id, payload.quantity)
    return {"message": "Cart updated successfully"}


@router.delete("/{product_id}", response_model=MessageOut)
def remove_item(
    product_id: int,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    get_service(db, store).remove_item(identity, product_id)
    return {"message": "Item removed from cart"}


@router.delete("", response_model=MessageOut)
def clear_cart(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    get_service(db, store).clear_cart(identity)
    return {"message": "Cart cleared"}
