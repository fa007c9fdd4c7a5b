#storefront/api/routers/favorites.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_identity, get_session_store
from storefront.data.database import get_db
from storefront.domain.identity import Identity
from storefront.domain.schemas import (
    FavoriteIn,
    FavoritesResponse,
    FavoriteCheckOut,
    FavoriteCountOut,
    MessageOut,
)
from storefront.services.favorites_service import FavoritesService
from storefront.services.session_store import SessionStore

router = APIRouter(prefix="/favorites", tags=["favorites"])


def get_service(db: Session, store: SessionStore):
    return FavoritesService(db=db, session_store=store)


@router.post("", response_model=MessageOut)
def add_favorite(
    payload: FavoriteIn,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    get_service(db, store).add_favorite(identity, payload.product_id)
    return {"message": "Item added to favorites successfully"}


@router.get("", response_model=FavoritesResponse)
def list_favorites(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    return {"favorites": get_service(db, store).list_favorites(identity)}


@router.get("/count", response_model=FavoriteCountOut)
def count_favorites(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    return {"count": get_service(db, store).count_favorites(identity)}


@router.get("/check/{product_id}", response_model=FavoriteCheckOut)
def check_favorite(
    product_id: int,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    return {"is_favorite": get_service(db, store).is_favorite(identity, product_id)}


@router.delete("/{product_id}", response_model=MessageOut)
def remove_favorite(
    product_id: int,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    get_service(db, store).remove_favorite(identity, product_id)
    return {"message": "Item removed from favorites"}
