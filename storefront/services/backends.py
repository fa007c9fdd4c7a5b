# storefront/services/backends.py
"""
Backendy stanu koszyka i ulubionych.

Kazda operacja Cart/Favorites Engine rozwiazuje tozsamosc raz, na poczatku,
i dalej rozmawia tylko z jednym backendem: gosc -> Session Store (redis),
uzytkownik -> Ledger Store (SQL). Zadne if/else po tozsamosci dalej w kodzie.
"""
from abc import ABC, abstractmethod
from typing import Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.database import transaction
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.favorite import FavoriteModel
from storefront.domain.identity import Identity, GuestIdentity, UserIdentity
from storefront.exceptions import DependencyUnavailable, ValidationError
from storefront.repos.cart_repo import CartRepo
from storefront.repos.favorite_repo import FavoriteRepo
from storefront.services.session_store import SessionStore


class CartBackend(ABC):
    @abstractmethod
    def add_line(self, product_id: int, quantity: int) -> None:
        ...

    @abstractmethod
    def get_lines(self) -> Dict[int, int]:
        ...

    @abstractmethod
    def set_quantity(self, product_id: int, quantity: int) -> None:
        ...

    @abstractmethod
    def remove_line(self, product_id: int) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...


class SessionCartBackend(CartBackend):
    def __init__(self, store: SessionStore, session_id: str):
        self.store = store
        self.session_id = session_id

    def add_line(self, product_id: int, quantity: int) -> None:
        self.store.cart_add(self.session_id, product_id, quantity)

    def get_lines(self) -> Dict[int, int]:
        return self.store.cart_lines(self.session_id)

    def set_quantity(self, product_id: int, quantity: int) -> None:
        self.store.cart_set(self.session_id, product_id, quantity)

    def remove_line(self, product_id: int) -> None:
        self.store.cart_remove(self.session_id, product_id)

    def clear(self) -> None:
        self.store.cart_clear(self.session_id)


class LedgerCartBackend(CartBackend):
    def __init__(self, db: Session, user_id: int):
        self.db = db
        self.repo = CartRepo(db)
        self.user_id = user_id

    def add_line(self, product_id: int, quantity: int) -> None:
        with transaction(self.db):
            existing = self.repo.get_cart_item(self.user_id, product_id)
            if existing:
                existing.quantity += quantity
            else:
                self.repo.add_cart_item(
                    CartItemModel(user_id=self.user_id, product_id=product_id, quantity=quantity)
                )

    def get_lines(self) -> Dict[int, int]:
        return {i.product_id: i.quantity for i in self.repo.get_cart_items(self.user_id)}

    def set_quantity(self, product_id: int, quantity: int) -> None:
        with transaction(self.db):
            if quantity <= 0:
                self.repo.delete_cart_item(self.user_id, product_id)
                return

            existing = self.repo.get_cart_item(self.user_id, product_id)
            if existing:
                existing.quantity = quantity
            else:
                self.repo.add_cart_item(
                    CartItemModel(user_id=self.user_id, product_id=product_id, quantity=quantity)
                )

    def remove_line(self, product_id: int) -> None:
        with transaction(self.db):
            self.repo.delete_cart_item(self.user_id, product_id)

    def clear(self) -> None:
        with transaction(self.db):
            self.repo.delete_cart_items(self.user_id)


class FavoritesBackend(ABC):
    @abstractmethod
    def add(self, product_id: int) -> None:
        ...

    @abstractmethod
    def remove(self, product_id: int) -> None:
        ...

    @abstractmethod
    def members(self) -> List[int]:
        ...

    @abstractmethod
    def contains(self, product_id: int) -> bool:
        ...


class SessionFavoritesBackend(FavoritesBackend):
    def __init__(self, store: SessionStore, session_id: str):
        self.store = store
        self.session_id = session_id

    def add(self, product_id: int) -> None:
        self.store.favorites_add(self.session_id, product_id)

    def remove(self, product_id: int) -> None:
        self.store.favorites_remove(self.session_id, product_id)

    def members(self) -> List[int]:
        return sorted(self.store.favorites_members(self.session_id))

    def contains(self, product_id: int) -> bool:
        return self.store.favorites_contains(self.session_id, product_id)


class LedgerFavoritesBackend(FavoritesBackend):
    def __init__(self, db: Session, user_id: int):
        self.db = db
        self.repo = FavoriteRepo(db)
        self.user_id = user_id

    def add(self, product_id: int) -> None:
        try:
            with transaction(self.db):
                if self.repo.get_favorite(self.user_id, product_id) is None:
                    self.repo.add_favorite(FavoriteModel(user_id=self.user_id, product_id=product_id))
        except DependencyUnavailable as e:
            # rownolegly insert tego samego wpisu, unique (user, product) juz go ma
            if isinstance(e.__cause__, IntegrityError):
                return
            raise

    def remove(self, product_id: int) -> None:
        with transaction(self.db):
            self.repo.delete_favorite(self.user_id, product_id)

    def members(self) -> List[int]:
        return [f.product_id for f in self.repo.get_favorites(self.user_id)]

    def contains(self, product_id: int) -> bool:
        return self.repo.get_favorite(self.user_id, product_id) is not None


def cart_backend_for(identity: Identity, db: Session, store: SessionStore) -> CartBackend:
    if isinstance(identity, UserIdentity):
        return LedgerCartBackend(db, identity.user_id)
    if isinstance(identity, GuestIdentity):
        return SessionCartBackend(store, identity.session_id)
    raise ValidationError("Session ID or user token is required")


def favorites_backend_for(identity: Identity, db: Session, store: SessionStore) -> FavoritesBackend:
    if isinstance(identity, UserIdentity):
        return LedgerFavoritesBackend(db, identity.user_id)
    if isinstance(identity, GuestIdentity):
        return SessionFavoritesBackend(store, identity.session_id)
    raise ValidationError("Session ID or user token is required")
