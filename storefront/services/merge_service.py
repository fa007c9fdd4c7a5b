# storefront/services/merge_service.py
from dataclasses import dataclass, asdict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.database import transaction
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.favorite import FavoriteModel
from storefront.exceptions import StorefrontError
from storefront.repos.cart_repo import CartRepo
from storefront.repos.favorite_repo import FavoriteRepo
from storefront.services.catalog import Catalog
from storefront.services.session_store import SessionStore
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class MergeResult:
    cart_transferred: bool
    favorites_transferred: bool
    message: str

    def as_dict(self) -> dict:
        return {
            "cartTransferred": self.cart_transferred,
            "favoritesTransferred": self.favorites_transferred,
            "message": self.message,
        }


class GuestMergeService:
    """
    Przeniesienie koszyka i ulubionych goscia do Ledger Store po logowaniu/rejestracji.

    Koszyk i ulubione to dwie niezalezne transakcje: blad jednej nie cofa drugiej.
    Przed transakcja klucz goscia jest przejmowany (RENAME), wiec kazdy wpis goscia
    trafia do Ledger Store co najwyzej raz. Po rollbacku klucz wraca do goscia
    i merge mozna powtorzyc.
    """

    def __init__(self, db: Session, session_store: SessionStore):
        self.db = db
        self.session_store = session_store
        self.cart_repo = CartRepo(db)
        self.favorite_repo = FavoriteRepo(db)
        self.catalog = Catalog(db)

    def transfer_cart(self, session_id: str, user_id: int) -> bool:
        try:
            lines = self.session_store.claim_cart(session_id)
        except StorefrontError as e:
            logger.error(f"Could not claim guest cart {session_id}: {e!r}")
            return False

        if not lines:
            logger.info(f"No guest cart items to transfer for session {session_id}")
            return True

        try:
            known = self.catalog.by_ids(lines.keys())

            with transaction(self.db):
                for product_id, guest_qty in lines.items():
                    if product_id not in known:
                        logger.warning(f"Skipping unknown product {product_id} from guest cart {session_id}")
                        continue

                    existing = self.cart_repo.get_cart_item(user_id, product_id)
                    if existing:
                        # merge addytywny, nie nadpisujemy koszyka uzytkownika
                        existing.quantity = existing.quantity + guest_qty
                    else:
                        self.cart_repo.add_cart_item(
                            CartItemModel(user_id=user_id, product_id=product_id, quantity=guest_qty)
                        )
        except (StorefrontError, SQLAlchemyError) as e:
            self.db.rollback()
            logger.error(f"Cart transfer {session_id} -> user {user_id} failed: {e!r}")
            self._best_effort(self.session_store.restore_cart, session_id, lines)
            return False

        self._best_effort(self.session_store.drop_cart_claim, session_id)
        logger.info(f"Transferred {len(lines)} guest cart lines from {session_id} to user {user_id}")
        return True

    def transfer_favorites(self, session_id: str, user_id: int) -> bool:
        try:
            members = self.session_store.claim_favorites(session_id)
        except StorefrontError as e:
            logger.error(f"Could not claim guest favorites {session_id}: {e!r}")
            return False

        if not members:
            logger.info(f"No guest favorites to transfer for session {session_id}")
            return True

        try:
            known = self.catalog.by_ids(members)

            with transaction(self.db):
                for product_id in sorted(members):
                    if product_id not in known:
                        logger.warning(f"Skipping unknown product {product_id} from guest favorites {session_id}")
                        continue

                    # suma zbiorow, istniejace wpisy zostaja
                    if self.favorite_repo.get_favorite(user_id, product_id) is None:
                        self.favorite_repo.add_favorite(FavoriteModel(user_id=user_id, product_id=product_id))
        except (StorefrontError, SQLAlchemyError) as e:
            self.db.rollback()
            logger.error(f"Favorites transfer {session_id} -> user {user_id} failed: {e!r}")
            self._best_effort(self.session_store.restore_favorites, session_id, members)
            return False

        self._best_effort(self.session_store.drop_favorites_claim, session_id)
        logger.info(f"Transferred {len(members)} guest favorites from {session_id} to user {user_id}")
        return True

    def transfer_all(self, session_id: str, user_id: int) -> MergeResult:
        cart_ok = self.transfer_cart(session_id, user_id)
        favorites_ok = self.transfer_favorites(session_id, user_id)

        if cart_ok and favorites_ok:
            message = "Guest data transferred successfully"
        elif cart_ok or favorites_ok:
            message = "Guest data partially transferred"
        else:
            message = "Failed to transfer guest data"

        result = MergeResult(cart_ok, favorites_ok, message)
        logger.info(f"Guest merge {session_id} -> user {user_id}: {asdict(result)}")
        return result

    @staticmethod
    def _best_effort(action, session_id: str, *args) -> None:
        # przejety klucz i tak wygasa z TTL, blad sprzatania tylko logujemy
        try:
            action(session_id, *args)
        except StorefrontError as e:
            logger.warning(f"Guest key cleanup {action.__name__} for session {session_id} failed: {e!r}")
