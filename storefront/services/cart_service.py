# storefront/services/cart_service.py
from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.orm import Session

from storefront.domain.identity import Identity, describe
from storefront.domain.pricing import summarize
from storefront.exceptions import InsufficientStock, ValidationError
from storefront.services.backends import cart_backend_for
from storefront.services.catalog import Catalog, project_product
from storefront.services.session_store import SessionStore
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Cart Engine, prosty podzial na commands (add, set, remove, clear) i query (get).
    Tozsamosc (gosc albo uzytkownik) wybiera backend raz na wywolanie.
    Stan magazynu sprawdzany tylko przy dodaniu, bez blokady (check-then-act).
    """

    def __init__(self, db: Session, session_store: SessionStore):
        self.db = db
        self.session_store = session_store
        self.catalog = Catalog(db)

    def _backend(self, identity: Identity):
        return cart_backend_for(identity, self.db, self.session_store)

    #query - odczyt
    def get_cart(self, identity: Identity) -> Dict[str, Any]:
        lines = self._backend(identity).get_lines()
        products = self.catalog.by_ids(lines.keys())

        items = []
        line_totals = []
        item_count = 0
        for product_id, quantity in lines.items():
            product = products.get(product_id)
            if product is None:
                # produkt usuniety z katalogu, pozycja pomijana
                logger.warning(f"Cart of {describe(identity)} references missing product {product_id}")
                continue

            view = project_product(product)
            line_total = view["price"] * quantity
            line_totals.append(line_total)
            item_count += quantity

            items.append(
                {
                    "productId": view["productId"],
                    "name": view["name"],
                    "price": view["price"],
                    "originalPrice": view["originalPrice"],
                    "quantity": quantity,
                    "category": view["category"],
                    "stock": view["stock"],
                    "image": view["image"],
                    "itemTotal": line_total,
                }
            )

        return {"items": items, "summary": summarize(line_totals, item_count)}

    #commands
    def add_item(self, identity: Identity, product_id: int, quantity: int = 1) -> None:
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        product = self.catalog.require(product_id)
        if quantity > product.stock:
            raise InsufficientStock(product_id, quantity, product.stock)

        # istniejaca pozycja jest zwiekszana bez ponownego przyciecia do stanu magazynu
        self._backend(identity).add_line(product_id, quantity)
        logger.info(f"Added product {product_id} x{quantity} to cart of {describe(identity)}")

    def set_quantity(self, identity: Identity, product_id: int, quantity: int) -> None:
        backend = self._backend(identity)
        if quantity <= 0:
            backend.remove_line(product_id)
            logger.info(f"Removed product {product_id} from cart of {describe(identity)}")
            return

        self.catalog.require(product_id)
        # nadpisanie bez sprawdzania stanu magazynu
        backend.set_quantity(product_id, quantity)
        logger.info(f"Set product {product_id} quantity to {quantity} in cart of {describe(identity)}")

    def remove_item(self, identity: Identity, product_id: int) -> None:
        self._backend(identity).remove_line(product_id)
        logger.info(f"Removed product {product_id} from cart of {describe(identity)}")

    def clear_cart(self, identity: Identity) -> None:
        self._backend(identity).clear()
        logger.info(f"Cleared cart of {describe(identity)}")
