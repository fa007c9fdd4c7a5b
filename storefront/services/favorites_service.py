# storefront/services/favorites_service.py
from typing import Dict, Any, List

from sqlalchemy.orm import Session

from storefront.domain.identity import Identity, describe
from storefront.services.backends import favorites_backend_for
from storefront.services.catalog import Catalog, project_product
from storefront.services.session_store import SessionStore
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class FavoritesService:
    def __init__(self, db: Session, session_store: SessionStore):
        self.db = db
        self.session_store = session_store
        self.catalog = Catalog(db)

    def _backend(self, identity: Identity):
        return favorites_backend_for(identity, self.db, self.session_store)

    def add_favorite(self, identity: Identity, product_id: int) -> None:
        self.catalog.require(product_id)
        self._backend(identity).add(product_id)
        logger.info(f"Product {product_id} added to favorites of {describe(identity)}")

    def remove_favorite(self, identity: Identity, product_id: int) -> None:
        self._backend(identity).remove(product_id)
        logger.info(f"Product {product_id} removed from favorites of {describe(identity)}")

    def is_favorite(self, identity: Identity, product_id: int) -> bool:
        return self._backend(identity).contains(product_id)

    def list_favorites(self, identity: Identity) -> List[Dict[str, Any]]:
        product_ids = self._backend(identity).members()
        products = self.catalog.by_ids(product_ids)
        return [project_product(products[pid]) for pid in product_ids if pid in products]

    def count_favorites(self, identity: Identity) -> int:
        return len(self._backend(identity).members())
