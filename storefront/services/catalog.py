# storefront/services/catalog.py
from decimal import Decimal
from typing import Dict, Any, Iterable

from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.pricing import effective_price
from storefront.exceptions import NotFound
from storefront.repos.product_repo import ProductRepo
from storefront.utils.settings import MEDIA_BASE_URL, PLACEHOLDER_IMAGE_URL


def image_url(image: str | None) -> str:
    if not image:
        return PLACEHOLDER_IMAGE_URL
    if image.startswith("http"):
        return image
    return f"{MEDIA_BASE_URL}{image}"


def project_product(product: ProductModel) -> Dict[str, Any]:
    """Widok produktu z cena po rabacie, liczony zawsze z aktualnego wiersza."""
    discount = Decimal(str(product.discount or 0))
    original = Decimal(str(product.price))
    return {
        "productId": product.id,
        "name": product.name,
        "price": effective_price(original, discount),
        "originalPrice": original if discount > 0 else None,
        "discount": discount,
        "category": product.category,
        "stock": product.stock,
        "image": image_url(product.image),
    }


class Catalog:
    """Odczyt produktow na potrzeby koszyka i zamowien. Bez cache miedzy requestami."""

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def require(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if product is None:
            raise NotFound("Product not found", details={"product_id": product_id})
        return product

    def by_ids(self, product_ids: Iterable[int]) -> Dict[int, ProductModel]:
        return self.repo.get_products(product_ids)
