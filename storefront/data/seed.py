# storefront/data/seed.py
from decimal import Decimal

from storefront.data.database import Database
from storefront.data.models.product import ProductModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

PRODUCTS = [
    {"name": "Linen Shirt", "price": Decimal("49.99"), "discount": Decimal("0"), "stock": 25,
     "category": "shirts", "sizes": ["S", "M", "L", "XL"]},
    {"name": "Denim Jacket", "price": Decimal("129.00"), "discount": Decimal("20"), "stock": 8,
     "category": "jackets", "sizes": ["M", "L"]},
    {"name": "Canvas Sneakers", "price": Decimal("79.50"), "discount": Decimal("10"), "stock": 40,
     "category": "shoes", "sizes": ["40", "41", "42", "43", "44"]},
]


def seed(database: Database):
    db = database.session()
    try:
        # tylko pusta baza, nie nadpisujemy katalogu
        if db.query(ProductModel).first():
            return
        for data in PRODUCTS:
            db.add(ProductModel(**data))
        db.commit()
        logger.info(f"Seeded {len(PRODUCTS)} products")
    finally:
        db.close()
