# storefront/data/models/product.py
from sqlalchemy import Column, Integer, String, Numeric, JSON, CheckConstraint

from storefront.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    discount = Column(Numeric(5, 2), nullable=False, default=0)
    stock = Column(Integer, nullable=False, default=0)
    category = Column(String, nullable=True)
    sizes = Column(JSON, nullable=False, default=list)
    image = Column(String, nullable=True)

    __table_args__ = (
        CheckConstraint("discount >= 0 AND discount <= 100", name="ck_product_discount"),
        CheckConstraint("stock >= 0", name="ck_product_stock"),
    )
