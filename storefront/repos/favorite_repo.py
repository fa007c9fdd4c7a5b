# storefront/repos/favorite_repo.py
from typing import List

from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from storefront.data.models.favorite import FavoriteModel


class FavoriteRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_favorites(self, user_id: int) -> List[FavoriteModel]:
        stmt = (
            select(FavoriteModel)
            .where(FavoriteModel.user_id == user_id)
            .order_by(FavoriteModel.created_at.desc(), FavoriteModel.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_favorite(self, user_id: int, product_id: int) -> FavoriteModel | None:
        stmt = select(FavoriteModel).where(
            FavoriteModel.user_id == user_id,
            FavoriteModel.product_id == product_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def add_favorite(self, favorite: FavoriteModel) -> FavoriteModel:
        self.db.add(favorite)
        self.db.flush()
        return favorite

    def delete_favorite(self, user_id: int, product_id: int) -> int:
        res = self.db.execute(
            delete(FavoriteModel).where(
                FavoriteModel.user_id == user_id,
                FavoriteModel.product_id == product_id,
            )
        )
        return res.rowcount
