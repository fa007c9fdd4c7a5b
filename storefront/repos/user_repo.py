from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.email == email)
        ).scalar_one_or_none()

    def get_by_login(self, login: str) -> UserModel | None:
        # login po emailu albo numerze telefonu
        return self.db.execute(
            select(UserModel).where(or_(UserModel.email == login, UserModel.phone == login)).limit(1)
        ).scalar_one_or_none()

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.flush()
        return user
