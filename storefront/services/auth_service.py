# storefront/services/auth_service.py
import secrets
from typing import Dict, Any

from passlib.context import CryptContext
from sqlalchemy.orm import Session

from storefront.data.database import transaction
from storefront.data.models.user import UserModel
from storefront.exceptions import DuplicateSubmission, InvalidCredentials, NotFound, ValidationError
from storefront.repos.user_repo import UserRepo
from storefront.services.merge_service import GuestMergeService
from storefront.services.session_store import SessionStore
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def _user_payload(user: UserModel) -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "createdAt": user.created_at,
    }


class AuthService:
    """
    Rejestracja i logowanie, a po nich jednorazowy merge danych goscia.
    Merge jest best-effort: jego blad trafia do wyniku, ale logowanie i tak sie udaje.
    """

    def __init__(self, db: Session, session_store: SessionStore):
        self.db = db
        self.repo = UserRepo(db)
        self.session_store = session_store
        self.merge_service = GuestMergeService(db, session_store)

    def register(self, name: str, email: str, password: str, phone: str | None = None, session_id: str | None = None) -> Dict[str, Any]:
        if not name or not email or not password:
            raise ValidationError("Name, email, and password are required")

        email = email.strip().lower()

        with transaction(self.db):
            if self.repo.get_by_email(email) is not None:
                raise DuplicateSubmission("User already exists with this email", details={"email": email})

            user = self.repo.create_user(
                UserModel(
                    name=name.strip(),
                    email=email,
                    phone=phone,
                    password_hash=pwd_context.hash(password),
                )
            )

        logger.info(f"User {user.id} registered")
        return self._authenticated(user, session_id)

    def login(self, login: str, password: str, session_id: str | None = None) -> Dict[str, Any]:
        if not login or not password:
            raise ValidationError("Email/Phone and password are required")

        login = login.strip()
        if "@" in login:
            login = login.lower()
        user = self.repo.get_by_login(login)
        if user is None:
            raise NotFound("You don't have an account. Please sign up first.")

        if not user.password_hash:
            raise InvalidCredentials("Please set up your password first. Contact support for assistance.")

        if not pwd_context.verify(password, user.password_hash):
            raise InvalidCredentials("Invalid credentials")

        logger.info(f"User {user.id} logged in")
        return self._authenticated(user, session_id)

    def resolve_token(self, token: str) -> int:
        user_id = self.session_store.resolve_token(token)
        if user_id is None:
            raise InvalidCredentials("Invalid or expired token")
        return user_id

    def logout(self, token: str) -> None:
        self.session_store.drop_token(token)

    def _authenticated(self, user: UserModel, session_id: str | None) -> Dict[str, Any]:
        token = secrets.token_urlsafe(32)
        self.session_store.store_token(token, user.id)

        migration = None
        if session_id:
            migration = self._merge_guest_data(session_id, user.id)

        return {"token": token, "user": _user_payload(user), "migration": migration}

    def _merge_guest_data(self, session_id: str, user_id: int) -> Dict[str, Any]:
        try:
            return self.merge_service.transfer_all(session_id, user_id).as_dict()
        except Exception as e:
            # logowanie nie moze sie wywalic przez merge
            logger.exception(f"Guest merge {session_id} -> user {user_id} crashed: {e}")
            return {"cartTransferred": False, "favoritesTransferred": False, "message": "Migration failed"}
