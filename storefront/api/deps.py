# storefront/api/deps.py
from fastapi import Depends, Header, Request

from storefront.domain.identity import Identity, GuestIdentity, UserIdentity
from storefront.exceptions import InvalidCredentials, ValidationError
from storefront.services.session_store import SessionStore
from storefront.utils import settings


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def _bearer(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise InvalidCredentials("Invalid or expired token")
    return token.strip()


def get_optional_user_id(
    authorization: str | None = Header(None),
    store: SessionStore = Depends(get_session_store),
) -> int | None:
    token = _bearer(authorization)
    if token is None:
        return None
    user_id = store.resolve_token(token)
    if user_id is None:
        raise InvalidCredentials("Invalid or expired token")
    return user_id


def get_current_user_id(user_id: int | None = Depends(get_optional_user_id)) -> int:
    if user_id is None:
        raise InvalidCredentials("No token provided")
    return user_id


def get_identity(
    user_id: int | None = Depends(get_optional_user_id),
    x_session_id: str | None = Header(None),
) -> Identity:
    """
    Rozwiazanie tozsamosci raz na request: token uzytkownika wygrywa z sesja goscia.
    """
    if user_id is not None:
        return UserIdentity(user_id)
    if x_session_id and x_session_id.strip():
        return GuestIdentity(x_session_id.strip())
    raise ValidationError("Session ID or user token is required")


def get_reviewer_id(
    x_reviewer_id: int | None = Header(None),
    x_reviewer_key: str | None = Header(None),
) -> int:
    if x_reviewer_id is None:
        raise InvalidCredentials("Admin authentication required")
    if settings.REVIEWER_API_KEY and x_reviewer_key != settings.REVIEWER_API_KEY:
        raise InvalidCredentials("Invalid admin token")
    return x_reviewer_id
