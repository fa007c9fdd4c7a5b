from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_user_id, get_session_store
from storefront.data.database import get_db
from storefront.domain.schemas import RegisterIn, LoginIn, AuthResponse, MessageOut, TokenCheckOut
from storefront.services.auth_service import AuthService
from storefront.services.session_store import SessionStore

router = APIRouter(prefix="/auth", tags=["auth"])


def get_service(db: Session, store: SessionStore):
    return AuthService(db=db, session_store=store)


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(
    payload: RegisterIn,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    result = get_service(db, store).register(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        phone=payload.phone,
        session_id=payload.session_id,
    )
    return {**result, "message": "User registered successfully!"}


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginIn,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    result = get_service(db, store).login(payload.email, payload.password, session_id=payload.session_id)
    return {**result, "message": "Login successful!"}


@router.get("/verify", response_model=TokenCheckOut)
def verify(user_id: int = Depends(get_current_user_id)):
    return {"user_id": user_id}


@router.post("/logout", response_model=MessageOut)
def logout(
    user_id: int = Depends(get_current_user_id),
    authorization: str = Header(...),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    get_service(db, store).logout(authorization.partition(" ")[2].strip())
    return {"message": "Logged out"}
