# storefront/domain/identity.py
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class GuestIdentity:
    """Anonimowy klient, stan w Session Store pod session_id."""

    session_id: str


@dataclass(frozen=True)
class UserIdentity:
    """Zalogowany uzytkownik, stan w Ledger Store."""

    user_id: int


Identity = Union[GuestIdentity, UserIdentity]


def describe(identity: Identity) -> str:
    if isinstance(identity, UserIdentity):
        return f"user {identity.user_id}"
    return f"guest {identity.session_id}"
