"""
Unit Tests: GuestMergeService

Guest cart/favorites are merged into the user's ledger rows exactly once,
additively for the cart and as a set union for favorites. The two transfers
are independent transactions.
"""

import pytest
from sqlalchemy.exc import OperationalError

from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.favorite import FavoriteModel
from storefront.exceptions import DependencyUnavailable
from storefront.repos.cart_repo import CartRepo
from storefront.repos.favorite_repo import FavoriteRepo
from storefront.services.merge_service import GuestMergeService
from storefront.services.session_store import SessionStore

SESSION = "guest_merge_1700000000000"


@pytest.fixture
def service(db, store, products):
    return GuestMergeService(db=db, session_store=store)


def _user_cart(db, user_id):
    return {i.product_id: i.quantity for i in CartRepo(db).get_cart_items(user_id)}


def _user_favorites(db, user_id):
    return {f.product_id for f in FavoriteRepo(db).get_favorites(user_id)}


def test_additive_cart_merge(service, store, db, user, fake_redis):
    store.cart_add(SESSION, 1, 2)
    store.cart_add(SESSION, 2, 1)
    db.add(CartItemModel(user_id=user.id, product_id=1, quantity=3))
    db.commit()

    result = service.transfer_all(SESSION, user.id)

    assert result.cart_transferred is True
    assert _user_cart(db, user.id) == {1: 5, 2: 1}
    assert not fake_redis.exists(f"cart:{SESSION}")
    assert not fake_redis.exists(f"cart:{SESSION}:merging")


def test_favorites_merge_is_set_union(service, store, db, user, fake_redis):
    store.favorites_add(SESSION, 1)
    store.favorites_add(SESSION, 2)
    db.add(FavoriteModel(user_id=user.id, product_id=2))
    db.commit()

    result = service.transfer_all(SESSION, user.id)

    assert result.favorites_transferred is True
    assert _user_favorites(db, user.id) == {1, 2}
    assert len(FavoriteRepo(db).get_favorites(user.id)) == 2
    assert not fake_redis.exists(f"favorites:{SESSION}")


def test_empty_guest_session_counts_as_success(service, user, db):
    result = service.transfer_all("guest_never_used", user.id)

    assert result.as_dict() == {
        "cartTransferred": True,
        "favoritesTransferred": True,
        "message": "Guest data transferred successfully",
    }
    assert _user_cart(db, user.id) == {}


def test_cart_failure_does_not_block_favorites(service, store, db, user, fake_redis, monkeypatch):
    store.cart_add(SESSION, 1, 2)
    store.cart_add(SESSION, 2, 1)
    store.favorites_add(SESSION, 3)

    def broken_add(self, item):
        raise OperationalError("INSERT INTO cart_items", {}, Exception("ledger down"))

    monkeypatch.setattr(CartRepo, "add_cart_item", broken_add)

    result = service.transfer_all(SESSION, user.id)

    assert result.cart_transferred is False
    assert result.favorites_transferred is True
    assert result.message == "Guest data partially transferred"
    assert _user_favorites(db, user.id) == {3}

    # koszyk goscia nietkniety, merge mozna powtorzyc
    assert fake_redis.hgetall(f"cart:{SESSION}") == {"1": "2", "2": "1"}
    assert not fake_redis.exists(f"cart:{SESSION}:merging")
    assert _user_cart(db, user.id) == {}


def test_failed_cart_merge_rolls_back_every_line(service, store, db, user, monkeypatch):
    store.cart_add(SESSION, 1, 1)
    store.cart_add(SESSION, 2, 1)
    calls = []
    original = CartRepo.add_cart_item

    def fail_second(self, item):
        calls.append(item.product_id)
        if len(calls) == 2:
            raise OperationalError("INSERT INTO cart_items", {}, Exception("ledger down"))
        return original(self, item)

    monkeypatch.setattr(CartRepo, "add_cart_item", fail_second)

    assert service.transfer_cart(SESSION, user.id) is False
    assert _user_cart(db, user.id) == {}

    # po naprawie ponowny merge przenosi wszystko
    monkeypatch.setattr(CartRepo, "add_cart_item", original)
    assert service.transfer_cart(SESSION, user.id) is True
    assert _user_cart(db, user.id) == {1: 1, 2: 1}


def test_unknown_products_are_skipped(service, store, db, user):
    store.cart_add(SESSION, 1, 1)
    store.cart_add(SESSION, 77, 4)

    assert service.transfer_cart(SESSION, user.id) is True
    assert _user_cart(db, user.id) == {1: 1}


def test_failed_cleanup_does_not_merge_twice(service, store, db, user, monkeypatch):
    store.cart_add(SESSION, 1, 2)
    store.favorites_add(SESSION, 2)

    def broken_drop(self, session_id):
        raise DependencyUnavailable("Session store is temporarily unavailable")

    monkeypatch.setattr(SessionStore, "drop_cart_claim", broken_drop)
    monkeypatch.setattr(SessionStore, "drop_favorites_claim", broken_drop)

    first = service.transfer_all(SESSION, user.id)
    second = service.transfer_all(SESSION, user.id)

    assert first.cart_transferred is True
    assert second.cart_transferred is True
    assert _user_cart(db, user.id) == {1: 2}
    assert _user_favorites(db, user.id) == {2}


def test_session_claimed_by_concurrent_merge_adds_nothing(service, store, db, user):
    store.cart_add(SESSION, 1, 2)
    store.favorites_add(SESSION, 1)

    # drugi login z tym samym sessionId przejal juz klucze
    assert store.claim_cart(SESSION) == {1: 2}
    assert store.claim_favorites(SESSION) == {1}

    result = service.transfer_all(SESSION, user.id)

    assert result.cart_transferred is True
    assert _user_cart(db, user.id) == {}
    assert _user_favorites(db, user.id) == set()


def test_failed_favorites_merge_restores_guest_set(service, store, db, user, monkeypatch):
    store.favorites_add(SESSION, 1)
    store.favorites_add(SESSION, 2)

    def broken_add(self, favorite):
        raise OperationalError("INSERT INTO user_favorites", {}, Exception("ledger down"))

    monkeypatch.setattr(FavoriteRepo, "add_favorite", broken_add)

    assert service.transfer_favorites(SESSION, user.id) is False
    assert store.favorites_members(SESSION) == {1, 2}
    assert _user_favorites(db, user.id) == set()
