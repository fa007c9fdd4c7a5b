# storefront/services/session_store.py
import functools
import secrets
import time
from typing import Dict, Set

import redis
from redis.exceptions import RedisError

from storefront.exceptions import DependencyUnavailable
from storefront.utils.retry import redis_retry
from storefront.utils.settings import GUEST_SESSION_TTL_SECONDS, AUTH_TOKEN_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _cart_key(session_id: str) -> str:
    return f"cart:{session_id}"


def _favorites_key(session_id: str) -> str:
    return f"favorites:{session_id}"


def _auth_key(token: str) -> str:
    return f"session:{token}"


def _claimed_key(key: str) -> str:
    return f"{key}:merging"


def _guarded(fn):
    """Po wyczerpaniu retry RedisError zamieniany na DependencyUnavailable."""

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except RedisError as e:
            logger.error(f"Session store operation {fn.__name__} failed: {e}")
            raise DependencyUnavailable("Session store is temporarily unavailable") from e

    return wrapper


def connect(url: str) -> redis.Redis:
    return redis.Redis.from_url(url, decode_responses=True)


class SessionStore:
    """
    Ephemeral Session Store na redisie:
    - cart:{sid}       hash product_id -> quantity
    - favorites:{sid}  set product_id
    - session:{token}  user_id zalogowanego uzytkownika
    - {key}:merging    klucz goscia przejety przez trwajacy merge
    Klucze goscia maja TTL odswiezany przy kazdej mutacji, po wygasnieciu odczyt zwraca pusty stan.
    Kazdy klucz mutowany niezaleznie, bez transakcji miedzy kluczami.
    """

    def __init__(
        self,
        client: redis.Redis,
        ttl: int = GUEST_SESSION_TTL_SECONDS,
        token_ttl: int = AUTH_TOKEN_TTL_SECONDS,
    ):
        self.redis = client
        self.ttl = ttl
        self.token_ttl = token_ttl

    @staticmethod
    def new_session_id() -> str:
        return f"guest_{secrets.token_hex(5)}_{int(time.time() * 1000)}"

    # ---------------- cart ----------------

    @_guarded
    @redis_retry()
    def cart_add(self, session_id: str, product_id: int, quantity: int) -> int:
        key = _cart_key(session_id)
        #HINCRBY jest addytywny wiec rownolegle dodania sie nie gubia
        pipe = self.redis.pipeline()
        pipe.hincrby(key, str(product_id), quantity)
        pipe.expire(key, self.ttl)
        new_qty, _ = pipe.execute()
        logger.info(f"Guest cart {key}: product {product_id} -> {new_qty}")
        return int(new_qty)

    @_guarded
    @redis_retry()
    def cart_set(self, session_id: str, product_id: int, quantity: int) -> None:
        key = _cart_key(session_id)
        pipe = self.redis.pipeline()
        if quantity <= 0:
            pipe.hdel(key, str(product_id))
        else:
            pipe.hset(key, str(product_id), quantity)
        pipe.expire(key, self.ttl)
        pipe.execute()

    @_guarded
    @redis_retry()
    def cart_remove(self, session_id: str, product_id: int) -> None:
        self.redis.hdel(_cart_key(session_id), str(product_id))

    @_guarded
    @redis_retry()
    def cart_lines(self, session_id: str) -> Dict[int, int]:
        raw = self.redis.hgetall(_cart_key(session_id))
        return {int(pid): int(qty) for pid, qty in raw.items()}

    @_guarded
    @redis_retry()
    def cart_clear(self, session_id: str) -> None:
        self.redis.delete(_cart_key(session_id))

    # ---------------- favorites ----------------

    @_guarded
    @redis_retry()
    def favorites_add(self, session_id: str, product_id: int) -> None:
        key = _favorites_key(session_id)
        pipe = self.redis.pipeline()
        pipe.sadd(key, str(product_id))
        pipe.expire(key, self.ttl)
        pipe.execute()

    @_guarded
    @redis_retry()
    def favorites_remove(self, session_id: str, product_id: int) -> None:
        self.redis.srem(_favorites_key(session_id), str(product_id))

    @_guarded
    @redis_retry()
    def favorites_members(self, session_id: str) -> Set[int]:
        return {int(pid) for pid in self.redis.smembers(_favorites_key(session_id))}

    @_guarded
    @redis_retry()
    def favorites_contains(self, session_id: str, product_id: int) -> bool:
        return bool(self.redis.sismember(_favorites_key(session_id), str(product_id)))

    # ---------------- merge claims ----------------

    def _claim(self, key: str, read):
        """
        RENAME klucza goscia na {key}:merging i odczyt w jednym MULTI.
        Drugi merge tej samej sesji nie znajdzie juz klucza i nic nie doda.
        """
        claimed = _claimed_key(key)
        pipe = self.redis.pipeline(transaction=True)
        pipe.rename(key, claimed)
        read(pipe, claimed)
        renamed, content = pipe.execute(raise_on_error=False)
        if isinstance(renamed, Exception):
            # brak klucza, nic do przeniesienia albo ktos juz go przejal
            return None
        return content

    @_guarded
    @redis_retry()
    def claim_cart(self, session_id: str) -> Dict[int, int]:
        raw = self._claim(_cart_key(session_id), lambda pipe, key: pipe.hgetall(key))
        return {int(pid): int(qty) for pid, qty in (raw or {}).items()}

    @_guarded
    @redis_retry()
    def restore_cart(self, session_id: str, lines: Dict[int, int]) -> None:
        key = _cart_key(session_id)
        pipe = self.redis.pipeline(transaction=True)
        for product_id, quantity in lines.items():
            pipe.hincrby(key, str(product_id), quantity)
        pipe.expire(key, self.ttl)
        pipe.delete(_claimed_key(key))
        pipe.execute()

    @_guarded
    @redis_retry()
    def drop_cart_claim(self, session_id: str) -> None:
        self.redis.delete(_claimed_key(_cart_key(session_id)))

    @_guarded
    @redis_retry()
    def claim_favorites(self, session_id: str) -> Set[int]:
        raw = self._claim(_favorites_key(session_id), lambda pipe, key: pipe.smembers(key))
        return {int(pid) for pid in raw or ()}

    @_guarded
    @redis_retry()
    def restore_favorites(self, session_id: str, members: Set[int]) -> None:
        key = _favorites_key(session_id)
        pipe = self.redis.pipeline(transaction=True)
        if members:
            pipe.sadd(key, *(str(pid) for pid in members))
        pipe.expire(key, self.ttl)
        pipe.delete(_claimed_key(key))
        pipe.execute()

    @_guarded
    @redis_retry()
    def drop_favorites_claim(self, session_id: str) -> None:
        self.redis.delete(_claimed_key(_favorites_key(session_id)))

    # ---------------- auth tokens ----------------

    @_guarded
    @redis_retry()
    def store_token(self, token: str, user_id: int) -> None:
        self.redis.set(_auth_key(token), str(user_id), ex=self.token_ttl)

    @_guarded
    @redis_retry()
    def resolve_token(self, token: str) -> int | None:
        value = self.redis.get(_auth_key(token))
        return int(value) if value is not None else None

    @_guarded
    @redis_retry()
    def drop_token(self, token: str) -> None:
        self.redis.delete(_auth_key(token))

    def ping(self) -> bool:
        try:
            return bool(self.redis.ping())
        except RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False
