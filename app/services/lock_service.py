import uuid
from contextlib import contextmanager

import redis
from tenacity import retry, RetryError, stop_after_delay, wait_fixed, retry_if_result

from app.domain.errors import ConflictError
from app.utils.retry import redis_retry
from app.utils.settings import REDIS_URL, CART_LOCK_TTL_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo, nikt nie wcisnie sie miedzy GET a DEL
#wiec zwalniamy tylko wlasny lock (token), nigdy cudzy po wygasnieciu TTL


class LockService:
    """
    -blokada koszyka uzytkownika na czas add_item (serializacja merge/insert)
    -zwalnianie locka tylko przez wlasciciela tokenu
    -atomowosc przy pomocy lua
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def cart_key(user_id: int) -> str:
        return f"cart:user:{user_id}:lock"

    @redis_retry()
    def acquire(self, key: str, token: str, ttl: int) -> bool:
        #SET cart:user:1:lock "<token>" NX EX 10
        return bool(
            self.redis.set(
                name=key,
                value=token,
                nx=True,  # tylko gdy klucz nie istnieje
                ex=ttl,  # wygasa sam, nawet gdy proces padnie z lockiem
            )
        )

    @redis_retry()
    def release(self, key: str, token: str) -> bool:
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)

    @contextmanager
    def cart_lock(self, user_id: int, ttl: int = CART_LOCK_TTL_SECONDS, wait_seconds: float = 5.0):
        key = self.cart_key(user_id)
        token = uuid.uuid4().hex

        wait_for_lock = retry(
            stop=stop_after_delay(wait_seconds),
            wait=wait_fixed(0.05),
            retry=retry_if_result(lambda acquired: not acquired),
        )(self.acquire)

        try:
            wait_for_lock(key, token, ttl)
        except RetryError:
            logger.warning(f"Lock {key} busy for more than {wait_seconds}s")
            raise ConflictError("Koszyk jest wlasnie modyfikowany, sprobuj ponownie")

        logger.debug(f"Acquired lock {key}")
        try:
            yield
        finally:
            if not self.release(key, token):
                logger.warning(f"Lock {key} expired before release")
