# app/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, wait_fixed, retry_if_exception_type
from sqlalchemy.exc import IntegrityError
import redis


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def integrity_retry(attempts: int = 2):
    """
    Powtarza cala jednostke pracy, gdy rownolegly zapis wygral wyscig
    o unikalny klucz (np. pozycja koszyka, aktywny koszyk uzytkownika).
    """
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_fixed(0.05),
        retry=retry_if_exception_type(IntegrityError),
    )
