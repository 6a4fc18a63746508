# app/utils/slug.py
import re
import unicodedata
from typing import Callable

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """
    "Koszulka Domowa 2024!" -> "koszulka-domowa-2024"
    znaki spoza ASCII sa transliterowane albo wyrzucane
    """
    normalized = unicodedata.normalize("NFKD", text or "")
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii").lower()
    return _NON_ALNUM.sub("-", ascii_text).strip("-")


def make_unique_slug(base: str, exists: Callable[[str], bool]) -> str:
    """
    Zwraca pierwszy wolny slug z sekwencji base, base-1, base-2, ...
    exists(candidate) decyduje czy kandydat jest zajety.
    """
    slug = base
    count = 1
    while exists(slug):
        slug = f"{base}-{count}"
        count += 1
    return slug
