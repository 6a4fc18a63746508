# app/utils/security.py
import jwt

from app.domain.errors import UnauthorizedError
from app.domain.schemas import Principal
from app.utils.settings import JWT_SECRET, JWT_ALGORITHM


def decode_token(token: str) -> Principal:
    """
    Weryfikuje podpis i waznosc tokenu, zwraca principal {id, role}.
    Wydawanie tokenow jest poza tym serwisem.
    """
    try:
        claims = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token wygasl")
    except jwt.InvalidTokenError as e:
        raise UnauthorizedError(f"Nieprawidlowy token: {e}")

    if claims.get("id") is None:
        raise UnauthorizedError("Token nie zawiera identyfikatora uzytkownika")

    try:
        return Principal(id=int(claims["id"]), role=claims.get("role", "customer"))
    except (TypeError, ValueError):
        raise UnauthorizedError("Nieprawidlowe dane w tokenie")
