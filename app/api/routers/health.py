# app/api/routers/health.py
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request):
    """SELECT 1 na bazie, 503 gdy baza nie odpowiada."""
    try:
        request.app.state.database.ping()
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"success": False, "message": "Baza danych niedostepna", "error": "unavailable"},
        )
    return {"success": True, "message": "OK", "data": {"status": "ok", "database": "ok"}}
