from datetime import datetime
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def _envelope(ok: bool, message: str, data: Any = None, errors: Any = None) -> dict:
    return {"success": ok, "message": message, "data": data, "errors": errors}


def success(data: Optional[Any] = None, message: str = "Success", meta: Optional[Dict] = None) -> dict:
    """JSON-ready success body. Models, enums and datetimes are encoded here."""
    body = _envelope(True, message, data)
    if meta is not None:
        body["meta"] = meta
    return jsonable_encoder(body)


def error(message: str = "Error", errors: Optional[Any] = None, status_code: int = 400) -> JSONResponse:
    """Failure response rendered by the global exception handlers."""
    body = _envelope(False, message, errors=errors or [])
    body["timestamp"] = f"{datetime.utcnow().isoformat()}Z"
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def paginated_response(items, total: int, page: int, limit: int, message: str = "Success") -> dict:
    return success(
        data=items,
        message=message,
        meta={
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": (total + limit - 1) // limit,
        },
    )
