"""
Uniform JSON envelopes
"""
import math
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success(data: Any = None, message: str = "Success", status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"status": "success", "message": message, "data": data}),
    )


def error(message: str = "An error occurred", status_code: int = 500, errors: Any = None, **extra) -> JSONResponse:
    body = {"status": "error", "message": message}
    if errors is not None:
        body["errors"] = errors
    body.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def paginated(items: list, page: int, limit: int, total: int) -> dict:
    return {
        "data": items,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit) if limit else 0,
        },
    }
