"""Uniform JSON envelopes returned by every route.

Success: ``{success, message, timestamp, data?, meta?}``.
Failure: ``{success, message, timestamp, errors?}``.
"""

from typing import Any, Dict, List, Optional, Type

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from mireb.services.listing import Page
from mireb.time_utils import iso_timestamp


class ErrorDetail(BaseModel):
    """One field-level problem attached to an error envelope."""

    field: Optional[str] = Field(default=None, description="Offending field, wire name.")
    message: str = Field(..., description="Human readable reason.")
    value: Any = Field(default=None, description="Rejected value, when known.")


class Envelope(BaseModel):
    """Data model documenting the shape of every response body."""

    success: bool = Field(..., description="Whether the request succeeded.")
    message: str = Field(..., description="Human readable outcome.")
    timestamp: str = Field(..., description="ISO-8601 UTC time of the response.")
    data: Any = Field(default=None, description="Payload on success.")
    meta: Optional[Dict[str, Any]] = Field(
        default=None, description="Pagination block on listings."
    )
    errors: Optional[List[ErrorDetail]] = Field(
        default=None, description="Field-level errors on failure."
    )


def success_response(
    message: str,
    data: Any = None,
    meta: Any = None,
    status_code: int = 200,
) -> JSONResponse:
    body: Dict[str, Any] = {
        "success": True,
        "message": message,
        "timestamp": iso_timestamp(),
    }
    if data is not None:
        body["data"] = jsonable_encoder(data)
    if meta is not None:
        body["meta"] = jsonable_encoder(meta)
    return JSONResponse(status_code=status_code, content=body)


def error_response(
    status_code: int,
    message: str,
    errors: Optional[List[Dict[str, Any]]] = None,
) -> JSONResponse:
    body: Dict[str, Any] = {
        "success": False,
        "message": message,
        "timestamp": iso_timestamp(),
    }
    if errors is not None:
        body["errors"] = jsonable_encoder(errors)
    return JSONResponse(status_code=status_code, content=body)


def paginated_response(
    page: Page, schema: Type[BaseModel], message: str = "Données récupérées avec succès"
) -> JSONResponse:
    """Serialize ``page.items`` through ``schema`` and attach ``meta.pagination``."""
    items = [schema.model_validate(item) for item in page.items]
    return success_response(message, data=items, meta=page.meta)
