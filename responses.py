"""
Uniform response envelope for the catalog API.

Every endpoint answers with ``{"success": bool, ...}``. Successful calls carry
``data`` (and optionally ``message``, ``pagination`` or extra counters);
failures carry ``error`` and optionally ``message`` and ``details``.
"""
import logging
from datetime import datetime
from http import HTTPStatus
from typing import Any, Dict, List, Optional

from bson import ObjectId
from fastapi import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger('responses')

# Messages for built-in constraint failures, keyed by (field, pydantic error type)
FIELD_MESSAGES = {
    ("name", "missing"): "Plant name is required",
    ("name", "string_too_short"): "Plant name is required",
    ("name", "string_too_long"): "Plant name cannot exceed 100 characters",
    ("price", "missing"): "Price is required",
    ("price", "greater_than_equal"): "Price cannot be negative",
    ("price", "finite_number"): "Price must be a finite number",
    ("categories", "missing"): "At least one category is required",
    ("categories", "too_short"): "At least one category is required",
    ("image", "missing"): "Plant image is required",
    ("image", "string_pattern_mismatch"): "Image must be a valid URL",
    ("description", "string_too_long"): "Description cannot exceed 500 characters",
}


class CatalogError(HTTPException):
    """HTTP error rendered as a failure envelope."""

    def __init__(self, status_code: int, error: str, message: Optional[str] = None,
                 details: Optional[List[str]] = None):
        super().__init__(status_code=status_code, detail=error)
        self.error = error
        self.message = message
        self.details = details


def not_found(error: str) -> CatalogError:
    return CatalogError(HTTPStatus.NOT_FOUND.value, error)


def server_error(error: str, exc: Exception) -> CatalogError:
    return CatalogError(HTTPStatus.INTERNAL_SERVER_ERROR.value, error, message=str(exc))


def to_str_id(doc: dict) -> dict:
    """Make a MongoDB document JSON-ready: ``_id`` becomes ``id``, timestamps ISO strings."""
    if not doc:
        return doc
    out = {}
    for k, v in doc.items():
        if isinstance(v, ObjectId):
            out[k] = str(v)
        elif isinstance(v, datetime):
            out[k] = v.isoformat()
        else:
            out[k] = v
    if "_id" in out:
        out["id"] = out.pop("_id")
    return out


def plant_to_dict(doc: dict) -> dict:
    out = to_str_id(doc)
    if not out:
        return out
    out["availabilityStatus"] = "In Stock" if out.get("inStock") else "Out of Stock"
    price = out.get("price")
    if isinstance(price, (int, float)):
        amount = int(price) if float(price).is_integer() else price
        out["formattedPrice"] = f"₹{amount:,}"
    return out


def success(data: Any = None, message: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    response: Dict[str, Any] = {"success": True, "data": data}
    if message:
        response["message"] = message
    response.update(extra)
    return response


def failure(error: str, message: Optional[str] = None,
            details: Optional[List[str]] = None) -> Dict[str, Any]:
    response: Dict[str, Any] = {"success": False, "error": error}
    if message:
        response["message"] = message
    if details:
        response["details"] = details
    return response


def validation_details(errors) -> List[str]:
    """One ``"<field>: <message>"`` entry per violated field."""
    details: List[str] = []
    seen = set()
    for err in errors:
        loc = [part for part in err.get("loc", ()) if part != "body"]
        field = str(loc[0]) if loc else "body"
        if field in seen:
            continue
        seen.add(field)

        err_type = err.get("type", "")
        if (field, err_type) in FIELD_MESSAGES:
            message = FIELD_MESSAGES[(field, err_type)]
        elif err_type == "value_error" and err.get("ctx", {}).get("error") is not None:
            message = str(err["ctx"]["error"])
        elif err_type == "literal_error":
            message = f"{field} must be one of {err.get('ctx', {}).get('expected', '')}"
        else:
            message = err.get("msg", "Invalid value")
        details.append(f"{field}: {message}")
    return details


async def catalog_error_handler(request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc, CatalogError):
        body = failure(exc.error, exc.message, exc.details)
    else:
        body = failure(str(exc.detail))
    if exc.status_code >= 500:
        logger.error(f"API Error: {exc.status_code} - {body.get('error')} - {body.get('message')}")
    return JSONResponse(status_code=exc.status_code, content=body)


async def validation_error_handler(request, exc: RequestValidationError) -> JSONResponse:
    details = validation_details(exc.errors())
    logger.info(f"Validation error on {request.method} {request.url.path}: {details}")
    return JSONResponse(
        status_code=HTTPStatus.BAD_REQUEST.value,
        content=failure("Validation error", details=details),
    )


async def unexpected_error_handler(request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR.value,
        content=failure("Internal server error", str(exc)),
    )
