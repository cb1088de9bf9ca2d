# app/core.py
import json
import math
import secrets
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Header, Request

from .config import Settings
from .database import ProductStore
from .errors import ApiError, AuthenticationError, MalformedRequestError, ValidationError
from .models import ProductIn

# Request gates run before a handler touches the store: auth first, then the body.

REQUIRED_FIELDS = ("name", "description", "price", "category")


@dataclass
class Verdict:
    """Outcome of a gate. ``value`` is set on success, ``error`` on failure."""

    ok: bool
    value: Any = None
    error: Optional[ApiError] = None

    @classmethod
    def passed(cls, value: Any = None) -> "Verdict":
        return cls(ok=True, value=value)

    @classmethod
    def failed(cls, error: ApiError) -> "Verdict":
        return cls(ok=False, error=error)

    def unwrap(self) -> Any:
        if not self.ok:
            raise self.error
        return self.value


# ---------------------------
# Authenticator
# ---------------------------
def authenticate(header_value: Optional[str], expected_secret: str) -> Verdict:
    if not header_value:
        return Verdict.failed(AuthenticationError("API key required in x-api-key header", reason="missing"))
    if not secrets.compare_digest(header_value.encode(), expected_secret.encode()):
        return Verdict.failed(AuthenticationError("Invalid API key", reason="invalid"))
    return Verdict.passed()


# ---------------------------
# Validator
# ---------------------------
def _is_text(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def _is_number(value: Any) -> bool:
    # bool is an int subclass but not a JSON number
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def check_product(payload: Any, allow_empty_description: bool = True) -> Verdict:
    """Validate a candidate product body; the first failing rule wins.

    On success the verdict carries a ``ProductIn`` with trimmed strings and
    ``inStock`` defaulted to ``True``.
    """
    if not isinstance(payload, dict) or any(f not in payload for f in REQUIRED_FIELDS):
        return Verdict.failed(
            ValidationError("Missing required fields: name, description, price, category are required")
        )

    name = payload["name"]
    description = payload["description"]
    price = payload["price"]
    category = payload["category"]
    in_stock = payload.get("inStock", True)

    if not _is_text(name):
        return Verdict.failed(ValidationError("name must be a non-empty string"))
    if not isinstance(description, str):
        return Verdict.failed(ValidationError("description must be a string"))
    if not allow_empty_description and not description.strip():
        return Verdict.failed(ValidationError("description must be a non-empty string"))
    if not _is_number(price) or price < 0:
        return Verdict.failed(ValidationError("price must be a non-negative number"))
    if not _is_text(category):
        return Verdict.failed(ValidationError("category must be a non-empty string"))
    if not isinstance(in_stock, bool):
        return Verdict.failed(ValidationError("inStock must be a boolean"))

    return Verdict.passed(
        ProductIn(
            name=name.strip(),
            description=description.strip(),
            price=price,
            category=category.strip(),
            in_stock=in_stock,
        )
    )


# ---------------------------
# FastAPI dependencies
# ---------------------------
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> ProductStore:
    return request.app.state.store


async def require_api_key(request: Request, x_api_key: Optional[str] = Header(None)) -> None:
    authenticate(x_api_key, get_settings(request).api_key).unwrap()


async def product_payload(request: Request) -> ProductIn:
    raw = await request.body()
    try:
        payload = json.loads(raw) if raw else None
    except (ValueError, UnicodeDecodeError):
        raise MalformedRequestError("Request body is not valid JSON")
    settings = get_settings(request)
    return check_product(payload, allow_empty_description=not settings.strict_validation).unwrap()
