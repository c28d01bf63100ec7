"""Request-parameter normalization and field validation helpers.

Everything here is a total function: hostile or malformed input resolves to a
safe default (or an explicit invalid result) instead of raising, so list and
write handlers can call these unconditionally.
"""

import math
import re
from dataclasses import asdict, dataclass
from typing import Any, Mapping

DEFAULT_LIMIT = 10
MAX_LIMIT = 50
DEFAULT_PAGE = 1
MAX_STRING_LENGTH = 255
MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 128
# largest OFFSET a signed 64-bit SQL integer can hold
MAX_OFFSET = 2**63 - 1

VALID_ROLES = frozenset({"STU", "CM", "VP", "CL", "ADM"})

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]{3,30}$")


def _as_number(n: float) -> int | float:
    return int(n) if n.is_integer() else n


def to_number(value: Any, fallback):
    """Return ``value`` as a positive finite number, or ``fallback``."""
    if isinstance(value, bool):
        return fallback
    if isinstance(value, int):
        if value <= 0:
            return fallback
        try:
            float(value)
        except OverflowError:
            return fallback
        return value
    if not isinstance(value, (float, str)):
        return fallback
    # float() also takes digit separators such as "1_000"; a numeric field does not
    if isinstance(value, str) and "_" in value:
        return fallback
    try:
        n = float(value)
    except (ValueError, OverflowError):
        return fallback
    if not math.isfinite(n) or n <= 0:
        return fallback
    return _as_number(n)


def _whole(value: Any, fallback: int) -> int:
    # page and limit are row counts: drop fractions, never below 1
    n = int(to_number(value, fallback))
    return n if n >= 1 else fallback


@dataclass(frozen=True)
class PaginationSpec:
    search: str
    order_key: str
    direction: str
    limit: int
    page: int
    offset: int

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["orderKey"] = data.pop("order_key")
        return data


def build_pagination(
    query: Mapping[str, Any], allowed_order: Mapping[str, str], default_order: str
) -> PaginationSpec:
    """Normalize raw list parameters (``q``, ``orderBy``, ``order``, ``page``, ``limit``).

    ``allowed_order`` maps public sort names to column names; anything not in
    it falls back to ``default_order``, so the resulting ``order_key`` is safe
    to use as a column reference.
    """
    search = query.get("q") or ""
    if not isinstance(search, str):
        search = str(search)
    order_by = query.get("orderBy")
    order_key = default_order
    if isinstance(order_by, str) and order_by in allowed_order:
        order_key = allowed_order[order_by]
    order = query.get("order")
    direction = "DESC" if isinstance(order, str) and order.lower() == "desc" else "ASC"
    limit = min(_whole(query.get("limit"), DEFAULT_LIMIT), MAX_LIMIT)
    page = _whole(query.get("page"), DEFAULT_PAGE)
    if (page - 1) * limit > MAX_OFFSET:
        page = DEFAULT_PAGE
    offset = (page - 1) * limit
    return PaginationSpec(
        search=search,
        order_key=order_key,
        direction=direction,
        limit=limit,
        page=page,
        offset=offset,
    )


def calculate_pages(total, limit) -> int:
    try:
        pages = math.ceil(total / limit)
    except (TypeError, ValueError, ZeroDivisionError, OverflowError):
        return 1
    return pages or 1


def paginate_response(items: list, total: int, spec: PaginationSpec) -> dict[str, Any]:
    return {
        "data": items,
        "page": spec.page,
        "pages": calculate_pages(total, spec.limit),
        "total": total,
        "limit": spec.limit,
    }


def is_valid_email(email: Any) -> bool:
    return isinstance(email, str) and EMAIL_RE.fullmatch(email) is not None


def is_valid_username(username: Any) -> bool:
    if not username or not isinstance(username, str):
        return False
    return USERNAME_RE.fullmatch(username) is not None


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    message: str


def validate_password(password: Any) -> ValidationResult:
    if not password or not isinstance(password, str):
        return ValidationResult(False, "Password is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        return ValidationResult(False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password) > MAX_PASSWORD_LENGTH:
        return ValidationResult(False, f"Password must be at most {MAX_PASSWORD_LENGTH} characters")
    return ValidationResult(True, "Password is valid")


def is_valid_role(role: Any) -> bool:
    return isinstance(role, str) and role in VALID_ROLES


def sanitize_string(value: Any) -> str:
    if not value or not isinstance(value, str):
        return ""
    return value.strip()[:MAX_STRING_LENGTH]
