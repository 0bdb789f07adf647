# teenbudget/schemas/common.py
import math
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# listing endpoints share these bounds
DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100


def utcnow() -> datetime:
    """Current time as a naive UTC datetime (the form stored in the database)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class CamelModel(BaseModel):
    """JSON in camelCase; snake_case names are accepted on input too."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(CamelModel):
    page: int
    limit: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool


def build_pagination(page: int, limit: int, total_count: int) -> Pagination:
    total_pages = math.ceil(total_count / limit) if limit else 0
    return Pagination(
        page=page,
        limit=limit,
        total_pages=total_pages,
        total_count=total_count,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


class SuccessOut(BaseModel):
    success: bool = True


class Health(BaseModel):
    status: str
