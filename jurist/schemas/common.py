"""Shared schema helpers — pagination envelope and input coercion."""

from __future__ import annotations

import math
import re
from typing import Any, Generic, Type, TypeVar

import pydantic
from pydantic import BaseModel

from jurist.exceptions import ValidationError

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

PHONE_RE = re.compile(r"^\+7\d{10}$")
_PHONE_JUNK_RE = re.compile(r"[\s\-()]")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def normalize_phone(value: str) -> str:
    """Normalize a Kazakhstan/Russia phone number to +7XXXXXXXXXX.

    Accepts separators (spaces, dashes, parentheses) and the domestic
    8-prefix form ("8 701 123 45 67").
    """
    phone = _PHONE_JUNK_RE.sub("", value or "")
    if len(phone) == 11 and phone.isdigit() and phone[0] in ("7", "8"):
        phone = "+7" + phone[1:]
    if not PHONE_RE.match(phone):
        raise ValueError("Phone must be in format +7XXXXXXXXXX")
    return phone


def parse_input(model: Type[M], data: Any) -> M:
    """Validate raw input into a schema, raising the domain ValidationError."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or None
        raise ValidationError(
            first.get("msg", "Invalid input"),
            field=field,
            errors=[
                {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ],
        ) from e


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class Page(BaseModel, Generic[T]):
    """Paginated list envelope."""

    data: list[T]
    meta: PageMeta

    @classmethod
    def build(cls, items: list[Any], total: int, page: int, limit: int) -> "Page[T]":
        return cls(
            data=items,
            meta=PageMeta(
                total=total,
                page=page,
                limit=limit,
                total_pages=math.ceil(total / limit) if limit else 0,
            ),
        )


def clamp_page(page: int | None, limit: int | None) -> tuple[int, int]:
    """Coerce page/limit query values into valid bounds."""
    page = max(1, int(page or 1))
    limit = int(limit or DEFAULT_PAGE_SIZE)
    limit = min(max(1, limit), MAX_PAGE_SIZE)
    return page, limit
