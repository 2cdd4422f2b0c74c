"""Query parameter values for the session and lock tables.

Both parameter types are frozen: handlers build a new value with
``replace()`` instead of patching a shared object.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace as dc_replace
from typing import Any, Generic, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _to_params(value: Any) -> dict[str, Any]:
    """Serialize a param dataclass to camelCase query params.

    Unset filters (None or empty string) are omitted; they impose no
    constraint on the server side.
    """
    params: dict[str, Any] = {}
    for f in fields(value):
        v = getattr(value, f.name)
        if v is None or v == "":
            continue
        if isinstance(v, bool):
            v = "true" if v else "false"
        params[_camel(f.name)] = v
    return params


@dataclass(frozen=True)
class GlobalSessionQueryParam:
    """Filters and pagination for the global session query."""

    with_branch: bool = False
    page_size: int = DEFAULT_PAGE_SIZE
    page_num: int = 1
    xid: str | None = None
    application_id: str | None = None
    status: int | None = None
    time_start: int | None = None
    time_end: int | None = None

    FILTER_KEYS = ("xid", "application_id", "status", "time_start", "time_end", "with_branch")

    def replace(self, **changes: Any) -> "GlobalSessionQueryParam":
        """Return a copy with the given fields replaced."""
        return dc_replace(self, **changes)

    def cleared(self) -> "GlobalSessionQueryParam":
        """Default filters, current pagination."""
        return GlobalSessionQueryParam(page_size=self.page_size, page_num=self.page_num)

    def to_params(self) -> dict[str, Any]:
        return _to_params(self)


@dataclass(frozen=True)
class GlobalLockQueryParam:
    """Filters and pagination for the global lock query."""

    xid: str | None = None
    table_name: str | None = None
    transaction_id: str | None = None
    branch_id: str | None = None
    pk: str | None = None
    resource_id: str | None = None
    page_size: int = DEFAULT_PAGE_SIZE
    page_num: int = 1
    time_start: int | None = None
    time_end: int | None = None

    FILTER_KEYS = (
        "xid", "table_name", "transaction_id", "branch_id",
        "pk", "resource_id", "time_start", "time_end",
    )

    def replace(self, **changes: Any) -> "GlobalLockQueryParam":
        """Return a copy with the given fields replaced."""
        return dc_replace(self, **changes)

    def cleared(self) -> "GlobalLockQueryParam":
        return GlobalLockQueryParam(page_size=self.page_size, page_num=self.page_num)

    def to_params(self) -> dict[str, Any]:
        return _to_params(self)


@dataclass
class Page(Generic[T]):
    """One page of query results."""

    rows: list[T] = field(default_factory=list)
    total: int = 0

    def page_count(self, page_size: int) -> int:
        """Number of pages at the given size (at least 1)."""
        if page_size <= 0 or self.total <= 0:
            return 1
        return (self.total + page_size - 1) // page_size
