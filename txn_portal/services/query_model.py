"""Query models: the current filters and pagination for each table.

The model owns an immutable parameter value and swaps it wholesale on every
change. Pagination changes trigger a fetch through ``on_fetch``; filter
edits do not (the operator presses search).
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from ..models.exceptions import ValidationError
from ..models.query import DEFAULT_PAGE_SIZE, GlobalLockQueryParam, GlobalSessionQueryParam

logger = logging.getLogger(__name__)

FetchTrigger = Callable[[], None]


def _noop() -> None:
    pass


class _QueryModelBase:
    """Shared pagination and filter handling."""

    def __init__(self, param: Any, on_fetch: FetchTrigger | None = None) -> None:
        self._param = param
        self._on_fetch = on_fetch or _noop

    @property
    def param(self) -> Any:
        return self._param

    def _fetch(self) -> None:
        self._on_fetch()

    def _coerce(self, key: str, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            if value == "":
                return None
        return value

    def set_filter(self, key: str, value: Any) -> None:
        """Replace one filter field, keeping every other field."""
        if key not in self._param.FILTER_KEYS:
            raise ValidationError(f"unknown filter: {key}")
        self._param = self._param.replace(**{key: self._coerce(key, value)})

    def set_time_range(self, start: int | None, end: int | None) -> None:
        """Set the begin-time range; either end may be None (unbounded)."""
        if start is not None and end is not None and start > end:
            raise ValidationError("time range start is after end")
        self._param = self._param.replace(time_start=start, time_end=end)

    def reset_filters(self) -> None:
        """Restore default filters; pagination is kept."""
        self._param = self._param.cleared()

    def set_page(self, page_num: int) -> None:
        if page_num < 1:
            raise ValidationError(f"invalid page: {page_num}")
        self._param = self._param.replace(page_num=page_num)
        self._fetch()

    def set_page_size(self, page_size: int) -> None:
        if page_size < 1:
            raise ValidationError(f"invalid page size: {page_size}")
        self._param = self._param.replace(page_size=page_size)
        self._fetch()

    def reset_page(self) -> None:
        """Go back to page 1 without fetching (used after an empty result)."""
        if self._param.page_num != 1:
            logger.debug(f"page {self._param.page_num} came back empty, resetting to 1")
        self._param = self._param.replace(page_num=1)


class SessionQueryModel(_QueryModelBase):
    """Filters and pagination for the global session table."""

    def __init__(
        self,
        on_fetch: FetchTrigger | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        super().__init__(GlobalSessionQueryParam(page_size=page_size), on_fetch)

    @property
    def param(self) -> GlobalSessionQueryParam:
        return self._param

    def _coerce(self, key: str, value: Any) -> Any:
        value = super()._coerce(key, value)
        if key == "status" and value is not None:
            try:
                return int(value)
            except (TypeError, ValueError) as e:
                raise ValidationError(f"invalid status: {value}") from e
        if key == "with_branch":
            return bool(value)
        return value

    def set_with_branch(self, with_branch: bool) -> None:
        """Toggle branch inclusion; only switching it on fetches."""
        was_on = self._param.with_branch
        self._param = self._param.replace(with_branch=with_branch)
        if with_branch and not was_on:
            self._fetch()


class LockQueryModel(_QueryModelBase):
    """Filters and pagination for the global lock table."""

    def __init__(
        self,
        on_fetch: FetchTrigger | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        xid: str | None = None,
    ) -> None:
        super().__init__(GlobalLockQueryParam(page_size=page_size, xid=xid or None), on_fetch)

    @property
    def param(self) -> GlobalLockQueryParam:
        return self._param
