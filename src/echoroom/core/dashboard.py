"""Read-side idea queries for dashboards.

Nothing here mutates the store.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import AsyncIterator, Callable
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel

from echoroom.models.idea import Idea, IdeaStatus
from echoroom.storage.base import RecordStore

SortKey = Literal["created_at", "updated_at", "title", "status"]

_STATUS_ORDER = {status: i for i, status in enumerate(IdeaStatus)}


class IdeaFilter(BaseModel):
    """Filter and ordering for idea listings. Date bounds are inclusive."""

    status: IdeaStatus | None = None
    author_id: str | None = None
    created_after: datetime | None = None
    created_before: datetime | None = None
    sort_by: SortKey = "created_at"
    descending: bool = False


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _created(idea: Idea) -> datetime:
    return _as_utc(datetime.fromisoformat(idea.created_at))


_SORT_KEYS: dict[str, Callable[[Idea], Any]] = {
    "created_at": _created,
    "updated_at": lambda i: _as_utc(datetime.fromisoformat(i.updated_at or i.created_at)),
    "title": lambda i: i.title.casefold(),
    "status": lambda i: _STATUS_ORDER[i.status],
}


class Dashboard:
    """Filtered, sorted views and counts over the idea store."""

    def __init__(
        self,
        store: RecordStore,
        *,
        pagination_default: int = 10,
        pagination_max: int = 50,
    ) -> None:
        self._store = store
        self._pagination_default = pagination_default
        self._pagination_max = pagination_max

    async def iter_ideas(self, flt: IdeaFilter | None = None) -> AsyncIterator[Idea]:
        """Yield matching ideas in the requested order.

        The result is a one-shot iterator over a snapshot taken on first use.
        """
        flt = flt or IdeaFilter()
        rows = await self._store.query_ideas(
            status=flt.status.value if flt.status else None,
            author_id=flt.author_id,
        )
        ideas = sorted(
            (Idea(**row) for row in rows),
            key=_SORT_KEYS[flt.sort_by],
            reverse=flt.descending,
        )
        after = _as_utc(flt.created_after) if flt.created_after else None
        before = _as_utc(flt.created_before) if flt.created_before else None

        for idea in ideas:
            created = _created(idea)
            if after and created < after:
                continue
            if before and created > before:
                continue
            yield idea

    async def list_ideas(
        self,
        flt: IdeaFilter | None = None,
        *,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Idea]:
        """One page of iter_ideas(). limit is clamped to [1, pagination_max]."""
        limit = self._pagination_default if limit is None else limit
        limit = max(1, min(limit, self._pagination_max))
        offset = max(0, offset)

        page: list[Idea] = []
        index = 0
        async for idea in self.iter_ideas(flt):
            if index >= offset:
                page.append(idea)
                if len(page) >= limit:
                    break
            index += 1
        return page

    async def summary(self) -> dict[str, Any]:
        """Idea counts per status and per author, plus record totals."""
        rows = await self._store.query_ideas()
        by_status = Counter(row["status"] for row in rows)
        by_author = Counter(row.get("author_id") or "anonymous" for row in rows)
        return {
            "total": len(rows),
            "by_status": {s.value: by_status.get(s.value, 0) for s in IdeaStatus},
            "by_author": dict(sorted(by_author.items())),
            "records": await self._store.get_stats(),
        }
