# app/services/store.py
"""
Shared plumbing for the Supabase-backed stores.

- Blocking supabase SDK calls run in a worker thread (asyncio.to_thread) so the
  event loop is never blocked.
- SDK responses (object with .data, or a dict with "data") are normalized into a
  plain list of row dicts.
- Multi-row selects are paged with .range() because PostgREST silently cuts
  every response at its max-rows setting; `in` filters are sent in chunks.
- Store errors are NOT caught here: a failing round trip raises to the caller
  unchanged.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

from app.config.settings import settings
from app.db.client import get_supabase_client
from app.services.errors import RecordNotFoundError

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

# Ids per `in` filter; keeps the GET query string short.
IN_CHUNK_SIZE = 100


async def run_blocking(fn: Callable, *args, **kwargs) -> Any:
    return await asyncio.to_thread(lambda: fn(*args, **kwargs))


def response_rows(resp: Any) -> List[Row]:
    """
    Turn a Supabase SDK response into a list of rows.

    Handles the APIResponse object (``.data``) and plain dicts; a single-row
    payload is wrapped in a list.
    """
    if resp is None:
        return []
    if hasattr(resp, "data"):
        data = getattr(resp, "data")
    elif isinstance(resp, dict):
        data = resp.get("data")
    else:
        raise TypeError(f"unexpected supabase response type: {type(resp).__name__}")
    if data is None:
        return []
    if isinstance(data, dict):
        return [data]
    return list(data)


def chunked(values: Sequence[Any], size: int) -> Iterator[List[Any]]:
    for start in range(0, len(values), size):
        yield list(values[start : start + size])


class TableStore:
    """
    Base for stores bound to one table.

    Subclasses set ``table_name``; ``order_column``/``order_desc`` drive list().
    The client is resolved lazily so a store can be built before Supabase is
    configured; calling an operation without a client raises
    SupabaseClientNotInitialized.
    """

    table_name: str = ""
    order_column: Optional[str] = None
    order_desc: bool = False

    def __init__(self, client: Optional[Any] = None, page_size: Optional[int] = None) -> None:
        self._client = client
        self._page_size = page_size

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    @property
    def page_size(self) -> int:
        return self._page_size or settings.db_page_size

    def table(self, name: Optional[str] = None) -> Any:
        return self.client.table(name or self.table_name)

    async def _execute(self, build: Callable[[], Any], label: str) -> List[Row]:
        """Build and execute one query in a worker thread, returning its rows."""
        logger.debug("DB call: %s", label)

        def _fn():
            return build().execute()

        rows = response_rows(await run_blocking(_fn))
        logger.debug("DB call done: %s rows=%d", label, len(rows))
        return rows

    async def _select_all(self, build: Callable[[], Any], label: str) -> List[Row]:
        """
        Every row of a select, fetched page by page.

        `build` must return an ordered select whose order is total (end it
        with the primary key), otherwise rows can shift between pages. A page
        shorter than page_size is the last one.
        """
        size = self.page_size
        rows: List[Row] = []
        start = 0
        while True:
            page = await self._execute(
                lambda start=start: build().range(start, start + size - 1),
                f"{label}[{start}:]",
            )
            rows.extend(page)
            if len(page) < size:
                return rows
            start += size

    async def _select_in(
        self, build: Callable[[List[Any]], Any], values: Sequence[Any], label: str
    ) -> List[Row]:
        """_select_all over `values` split into IN_CHUNK_SIZE chunks; `build(chunk)` adds the filter."""
        rows: List[Row] = []
        for chunk in chunked(values, IN_CHUNK_SIZE):
            rows.extend(await self._select_all(lambda chunk=chunk: build(chunk), label))
        return rows

    # -----------------------
    # Flat CRUD
    # -----------------------
    async def list(self) -> List[Row]:
        def _build():
            query = self.table().select("*")
            if self.order_column:
                query = query.order(self.order_column, desc=self.order_desc)
            return query.order("id")

        return await self._select_all(_build, f"{self.table_name}.list")

    async def get(self, record_id: Any) -> Row:
        rows = await self._execute(
            lambda: self.table().select("*").eq("id", record_id).limit(1),
            f"{self.table_name}.get",
        )
        if not rows:
            raise RecordNotFoundError(self.table_name, record_id)
        return rows[0]

    async def _insert_one(self, row: Row) -> Row:
        rows = await self._execute(
            lambda: self.table().insert(row), f"{self.table_name}.insert"
        )
        if not rows:
            raise RuntimeError(f"{self.table_name} insert returned no row")
        return rows[0]

    async def _update_one(self, record_id: Any, changes: Row) -> Row:
        if not changes:
            return await self.get(record_id)
        rows = await self._execute(
            lambda: self.table().update(changes).eq("id", record_id),
            f"{self.table_name}.update",
        )
        if not rows:
            raise RecordNotFoundError(self.table_name, record_id)
        return rows[0]

    async def delete(self, record_id: Any) -> None:
        await self._execute(
            lambda: self.table().delete().eq("id", record_id),
            f"{self.table_name}.delete",
        )
