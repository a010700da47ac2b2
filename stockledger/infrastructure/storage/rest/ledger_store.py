"""
REST implementation of the Movement Record Store and Reference Store.

Reads a hosted PostgREST-style backend over httpx. Filters are sent as
``column=op.value`` query parameters and results are paged with
``limit``/``offset`` until a short page. Failures are never retried.
"""

import time
from typing import Any

import httpx

from stockledger.config import get_logger, get_settings
from stockledger.core.exceptions import BackendFetchError, UnknownTableError
from stockledger.core.interfaces import IMovementStore, IReferenceStore, QueryFilters, Row
from stockledger.core.tables import KNOWN_TABLES, REFERENCE_TABLES

logger = get_logger(__name__)


def filter_params(filters: QueryFilters | None) -> list[tuple[str, str]]:
    """PostgREST query parameters for the filters."""
    if filters is None:
        return []
    params = [(column, f"eq.{value}") for column, value in filters.eq.items()]
    params.extend(
        (column, f"in.({','.join(str(v) for v in values)})")
        for column, values in filters.isin.items()
    )
    for operator, predicates in (("gte", filters.gte), ("lte", filters.lte)):
        for column, value in predicates.items():
            params.append((column, f"{operator}.{value}"))
    return params


class RestLedgerStore(IMovementStore, IReferenceStore):
    """Reads ledger tables from the hosted backend."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        page_size: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings().backend
        self.base_url = (base_url or settings.url).rstrip("/")
        self.api_key = settings.api_key if api_key is None else api_key
        self.timeout = timeout or settings.timeout
        self.page_size = page_size or settings.page_size
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _get_page(
        self,
        client: httpx.AsyncClient,
        table: str,
        params: list[tuple[str, Any]],
    ) -> list[Row]:
        try:
            response = await client.get(f"/{table}", params=params)
        except httpx.HTTPError as e:
            raise BackendFetchError(table, f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            raise BackendFetchError(
                table,
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise BackendFetchError(table, "Response is not JSON", response.status_code) from e
        if not isinstance(payload, list):
            raise BackendFetchError(table, "Expected a list of rows", response.status_code)
        return payload

    async def fetch(
        self,
        table: str,
        filters: QueryFilters | None = None,
        columns: str = "*",
    ) -> list[Row]:
        if table not in KNOWN_TABLES:
            raise UnknownTableError(table)

        order = "id.asc" if table in REFERENCE_TABLES else "created_at.asc,id.asc"
        base_params: list[tuple[str, Any]] = [
            ("select", columns),
            *filter_params(filters),
            ("order", order),
        ]

        start_time = time.time()
        rows: list[Row] = []
        offset = 0
        async with self._client() as client:
            while True:
                page = await self._get_page(
                    client,
                    table,
                    [*base_params, ("limit", self.page_size), ("offset", offset)],
                )
                rows.extend(page)
                if len(page) < self.page_size:
                    break
                offset += self.page_size

        logger.debug(
            "backend_fetched",
            table=table,
            rows=len(rows),
            pages=offset // self.page_size + 1,
            elapsed_ms=int((time.time() - start_time) * 1000),
        )
        return rows

    async def fetch_all(self, table: str) -> list[Row]:
        return await self.fetch(table)
