"""Result store for ranked donors.

The store is a single slot: every search clears whatever the previous search
wrote before inserting its own rows. Two searches running at the same time
therefore interleave their clear/insert/read sequences and can return each
other's donors. Callers that need isolation must serialise searches or give
each request its own store.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Protocol

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from ..config import settings
from ..db.supabase import get_supabase_client
from ..errors import RepositoryError, UpstreamTimeoutError
from ..models.domain import RankedDonor

logger = logging.getLogger(__name__)

STAGE = "results"


class ResultStore(Protocol):
    def ensure(self) -> None: ...

    def clear(self) -> None: ...

    def insert_many(self, donors: Iterable[RankedDonor]) -> None: ...

    def read_sorted(self) -> list[RankedDonor]: ...


class InMemoryResultStore:
    """Process-local store used when no database is configured."""

    def __init__(self) -> None:
        self._rows: list[dict[str, Any]] = []

    def ensure(self) -> None:
        return None

    def clear(self) -> None:
        self._rows.clear()

    def insert_many(self, donors: Iterable[RankedDonor]) -> None:
        self._rows.extend(donor.to_row() for donor in donors)

    def read_sorted(self) -> list[RankedDonor]:
        rows = sorted(self._rows, key=lambda row: row["distance_km"])
        return [RankedDonor.from_row(row) for row in rows]


class SupabaseResultStore:
    """Ranked donors kept in a Supabase table (see ``sql/schema.sql``)."""

    def __init__(self, client: Client, table: str | None = None) -> None:
        self.client = client
        self.table = table or settings.output_table

    def _execute(self, action: str, query: Any) -> Any:
        try:
            return query.execute()
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError(f"Result store {action} timed out: {exc}", stage=STAGE) from exc
        except (APIError, httpx.HTTPError) as exc:
            raise RepositoryError(f"Result store {action} failed on '{self.table}': {exc}", stage=STAGE) from exc

    def ensure(self) -> None:
        # PostgREST cannot run DDL; probing the table surfaces a missing schema early
        self._execute("probe", self.client.table(self.table).select("id").limit(1))

    def clear(self) -> None:
        # PostgREST refuses unfiltered deletes
        self._execute("clear", self.client.table(self.table).delete().gte("id", 0))
        logger.info(f"Output table '{self.table}' cleared.")

    def insert_many(self, donors: Iterable[RankedDonor]) -> None:
        rows = [donor.to_row() for donor in donors]
        if not rows:
            return
        self._execute("insert", self.client.table(self.table).insert(rows))

    def read_sorted(self) -> list[RankedDonor]:
        response = self._execute(
            "read",
            self.client.table(self.table).select("*").order("distance_km", desc=False),
        )
        return [RankedDonor.from_row(row) for row in (response.data or [])]


_memory_store = InMemoryResultStore()


def get_result_store() -> ResultStore:
    """Use the Supabase output table when configured, the in-process slot otherwise."""
    client = get_supabase_client()
    if client is not None:
        return SupabaseResultStore(client)
    return _memory_store
