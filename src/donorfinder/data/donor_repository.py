"""Donor data access, Supabase first with a CSV export as fallback."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Protocol

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from ..config import settings
from ..db.supabase import get_supabase_client
from ..errors import RepositoryError, UpstreamTimeoutError
from ..models.domain import DonorCandidate

logger = logging.getLogger(__name__)

STAGE = "candidates"

DONOR_COLUMNS = (
    "name_of_the_donor",
    "donor_mobile_number",
    "address",
    "donor_blood_group",
    "latitude",
    "longitude",
    "behavior_analysis",
)


class DonorRepository(Protocol):
    def find(self, blood_group: str, min_score: float) -> list[DonorCandidate]:
        """Donors with exactly ``blood_group`` and a score strictly above ``min_score``."""
        ...


class SupabaseDonorRepository:
    def __init__(self, client: Client, table: str | None = None) -> None:
        self.client = client
        self.table = table or settings.donor_table

    def find(self, blood_group: str, min_score: float) -> list[DonorCandidate]:
        try:
            response = (
                self.client.table(self.table)
                .select(",".join(DONOR_COLUMNS))
                .eq("donor_blood_group", blood_group)
                .gt("behavior_analysis", min_score)
                .execute()
            )
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError(f"Donor query timed out: {exc}", stage=STAGE) from exc
        except (APIError, httpx.HTTPError) as exc:
            raise RepositoryError(f"Donor query failed: {exc}", stage=STAGE) from exc

        return [DonorCandidate.from_row(row) for row in (response.data or [])]


class CsvDonorRepository:
    """Reads the donor dump from a CSV export with the same column names."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or settings.donor_file

    def _load(self) -> list[DonorCandidate]:
        if not self.path.exists():
            raise RepositoryError(f"Donor file not found: {self.path}", stage=STAGE)
        try:
            with self.path.open(mode="r", encoding="utf-8-sig", newline="") as handle:
                reader = csv.DictReader(handle)
                if not reader.fieldnames:
                    raise RepositoryError(f"Donor file '{self.path}' is missing a header row.", stage=STAGE)
                missing_columns = set(DONOR_COLUMNS) - set(reader.fieldnames)
                if missing_columns:
                    raise RepositoryError(
                        f"Donor file missing columns: {', '.join(sorted(missing_columns))}", stage=STAGE
                    )
                return [DonorCandidate.from_row(row) for row in reader]
        except (OSError, csv.Error, UnicodeDecodeError) as exc:
            raise RepositoryError(f"Unable to read donor file '{self.path}': {exc}", stage=STAGE) from exc

    def find(self, blood_group: str, min_score: float) -> list[DonorCandidate]:
        return [
            donor
            for donor in self._load()
            if donor.blood_group == blood_group and donor.behavior_score > min_score
        ]


def get_donor_repository() -> DonorRepository:
    """Use Supabase when it is configured, the local donor file otherwise."""
    client = get_supabase_client()
    if client is not None:
        return SupabaseDonorRepository(client)
    logger.info(f"Supabase not configured - reading donors from {settings.donor_file}")
    return CsvDonorRepository()
