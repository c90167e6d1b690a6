"""Donor ranking pipeline: geocode, fetch candidates, measure, persist, sort."""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from ..data.donor_repository import get_donor_repository
from ..models.domain import Coordinate, RankedDonor
from ..persistence.results import ResultStore, get_result_store
from .filtering import DonorFilter
from .geocoding import NominatimGeocoder
from .geospatial import distance_km

logger = logging.getLogger(__name__)


class GeoResolver(Protocol):
    def resolve(self, postal_code: str) -> Coordinate: ...


class RankingPipeline:
    """Rank qualifying donors by straight-line distance from a postal code.

    Steps run strictly in order and any failure aborts the whole run; the only
    condition absorbed locally is a donor without coordinates, which is skipped.
    The result store is reset on every run (see ``persistence.results``).
    """

    def __init__(
        self,
        resolver: GeoResolver,
        donor_filter: DonorFilter,
        result_store: ResultStore,
        distance: Callable[[Coordinate, Coordinate], float] = distance_km,
    ) -> None:
        self.resolver = resolver
        self.donor_filter = donor_filter
        self.result_store = result_store
        self.distance = distance

    def run(self, postal_code: str, blood_group: str) -> list[RankedDonor]:
        origin = self.resolver.resolve(postal_code)

        self.result_store.ensure()
        self.result_store.clear()

        candidates = self.donor_filter.find_candidates(blood_group)

        ranked: list[RankedDonor] = []
        for candidate in candidates:
            if not candidate.has_coordinates:
                logger.info(f"Skipping donor: {candidate.name} due to missing or invalid coordinates.")
                continue
            ranked.append(RankedDonor.from_candidate(candidate, self.distance(origin, candidate.coordinate)))

        # one bulk write, a failure leaves nothing half-saved
        self.result_store.insert_many(ranked)
        logger.info(f"Saved {len(ranked)} donors with calculated distances.")

        donors = self.result_store.read_sorted()
        logger.info(f"Fetched {len(donors)} sorted donors.")
        return donors


def build_pipeline() -> RankingPipeline:
    """Wire the pipeline with the configured geocoder, donor source and result store."""
    return RankingPipeline(
        resolver=NominatimGeocoder(),
        donor_filter=DonorFilter(get_donor_repository()),
        result_store=get_result_store(),
    )
