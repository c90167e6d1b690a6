"""Qualification filter applied to donor candidates."""

from __future__ import annotations

import logging

from ..config import settings
from ..data.donor_repository import DonorRepository
from ..models.domain import DonorCandidate

logger = logging.getLogger(__name__)


class DonorFilter:
    """Fetch donors of one blood group whose behaviour score clears the threshold.

    Blood groups match exactly; compatible groups are not expanded. The threshold
    is strict (``score > threshold``) and is re-checked here so a repository that
    ignores it cannot leak under-qualified donors into a search.
    """

    def __init__(self, repository: DonorRepository, threshold: float | None = None) -> None:
        self.repository = repository
        self.threshold = threshold if threshold is not None else settings.qualification_threshold

    def find_candidates(self, blood_group: str) -> list[DonorCandidate]:
        logger.info(f"Fetching donors with blood group: {blood_group}")
        donors = self.repository.find(blood_group, self.threshold)
        qualified = [donor for donor in donors if donor.behavior_score > self.threshold]
        dropped = len(donors) - len(qualified)
        if dropped:
            logger.warning(f"Repository returned {dropped} donors at or below threshold {self.threshold}")
        logger.info(f"Fetched {len(qualified)} donors.")
        return qualified
