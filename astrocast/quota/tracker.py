"""Mirror of the provider's daily API credit counter.

The provider owns the counter and enforces the quota; this only records the
last reported value and warns when it gets close. It never resets locally.
"""

import logging

logger = logging.getLogger(__name__)


class QuotaTracker:
    def __init__(self, limit: int, warn_threshold: int):
        self.limit = limit
        self.warn_threshold = warn_threshold
        self.used_today: int | None = None

    def record(self, used_today: int) -> None:
        self.used_today = used_today
        if self.is_near_limit():
            logger.warning(
                "API credits used today %d/%d (warning threshold %d)",
                used_today, self.limit, self.warn_threshold,
            )

    def is_near_limit(self) -> bool:
        return self.used_today is not None and self.used_today >= self.warn_threshold

    @property
    def remaining(self) -> int | None:
        if self.used_today is None:
            return None
        return max(0, self.limit - self.used_today)
