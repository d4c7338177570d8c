import logging
import time
from typing import Callable

from travel_planner.core.errors import RateLimitExceeded
from travel_planner.storage.repository import InMemoryRepository

logger = logging.getLogger(__name__)

ONE_HOUR_MS = 60 * 60 * 1000


def _now_ms() -> int:
    return int(time.time() * 1000)


class RateLimiter:
    """
    Sliding-window limit on plan generations per user.

    The record is read, filtered and written back without a lock or
    transaction, so two requests from the same user racing through the window
    can both be admitted. The limit is advisory; over-admission is bounded by
    the number of concurrent requests a single user has in flight.
    """

    def __init__(
        self,
        repository: InMemoryRepository,
        max_requests: int = 10,
        window_ms: int = ONE_HOUR_MS,
        clock: Callable[[], int] = _now_ms,
    ):
        self.repository = repository
        self.max_requests = max_requests
        self.window_ms = window_ms
        self.clock = clock

    def check_and_record(self, user_id: str) -> None:
        now = self.clock()
        window_start = now - self.window_ms
        recent = [t for t in self.repository.get_rate_limit(user_id) if t > window_start]

        if len(recent) >= self.max_requests:
            logger.warning("Rate limit hit for user %s (%d requests in window)", user_id, len(recent))
            raise RateLimitExceeded(
                f"Rate limit exceeded. Max {self.max_requests} requests per {self._window_label()}."
            )

        recent.append(now)
        self.repository.save_rate_limit(user_id, recent)

    def _window_label(self) -> str:
        if self.window_ms == ONE_HOUR_MS:
            return "hour"
        if self.window_ms % 60000 == 0:
            return f"{self.window_ms // 60000} minutes"
        return f"{self.window_ms / 1000:g} seconds"
