"""
API Call Counter - per-minute and per-day call limiting for the map service
"""
import time
from collections import deque
from datetime import date
from typing import Callable, Deque, Optional

from looproute.config import settings
from looproute.errors import APILimitExceededError


class APICounter:
    """API call counter"""

    def __init__(
        self,
        max_calls_per_minute: Optional[int] = None,
        max_calls_per_day: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
        today: Callable[[], date] = date.today,
    ):
        self.max_calls_per_minute = (
            max_calls_per_minute
            if max_calls_per_minute is not None
            else settings.max_api_calls_per_minute
        )
        self.max_calls_per_day = (
            max_calls_per_day if max_calls_per_day is not None else settings.max_api_calls_per_day
        )
        self._clock = clock
        self._today = today
        self._recent: Deque[float] = deque()
        self.current_date = today()
        self.daily_count = 0

    def _roll(self) -> None:
        today = self._today()

        # Reset counter if date changes
        if today != self.current_date:
            self.daily_count = 0
            self.current_date = today

        cutoff = self._clock() - 60.0
        while self._recent and self._recent[0] <= cutoff:
            self._recent.popleft()

    def can_make_call(self) -> bool:
        """Check if API can be called"""
        self._roll()
        return (
            len(self._recent) < self.max_calls_per_minute
            and self.daily_count < self.max_calls_per_day
        )

    def check(self) -> None:
        """Raise APILimitExceededError if the next call would exceed a limit"""
        if not self.can_make_call():
            raise APILimitExceededError(
                f"API call limit exceeded. Max calls per minute: {self.max_calls_per_minute}, "
                f"per day: {self.max_calls_per_day}",
                status_code=429,
            )

    def record_call(self) -> None:
        """Record one API call"""
        self._roll()
        self._recent.append(self._clock())
        self.daily_count += 1

    def reserve(self) -> None:
        """Claim one call slot before the request is sent, or raise APILimitExceededError"""
        self.check()
        self.record_call()

    def get_remaining_calls(self) -> int:
        """Get remaining call count, the tighter of both windows"""
        self._roll()
        return max(
            0,
            min(
                self.max_calls_per_minute - len(self._recent),
                self.max_calls_per_day - self.daily_count,
            ),
        )


# Global counter instance
api_counter = APICounter()
