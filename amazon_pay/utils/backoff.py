from typing import Dict

from pydantic import Field
from pydantic.dataclasses import dataclass

from amazon_pay.constants import MAX_RETRIES, RETRY_BACKOFF_SECONDS


@dataclass
class RetrySchedule:
    """
    RetrySchedule holds the retry policy of MWS calls: how many retries follow the first attempt, and how long to
    sleep before each of them. Unlike an exponential backoff, the sleep times are a fixed table indexed by the try
    count. With the defaults a call is attempted at most four times:

    | Try # | Sleep before next attempt (seconds) |
    |-------|-------------------------------------|
    | 1     | 1                                   |
    | 2     | 4                                   |
    | 3     | 10                                  |
    | 4     | 0 (retries exhausted)               |

    The schedule holds no state, the try counter belongs to the request being retried.
    """

    max_retries: int = Field(MAX_RETRIES, title="Retries after the first attempt", ge=0)
    backoff_seconds: Dict[int, float] = Field(
        default_factory=lambda: dict(RETRY_BACKOFF_SECONDS),
        title="Seconds to sleep, indexed by try count",
    )

    def seconds_for_try(self, try_count: int) -> float:
        """Returns the seconds to sleep after the given number of failed tries, 0 for tries outside the table."""
        return self.backoff_seconds.get(try_count, 0)

    def is_exhausted(self, try_count: int) -> bool:
        return try_count > self.max_retries
