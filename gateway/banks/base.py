"""
Shared plumbing for the simulated banks.

The simulators stand in for real bank APIs:
  - Configurable decline rate (default from settings)
  - Injectable random source for deterministic tests
  - Realistic-looking ids, card brands and digits

Latency is not simulated here; adapters own the round-trip delay.
"""

import random
import string
from typing import Optional, Sequence, TypeVar

from gateway.config import settings

T = TypeVar("T")


class BankSimulator:
    """Base for the five bank simulators."""

    def __init__(
        self,
        failure_rate: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ):
        self._failure_rate = failure_rate if failure_rate is not None else settings.mock_failure_rate
        self._rng = rng or random.Random()

    def approves(self) -> bool:
        """Decide the outcome of one charge. 0.0 always approves, 1.0 never does."""
        return self._rng.random() >= self._failure_rate

    def pick(self, options: Sequence[T]) -> T:
        return self._rng.choice(options)

    def digits(self, length: int) -> str:
        return "".join(self._rng.choice(string.digits) for _ in range(length))

    def token(self, length: int, alphabet: str = string.ascii_letters + string.digits) -> str:
        return "".join(self._rng.choice(alphabet) for _ in range(length))
