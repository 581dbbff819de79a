"""Backoff calculators for retrying throttled AWS calls.

Each calculator turns an attempt number into a delay in milliseconds. A
calculator may keep state between calls, so every retry session creates its
own instance through ``BackoffCalculatorFactory`` and never shares it.

Reference: https://aws.amazon.com/blogs/architecture/exponential-backoff-and-jitter/
"""

from __future__ import annotations

import logging
import math
import random
from abc import ABC, abstractmethod
from typing import Dict, Optional, Type

from tenacity import RetryCallState
from tenacity.wait import wait_base

from cfn_cleaner.domain.config.retry import BackoffConfig, BackoffStrategy

logger = logging.getLogger(__name__)


class BackoffCalculator(ABC):
    """Abstract base class for backoff calculators"""

    def __init__(self, config: BackoffConfig, rng: Optional[random.Random] = None):
        self.config = config
        self._rng = rng or random.Random()

    @abstractmethod
    def next_delay(self, attempt: int) -> float:
        """Compute the wait before the next attempt

        Args:
            attempt: Number of failed attempts so far (1-based)

        Returns:
            Delay in milliseconds
        """

    def reset(self) -> None:
        """Forget any history kept between calls"""


class ExponentialBackoff(BackoffCalculator):
    """Capped exponential delay with optional symmetric jitter.

    The jitter is applied after the cap, so with a large ``jitter_factor`` the
    result may exceed ``max_delay`` by up to ``delay * jitter_factor``.
    """

    def next_delay(self, attempt: int) -> float:
        delay = min(self.config.base_delay * 2 ** (attempt - 1), self.config.max_delay)
        if self.config.jitter_factor == 0:
            return delay

        jitter = delay * self.config.jitter_factor
        return delay - jitter + self._rng.uniform(0, jitter * 2)


class DecorrelatedJitterBackoff(BackoffCalculator):
    """Delay drawn relative to the previous delay instead of the attempt count"""

    def __init__(self, config: BackoffConfig, rng: Optional[random.Random] = None):
        super().__init__(config, rng)
        self.last_delay: float = config.base_delay

    def next_delay(self, attempt: int) -> float:
        min_delay = self.config.base_delay
        calc_delay = min(self.config.max_delay, self.config.jitter_factor * 3 * self.last_delay)
        self.last_delay = math.floor(min_delay + self._rng.random() * (calc_delay - min_delay))
        return self.last_delay

    def reset(self) -> None:
        self.last_delay = self.config.base_delay


class FullJitterBackoff(BackoffCalculator):
    """Delay drawn uniformly from zero up to the capped exponential delay"""

    def next_delay(self, attempt: int) -> float:
        cap_delay = min(self.config.base_delay * 2 ** (attempt - 1), self.config.max_delay)
        return self._rng.random() * cap_delay


class BackoffCalculatorFactory:
    """Factory for creating backoff calculator instances"""

    CALCULATORS: Dict[BackoffStrategy, Type[BackoffCalculator]] = {
        BackoffStrategy.EXPONENTIAL: ExponentialBackoff,
        BackoffStrategy.DECORRELATED_JITTER: DecorrelatedJitterBackoff,
        BackoffStrategy.FULL_JITTER: FullJitterBackoff,
    }

    @classmethod
    def create(
        cls, config: BackoffConfig, rng: Optional[random.Random] = None
    ) -> BackoffCalculator:
        """Create a calculator for the configured strategy

        Unknown or missing strategies fall back to exponential backoff.

        Args:
            config: Backoff configuration
            rng: Optional random source (seeded in tests)

        Returns:
            New BackoffCalculator instance
        """
        calculator_class = cls.CALCULATORS.get(config.strategy, ExponentialBackoff)
        logger.debug(f"Creating {calculator_class.__name__} for strategy {config.strategy}")
        return calculator_class(config, rng)


class wait_backoff(wait_base):
    """Tenacity wait strategy backed by a BackoffCalculator.

    Tenacity counts the failed attempt as ``attempt_number`` before waiting,
    which matches the calculator's 1-based attempt argument. Tenacity also
    asks for the wait before checking the stop condition, so once
    ``max_attempts`` calls have been made no delay is computed.
    """

    def __init__(self, calculator: BackoffCalculator, max_attempts: Optional[int] = None):
        self.calculator = calculator
        self.max_attempts = max_attempts

    def __call__(self, retry_state: RetryCallState) -> float:
        if self.max_attempts is not None and retry_state.attempt_number >= self.max_attempts:
            return 0.0
        return self.calculator.next_delay(retry_state.attempt_number) / 1000.0
