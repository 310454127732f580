"""
Short code generation strategies for the link table.
Uses Strategy Pattern to allow different generation algorithms.
"""

import string
import random
import time
from abc import ABC, abstractmethod
from typing import AbstractSet, Callable, Optional

from shortlink_app.services.exceptions import ShortcodeExhaustedError


class ShortCodeStrategy(ABC):
    """Abstract base class for short code generation strategies"""

    @abstractmethod
    def generate(self, existing_codes: AbstractSet[str]) -> str:
        """
        Generate a short code.

        Args:
            existing_codes: Codes already taken (table keys plus codes
                            allocated earlier in the same batch)

        Returns:
            A short code not present in existing_codes

        Raises:
            ShortcodeExhaustedError: If no free code could be produced
        """
        pass


class TimestampShortCodeStrategy(ShortCodeStrategy):
    """
    Time-derived strategy.
    Encodes the current millisecond clock in Base62 and keeps the last characters.

    Pros: No randomness, cheap
    Cons: Two calls in the same millisecond produce the same code;
          uniqueness is NOT guaranteed, only checked
    """

    BASE62_CHARS = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"

    def __init__(self, length: int = 6, clock_ms: Optional[Callable[[], int]] = None):
        self.length = length
        self.clock_ms = clock_ms or (lambda: time.time_ns() // 1_000_000)

    def generate(self, existing_codes: AbstractSet[str]) -> str:
        """Generate time-derived code, fail if it is already taken"""
        encoded = self._base62_encode(self.clock_ms())
        short_code = encoded[-self.length:].rjust(self.length, self.BASE62_CHARS[0])

        if short_code in existing_codes:
            raise ShortcodeExhaustedError(
                f"Time-derived short code '{short_code}' is already taken"
            )

        return short_code

    def _base62_encode(self, number: int) -> str:
        """
        Convert integer to Base62 string.

        Base62 uses: 0-9 (10) + a-z (26) + A-Z (26) = 62 characters
        """
        if number == 0:
            return self.BASE62_CHARS[0]

        result = ""
        while number > 0:
            result = self.BASE62_CHARS[number % 62] + result
            number //= 62

        return result


class RandomShortCodeStrategy(ShortCodeStrategy):
    """
    Random generation strategy with a bounded retry budget.
    Draws random alphanumeric strings and checks them against the taken codes.

    When every attempt collides it hands over to the fallback strategy
    (time-derived by default). The fallback is a last resort and may
    collide as well, in which case ShortcodeExhaustedError is raised.
    """

    def __init__(
        self,
        length: int = 6,
        max_attempts: int = 100,
        fallback: Optional[ShortCodeStrategy] = None,
    ):
        self.length = length
        self.max_attempts = max_attempts
        self.characters = string.ascii_letters + string.digits
        self.fallback = fallback or TimestampShortCodeStrategy(length=length)

    def generate(self, existing_codes: AbstractSet[str]) -> str:
        """Generate random short code with collision checking"""
        for attempt in range(self.max_attempts):
            short_code = self._generate_random_string()

            if short_code not in existing_codes:
                return short_code

        # Retry budget spent
        return self.fallback.generate(existing_codes)

    def _generate_random_string(self) -> str:
        """Generate a random string of specified length"""
        return ''.join(random.choice(self.characters) for _ in range(self.length))
