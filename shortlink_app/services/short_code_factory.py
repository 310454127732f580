"""
Factory for creating short code generation strategies.
Uses caching to avoid creating multiple instances.
"""

from enum import Enum
from typing import AbstractSet, Optional
from shortlink_app.services.short_code_strategies import (
    ShortCodeStrategy,
    RandomShortCodeStrategy,
    TimestampShortCodeStrategy
)
from shortlink_app.services.validators import validate_custom_code
from shortlink_app.config import settings


class ShortCodeStrategyType(Enum):
    """Available short code generation strategies"""
    RANDOM = "random"
    TIMESTAMP = "timestamp"


class ShortCodeFactory:
    """Factory for creating short code generation strategies with caching"""

    _instances = {}  # Cache for strategy instances

    @classmethod
    def create_strategy(
        cls,
        strategy_type: ShortCodeStrategyType = None
    ) -> ShortCodeStrategy:
        """
        Create or return cached short code generation strategy.

        Args:
            strategy_type: Type of strategy to create.
                          If None, uses value from settings.

        Returns:
            A cached instance of a ShortCodeStrategy

        Raises:
            ValueError: If strategy_type is unknown
        """
        # Use default from settings if not specified
        if strategy_type is None:
            strategy_type = ShortCodeStrategyType(settings.short_code_strategy)

        # Return cached instance if exists
        if strategy_type in cls._instances:
            return cls._instances[strategy_type]

        if strategy_type == ShortCodeStrategyType.RANDOM:
            instance = RandomShortCodeStrategy(
                length=settings.short_code_length,
                max_attempts=settings.short_code_max_attempts,
                fallback=TimestampShortCodeStrategy(length=settings.short_code_length)
            )
        elif strategy_type == ShortCodeStrategyType.TIMESTAMP:
            instance = TimestampShortCodeStrategy(length=settings.short_code_length)
        else:
            raise ValueError(f"Unknown strategy type: {strategy_type}")

        cls._instances[strategy_type] = instance
        return instance


def generate_short_code(
    custom_code: Optional[str],
    existing_codes: AbstractSet[str],
    strategy: Optional[ShortCodeStrategy] = None
) -> str:
    """
    Pick the shortcode for a new record.

    A custom code is accepted as-is or rejected, never adjusted.
    Without one, the strategy (settings default if None) generates a code.

    Raises:
        InvalidShortcodeError: Custom code has the wrong shape or is taken
        ShortcodeExhaustedError: Generation found no free code
    """
    if custom_code:
        return validate_custom_code(custom_code, existing_codes)
    return (strategy or ShortCodeFactory.create_strategy()).generate(existing_codes)
