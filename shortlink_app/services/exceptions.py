"""
Domain errors for the short link service.

Validation errors are recoverable: they carry per-field details and the
caller may resubmit. Exhaustion and store errors abort only the current
operation and never leave a partially applied batch behind.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class ErrorKind(str, Enum):
    INVALID_URL = "invalid_url"
    INVALID_SHORTCODE = "invalid_shortcode"
    INVALID_VALIDITY = "invalid_validity"
    DUPLICATE_URL_IN_BATCH = "duplicate_url_in_batch"
    INVALID_BATCH = "invalid_batch"


class ShortcodeRejection(str, Enum):
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    BAD_CHARS = "bad_chars"
    DUPLICATE = "duplicate"


class FieldError(BaseModel):
    """One problem with one field of one batch entry (entry is None for batch-level errors)"""
    entry: Optional[int] = None
    field: str
    kind: ErrorKind
    reason: Optional[str] = None
    message: str


class ShortLinkError(Exception):
    """Base class for all short link errors"""


class InvalidShortcodeError(ShortLinkError):
    """Raised when a custom shortcode is rejected"""

    MESSAGES = {
        ShortcodeRejection.TOO_SHORT: "Shortcode must be 4-10 characters",
        ShortcodeRejection.TOO_LONG: "Shortcode must be 4-10 characters",
        ShortcodeRejection.BAD_CHARS: "Shortcode can only contain letters and numbers",
        ShortcodeRejection.DUPLICATE: "Shortcode is already in use",
    }

    def __init__(self, shortcode: str, reason: ShortcodeRejection):
        self.shortcode = shortcode
        self.reason = reason
        super().__init__(f"Shortcode {shortcode!r} rejected: {reason.value}")

    @property
    def message(self) -> str:
        return self.MESSAGES[self.reason]


class BatchValidationError(ShortLinkError):
    """Raised when a submitted batch has one or more invalid fields"""

    def __init__(self, errors: List[FieldError]):
        self.errors = errors
        super().__init__(f"Batch rejected with {len(errors)} error(s)")


class ShortcodeExhaustedError(ShortLinkError):
    """Raised when random generation and the time-derived fallback both collided"""


class StoreError(ShortLinkError):
    """Raised when the link table cannot be read or written"""


class LinkNotFoundError(ShortLinkError):
    """Raised when a shortcode does not exist"""

    def __init__(self, shortcode: str):
        self.shortcode = shortcode
        super().__init__(f"Shortcode {shortcode!r} not found")


class LinkExpiredError(ShortLinkError):
    """Raised when a shortcode exists but its validity window has passed"""

    def __init__(self, shortcode: str):
        self.shortcode = shortcode
        super().__init__(f"Shortcode {shortcode!r} has expired")
