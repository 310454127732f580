"""
Validation for link submissions.

All checks are purely syntactic: no network reachability test is made.
Batch validation accumulates every error instead of stopping at the first.
"""

import re
from collections import Counter
from typing import AbstractSet, List, Optional, Sequence, Union

from pydantic import BaseModel, HttpUrl, TypeAdapter, ValidationError

from shortlink_app.config import settings
from shortlink_app.schemas.link import LinkEntry
from shortlink_app.services.exceptions import (
    BatchValidationError,
    ErrorKind,
    FieldError,
    InvalidShortcodeError,
    ShortcodeRejection,
)

SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")
SHORTCODE_RE = re.compile(r"^[A-Za-z0-9]+$")
INTEGER_RE = re.compile(r"^[+-]?\d+$")
# Whitespace or control characters anywhere inside the URL
UNSAFE_CHARS_RE = re.compile(r"[\s\x00-\x1f\x7f]")

_http_url = TypeAdapter(HttpUrl)


class ValidatedEntry(BaseModel):
    """A batch entry that passed every check, ready to become a record"""
    index: int
    long_url: str
    validity_minutes: int
    custom_code: Optional[str] = None


def normalize_url(raw: str) -> str:
    """Trim and prepend https:// when the input has no scheme"""
    url = raw.strip()
    if url and not SCHEME_RE.match(url):
        url = f"https://{url}"
    return url


def is_valid_url(raw: str) -> bool:
    """
    Check that a (normalized) URL is an absolute http/https URL whose host
    is at least 4 characters long and contains a dot.
    """
    if not raw or not raw.strip():
        return False

    url = normalize_url(raw)
    # The URL parser silently drops tabs and newlines; the stored URL must not carry them
    if UNSAFE_CHARS_RE.search(url):
        return False

    try:
        parsed = _http_url.validate_python(url)
    except ValidationError:
        return False

    if parsed.scheme not in ("http", "https"):
        return False

    host = parsed.host or ""
    return len(host) >= 4 and "." in host


def to_ascii_url(url: str) -> str:
    """
    ASCII form of a stored URL, for HTTP headers.

    IDN hosts become punycode and non-ASCII path/query characters are
    percent-encoded.
    """
    return str(_http_url.validate_python(url))


def check_custom_code(
    code: str,
    existing_codes: AbstractSet[str] = frozenset()
) -> Optional[ShortcodeRejection]:
    """Return why a custom shortcode is unacceptable, or None if it is fine"""
    if len(code) < settings.custom_code_min_length:
        return ShortcodeRejection.TOO_SHORT
    if len(code) > settings.custom_code_max_length:
        return ShortcodeRejection.TOO_LONG
    if not SHORTCODE_RE.match(code):
        return ShortcodeRejection.BAD_CHARS
    if code in existing_codes:
        return ShortcodeRejection.DUPLICATE
    return None


def validate_custom_code(code: str, existing_codes: AbstractSet[str] = frozenset()) -> str:
    """Return the code unchanged or raise InvalidShortcodeError; never coerces"""
    rejection = check_custom_code(code, existing_codes)
    if rejection is not None:
        raise InvalidShortcodeError(code, rejection)
    return code


def parse_validity(value: Union[int, str, None]) -> Optional[int]:
    """
    Parse a validity value as submitted by a form.

    Returns None when the value is absent (None or blank string).

    Signed values are parsed so that e.g. "-5" is reported as out of range.

    Raises:
        ValueError: If the value is not a whole number
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("validity must be a whole number of minutes")
    if isinstance(value, int):
        return value

    text = str(value).strip()
    if not text:
        return None
    if not INTEGER_RE.match(text):
        raise ValueError("validity must be a whole number of minutes")
    return int(text)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def validate_batch(entries: Sequence[LinkEntry]) -> List[ValidatedEntry]:
    """
    Validate a whole submission.

    Raises:
        BatchValidationError: carrying every problem found, if any
    """
    errors: List[FieldError] = []

    if not entries or len(entries) > settings.max_batch_size:
        raise BatchValidationError([
            FieldError(
                field="urls",
                kind=ErrorKind.INVALID_BATCH,
                message=f"Submit between 1 and {settings.max_batch_size} URLs at once",
            )
        ])

    validated = []
    for index, entry in enumerate(entries):
        long_url = None
        if _blank(entry.long_url):
            errors.append(FieldError(
                entry=index, field="longURL", kind=ErrorKind.INVALID_URL,
                message="URL is required",
            ))
        elif not is_valid_url(entry.long_url):
            errors.append(FieldError(
                entry=index, field="longURL", kind=ErrorKind.INVALID_URL,
                message="Please enter a valid URL",
            ))
        else:
            long_url = normalize_url(entry.long_url)

        validity = settings.default_validity_minutes
        try:
            parsed_validity = parse_validity(entry.validity)
        except ValueError:
            errors.append(FieldError(
                entry=index, field="validity", kind=ErrorKind.INVALID_VALIDITY,
                reason="not_integer",
                message=f"Validity must be between 1 and {settings.max_validity_minutes} minutes",
            ))
        else:
            if parsed_validity is not None:
                if not 1 <= parsed_validity <= settings.max_validity_minutes:
                    errors.append(FieldError(
                        entry=index, field="validity", kind=ErrorKind.INVALID_VALIDITY,
                        reason="range",
                        message=f"Validity must be between 1 and {settings.max_validity_minutes} minutes",
                    ))
                else:
                    validity = parsed_validity

        custom_code = None if _blank(entry.shortcode) else entry.shortcode
        if custom_code is not None:
            rejection = check_custom_code(custom_code)
            if rejection is not None:
                errors.append(FieldError(
                    entry=index, field="shortcode", kind=ErrorKind.INVALID_SHORTCODE,
                    reason=rejection.value,
                    message=InvalidShortcodeError.MESSAGES[rejection],
                ))

        if long_url is not None:
            validated.append(ValidatedEntry(
                index=index,
                long_url=long_url,
                validity_minutes=validity,
                custom_code=custom_code,
            ))

    # Shortcodes are compared case-sensitively
    code_counts = Counter(
        entry.shortcode for entry in entries if not _blank(entry.shortcode)
    )
    url_counts = Counter(
        normalize_url(entry.long_url).lower()
        for entry in entries if not _blank(entry.long_url)
    )
    for index, entry in enumerate(entries):
        if not _blank(entry.shortcode) and code_counts[entry.shortcode] > 1:
            errors.append(FieldError(
                entry=index, field="shortcode", kind=ErrorKind.INVALID_SHORTCODE,
                reason=ShortcodeRejection.DUPLICATE.value,
                message="Duplicate shortcode - must be unique",
            ))
        if not _blank(entry.long_url) and url_counts[normalize_url(entry.long_url).lower()] > 1:
            errors.append(FieldError(
                entry=index, field="longURL", kind=ErrorKind.DUPLICATE_URL_IN_BATCH,
                message="Duplicate URL - each URL must be unique",
            ))

    if errors:
        raise BatchValidationError(errors)

    return validated
