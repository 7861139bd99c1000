"""
Input Validators and Sanitizers

This module provides validation and sanitization functions for user inputs.

Rules:
- Long URLs must use http:// or https:// and carry at least one character
  after the scheme
- Short codes are lowercase ASCII letters only, so they never need escaping
  in a URL path
"""

import re
from typing import Optional

MAX_URL_LENGTH = 2048
MAX_SHORT_CODE_LENGTH = 20

SHORT_CODE_PATTERN = re.compile(r'^[a-z]+$')

# Each scheme must be followed by at least one character
URL_SCHEMES = ("http://", "https://")


def is_valid_url(url: str, max_length: int = MAX_URL_LENGTH) -> bool:
    """
    Check the shape of a long URL.

    The URL is trimmed of surrounding whitespace, then must start with
    http:// or https:// and have something after the scheme. A bare
    scheme ("http://", "https://") is rejected.

    Args:
        url: The URL to validate
        max_length: Maximum allowed length of the trimmed URL

    Returns:
        True if the URL is acceptable, False otherwise
    """
    if not url or not isinstance(url, str):
        return False

    url = url.strip()
    if not validate_url_length(url, max_length):
        return False

    for scheme in URL_SCHEMES:
        if url.startswith(scheme):
            return len(url) > len(scheme)

    return False


def validate_url_length(url: str, max_length: int = MAX_URL_LENGTH) -> bool:
    """
    Validate URL length to prevent DoS attacks.

    Args:
        url: The URL to validate
        max_length: Maximum allowed length (default: 2048 per RFC 7230)

    Returns:
        True if URL length is valid, False otherwise
    """
    return bool(url) and len(url) <= max_length


def sanitize_short_code(short_code: str) -> Optional[str]:
    """
    Sanitize and validate short code format.

    Short codes only contain lowercase letters [a-z].

    Args:
        short_code: The short code to sanitize

    Returns:
        Sanitized short code if valid, None otherwise
    """
    if not short_code or not isinstance(short_code, str):
        return None

    short_code = short_code.strip()

    if len(short_code) > MAX_SHORT_CODE_LENGTH:
        return None

    if not SHORT_CODE_PATTERN.match(short_code):
        return None

    return short_code
