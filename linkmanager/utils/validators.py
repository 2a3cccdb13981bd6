from typing import Optional
from urllib.parse import urlparse

MAX_URL_LENGTH = 2048


def is_valid_url(url: Optional[str]) -> tuple[bool, str]:
    """
    Validate that a URL can be saved and fetched.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not url.strip():
        return False, "URL is required"

    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    try:
        result = urlparse(url)

        # Must have scheme and host
        if not all([result.scheme, result.hostname]):
            return False, "Invalid URL"

        # Only http and https
        if result.scheme not in ['http', 'https']:
            return False, "Only HTTP and HTTPS URLs are allowed"

        return True, ""

    except ValueError as e:
        return False, f"Invalid URL: {str(e)}"


def parse_domain(url: str) -> str:
    """Host component of a URL, lower-cased and without port"""
    return urlparse(url).hostname or ""
