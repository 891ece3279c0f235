from urllib.parse import urlparse
from typing import Tuple

ALLOWED_SCHEMES = ("http", "https")


def validate_url(url: str) -> Tuple[bool, str, str]:
    """
    Check that a caller-supplied URL is an absolute http(s) URL with a host.

    Returns (is_valid, cleaned_url, error_message).
    """
    if not url or not url.strip():
        return False, "", "URL cannot be empty"

    cleaned = url.strip()

    try:
        parsed = urlparse(cleaned)
        # Accessing .port validates the port component
        parsed.port
    except ValueError as e:
        return False, cleaned, f"URL parsing error: {str(e)}"

    if parsed.scheme not in ALLOWED_SCHEMES:
        scheme = parsed.scheme or "none"
        return False, cleaned, f"Invalid URL scheme: {scheme} (must be http or https)"

    if not parsed.hostname:
        return False, cleaned, "Invalid URL format: missing domain"

    if any(ch.isspace() for ch in cleaned):
        return False, cleaned, "Invalid URL format: contains whitespace"

    return True, cleaned, ""
