import httpx
import structlog
from urllib.parse import urlparse

logger = structlog.get_logger(__name__)

# Only network schemes; file:// and custom schemes would turn the bridge
# into a local resource reader.
ALLOWED_SCHEMES = ('http', 'https')


def validate_url(url: str) -> dict:
    if not url or not isinstance(url, str):
        logger.warning("invalid_url_format", url=url)
        return {
            "valid": False,
            "reason": "Empty or invalid URL"
        }

    try:
        parsed = urlparse(url)
        # raises ValueError for a non-numeric or out of range port
        parsed.port
    except ValueError as e:
        logger.warning("malformed_url",
                       url=url,
                       error=str(e))
        return {
            "valid": False,
            "reason": f"Malformed URL: {e}"
        }

    if not parsed.scheme:
        logger.warning("malformed_url",
                       url=url,
                       error="no scheme")
        return {
            "valid": False,
            "reason": "Malformed URL: no scheme"
        }

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        logger.warning("invalid_url_scheme",
                       url=url,
                       scheme=parsed.scheme)
        return {
            "valid": False,
            "reason": f"Invalid scheme: {parsed.scheme}"
        }

    if not parsed.hostname:
        logger.warning("malformed_url",
                       url=url,
                       error="no host")
        return {
            "valid": False,
            "reason": "Malformed URL: no host"
        }

    try:
        httpx.URL(url)
    except httpx.InvalidURL as e:
        logger.warning("malformed_url",
                       url=url,
                       error=str(e))
        return {
            "valid": False,
            "reason": f"Malformed URL: {e}"
        }

    return {
        "valid": True,
        "reason": "Valid URL"
    }
