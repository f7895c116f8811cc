"""
Script-facing request function built on top of the bridge.

Mirrors what the runtime's `https.request(url, options)` does: fill in the
defaults, drive an HTTPRequestBridge through its boundary calls only, and
rebuild the header table from the interleaved sequence.
"""

from typing import Any, Dict, Optional, Tuple, Union

import structlog

from .fetcher import HTTPRequestBridge
from .headers import deinterleave

logger = structlog.get_logger(__name__)

VALID_METHODS = ('GET', 'HEAD', 'POST', 'PUT', 'DELETE', 'PATCH')
FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'


def _check_method(method: Optional[str], default: str) -> str:
    if method is None:
        return default

    method = method.upper()
    if method not in VALID_METHODS:
        raise ValueError(
            'expected one of "get", "head", "post", "put", "delete", or "patch"'
        )
    return method


def _check_string(value: Any, what: str) -> str:
    # numbers are accepted and converted, like the runtime's string check
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ValueError(f"{what} must be a string, got {type(value).__name__}")


def request(
    url: str,
    options: Optional[Dict[str, Any]] = None,
    bridge: Optional[HTTPRequestBridge] = None,
) -> Union[Tuple[Optional[int], Union[bytes, str]], Tuple[int, bytes, Dict[str, str]]]:
    """Perform a request the way scripts call it.

    Returns (status, body) when called without options and
    (status, body, headers) with options. A failed request returns
    (None, error message).
    """
    if bridge is None:
        bridge = HTTPRequestBridge()
    else:
        bridge.reset()

    advanced = options is not None
    headers: Dict[str, str] = {}
    method = 'GET'
    data = None

    if advanced:
        default_method = 'GET'
        data = options.get('data')
        if data is not None:
            if not isinstance(data, bytes):
                data = _check_string(data, "data").encode('utf-8')
            headers['Content-Type'] = FORM_CONTENT_TYPE
            default_method = 'POST'

        method = _check_method(options.get('method'), default_method)
        for key, value in (options.get('headers') or {}).items():
            headers[_check_string(key, "header name")] = _check_string(value, "header value")

    bridge.setUrl(url)
    bridge.setMethod(method)
    if data:
        bridge.setPostData(data)
    for key, value in headers.items():
        bridge.addHeader(key, value)

    if not bridge.request():
        error = bridge.last_error
        message = str(error) if error is not None else "Request failed"
        logger.info("script_request_failed", url=url, method=method, error=message)
        return None, message

    status = bridge.getResponseCode()
    body = bridge.getResponse() or b''

    if advanced:
        return status, body, deinterleave(bridge.getInterleavedHeaders())
    return status, body
