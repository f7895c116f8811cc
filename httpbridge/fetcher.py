"""
Synchronous HTTP request bridge for the embedded scripting runtime.

One instance holds one request's configuration and the last response. The
runtime drives it through setters, calls request() and reads the results
back; headers come out interleaved because no map type crosses the boundary.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import httpx
import structlog

from .config import config
from .exceptions import (
    BridgeError,
    ConfigurationError,
    InvalidURLError,
    MethodError,
    TransportError,
)
from .headers import interleave, join_header_values
from .url_validator import validate_url

logger = structlog.get_logger(__name__)

BODYLESS_METHODS = ('GET', 'HEAD')


@dataclass(frozen=True)
class BridgeRequest:
    """Immutable description of a single request."""
    url: Optional[str]
    method: str = 'GET'
    body: Optional[bytes] = None
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def sends_body(self) -> bool:
        return self.body is not None and self.method not in BODYLESS_METHODS


class BridgeResponse:
    def __init__(
        self,
        url: str,
        status_code: int,
        body: bytes = b'',
        headers: Dict[str, str] = None,
        fetch_time: float = 0.0,
    ):
        """Initialize a BridgeResponse with the buffered HTTP response."""
        self.url = url
        self.status_code = status_code
        self.body = body
        self.headers = headers or {}
        self.fetch_time = fetch_time

    @property
    def is_error(self) -> bool:
        """True for 4xx/5xx responses. These are still completed requests."""
        return self.status_code >= 400

    @property
    def size(self) -> int:
        return len(self.body)

    def interleaved_headers(self) -> List[str]:
        return interleave(self.headers)


class HTTPRequestBridge:
    """Blocking HTTP(S) request object reused across requests via reset().

    Not thread-safe: callers must serialize request() on an instance.
    """

    def __init__(
        self,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: Optional[float] = None,
        follow_redirects: Optional[bool] = None,
        user_agent: Optional[str] = None,
        allowed_methods: Optional[List[str]] = None,
    ):
        bridge_config = config.bridge
        self.transport = transport
        self.timeout = timeout if timeout is not None else bridge_config.get('timeout')
        if follow_redirects is None:
            follow_redirects = bridge_config.get('follow_redirects', True)
        self.follow_redirects = follow_redirects
        self.user_agent = user_agent or bridge_config.get('user_agent')
        methods = allowed_methods or bridge_config.get('allowed_methods') or []
        self.allowed_methods = {m.upper() for m in methods}

        self.request_headers: Dict[str, str] = {}
        self.response_headers: Dict[str, str] = {}
        self.reset()

    def reset(self):
        """Return every field to its default so the instance can be reused."""
        self.url: Optional[str] = None
        self.method = 'GET'
        self.post_data: Optional[bytes] = None
        self.response: Optional[bytes] = None
        self.response_code = 0
        self.request_headers.clear()
        self.response_headers.clear()
        self.last_error: Optional[BridgeError] = None

    def set_url(self, url: str):
        self.url = url

    def set_method(self, method: str):
        self.method = method.upper()

    def set_post_data(self, post_data: bytes):
        self.post_data = post_data

    def add_header(self, key: str, value: str):
        # header names are case-insensitive; the newest spelling replaces older ones
        if key is not None:
            for existing in [k for k in self.request_headers if k is not None and k.lower() == key.lower()]:
                del self.request_headers[existing]
        self.request_headers[key] = value

    def get_response_code(self) -> int:
        return self.response_code

    def get_response(self) -> Optional[bytes]:
        return self.response

    def get_interleaved_headers(self) -> List[str]:
        return interleave(self.response_headers)

    def to_request(self) -> BridgeRequest:
        """Snapshot the current configuration as a request descriptor."""
        return BridgeRequest(
            url=self.url,
            method=self.method,
            body=self.post_data,
            headers=dict(self.request_headers),
        )

    def request(self) -> bool:
        """Perform the configured request.

        Returns False only for transport level failures (no URL, malformed
        URL, unsupported scheme, rejected method, connection or I/O errors).
        A 4xx/5xx answer is a successful call; inspect get_response_code().
        """
        self.last_error = None
        try:
            result = self.perform(self.to_request())
        except BridgeError as e:
            self.last_error = e
            logger.warning("request_failed",
                           url=self.url,
                           method=self.method,
                           error_type=type(e).__name__,
                           error=str(e))
            return False

        self.response_code = result.status_code
        self.response = result.body
        self.response_headers.clear()
        self.response_headers.update(result.headers)
        logger.info("request_completed",
                    url=result.url,
                    method=self.method,
                    status_code=result.status_code,
                    size=result.size,
                    fetch_time=round(result.fetch_time, 3))
        return True

    def perform(self, req: BridgeRequest) -> BridgeResponse:
        """Run one request and return its buffered response.

        Raises a BridgeError subclass on failure; never raises for HTTP
        error statuses.
        """
        if req.url is None:
            raise ConfigurationError("No URL set")

        check = validate_url(req.url)
        if not check['valid']:
            raise InvalidURLError(check['reason'], url=req.url)

        if req.method not in self.allowed_methods:
            raise MethodError(f"Unsupported method: {req.method}", url=req.url)

        headers = [
            (key, value) for key, value in req.headers.items()
            if key is not None and value is not None
        ]
        content = req.body if req.sends_body else None
        if req.body is not None and content is None:
            logger.debug("request_body_ignored", url=req.url, method=req.method)

        start_time = time.time()
        try:
            with self._new_client() as client:
                with client.stream(req.method, req.url, headers=headers, content=content) as response:
                    # status is known before the body is touched
                    status_code = response.status_code
                    if status_code >= 400:
                        logger.debug("reading_error_body", url=req.url, status_code=status_code)
                    body = response.read()
                    encoding = response.headers.encoding
                    response_headers = join_header_values(
                        (key.decode(encoding), value.decode(encoding))
                        for key, value in response.headers.raw
                    )
        except (httpx.UnsupportedProtocol, httpx.InvalidURL) as e:
            raise InvalidURLError(f"Invalid URL: {e}", url=req.url) from e
        except httpx.TimeoutException as e:
            logger.warning("request_timeout", url=req.url, timeout_seconds=self.timeout)
            raise TransportError(f"Timeout: {e}", url=req.url) from e
        except httpx.ConnectError as e:
            logger.warning("connection_error", url=req.url, error=str(e))
            raise TransportError(f"Connection error: {e}", url=req.url) from e
        except (httpx.HTTPError, httpx.StreamError, OSError) as e:
            logger.error("transport_error", url=req.url, error=str(e), exc_info=True)
            raise TransportError(f"Request failed: {e}", url=req.url) from e
        except (TypeError, ValueError) as e:
            # header names/values httpx cannot encode
            logger.warning("invalid_request", url=req.url, error=str(e))
            raise TransportError(f"Invalid request: {e}", url=req.url) from e

        return BridgeResponse(
            url=req.url,
            status_code=status_code,
            body=body,
            headers=response_headers,
            fetch_time=time.time() - start_time,
        )

    def _new_client(self) -> httpx.Client:
        kwargs = {'follow_redirects': self.follow_redirects}
        if self.timeout is not None:
            kwargs['timeout'] = httpx.Timeout(self.timeout)
        if self.user_agent:
            kwargs['headers'] = {'User-Agent': self.user_agent}
        if self.transport is not None:
            kwargs['transport'] = self.transport
        return httpx.Client(**kwargs)

    # Names used by the embedding runtime
    setUrl = set_url
    setMethod = set_method
    setPostData = set_post_data
    addHeader = add_header
    getResponseCode = get_response_code
    getResponse = get_response
    getInterleavedHeaders = get_interleaved_headers
