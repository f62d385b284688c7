"""HTTP client core: authentication, retries, rate limiting and response types."""

from __future__ import annotations

import json
import logging
import math
import re
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import IntFlag
from typing import Any, Callable, Mapping
from urllib.parse import urlsplit

import requests
from requests.structures import CaseInsensitiveDict

API_URL = "https://api.cloudflare.com/client/v4"

ERR_EMPTY_CREDENTIALS = "invalid credentials: key & email must not be empty"
ERR_EMPTY_API_TOKEN = "invalid credentials: API Token must not be empty"

_SERVICE_FAILURE_CODES = frozenset({502, 503, 504, 522, 523, 524})


class AuthType(IntFlag):
    """Authentication schemes; they may be combined."""

    KEY_EMAIL = 1
    USER_SERVICE = 2
    TOKEN = 4


class APIError(Exception):
    """Raised when a request to the API fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class ResponseInfo:
    """A code and message returned by the API as an error or notice."""

    code: int = 0
    message: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ResponseInfo":
        if isinstance(data, Mapping):
            return cls(code=int(data.get("code") or 0), message=data.get("message") or "")
        return cls(message=str(data))


@dataclass
class Response:
    """The envelope shared by every API response."""

    success: bool = False
    errors: list[ResponseInfo] = field(default_factory=list)
    messages: list[ResponseInfo] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "Response":
        data = data or {}
        return cls(
            success=bool(data.get("success", False)),
            errors=[ResponseInfo.from_dict(e) for e in data.get("errors") or []],
            messages=[ResponseInfo.from_dict(m) for m in data.get("messages") or []],
        )


@dataclass
class ResultInfo:
    """Paging metadata attached to list responses."""

    page: int = 0
    per_page: int = 0
    total_pages: int = 0
    count: int = 0
    total: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "ResultInfo":
        data = data or {}
        return cls(
            page=int(data.get("page") or 0),
            per_page=int(data.get("per_page") or 0),
            total_pages=int(data.get("total_pages") or 0),
            count=int(data.get("count") or 0),
            total=int(data.get("total_count") or 0),
        )


@dataclass
class PaginationOptions:
    """Paging for list requests; zero values are left to the server."""

    page: int = 0
    per_page: int = 0

    def to_params(self) -> dict[str, str]:
        """Query parameters for the options that are set."""
        params: dict[str, str] = {}
        if self.per_page > 0:
            params["per_page"] = str(self.per_page)
        if self.page > 0:
            params["page"] = str(self.page)
        return params


@dataclass
class RetryPolicy:
    """How many times to retry a failed request and how long to back off (seconds)."""

    max_retries: int = 3
    min_retry_delay: float = 1.0
    max_retry_delay: float = 30.0


class RateLimiter:
    """Token bucket allowing ``rate`` events per second with bursts of ``burst``."""

    def __init__(self, rate: float, burst: int = 1) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive")
        if burst < 1:
            raise ValueError("burst must be at least 1")
        self.rate = float(rate)
        self.burst = burst
        self._tokens = float(burst)
        self._last = time.monotonic()
        self._lock = threading.Lock()

    def wait(self) -> None:
        """Block until an event is allowed."""
        if math.isinf(self.rate):
            return
        with self._lock:
            now = time.monotonic()
            elapsed = max(0.0, now - self._last)
            self._tokens = min(float(self.burst), self._tokens + elapsed * self.rate)
            self._last = now
            self._tokens -= 1
            delay = -self._tokens / self.rate if self._tokens < 0 else 0.0
        if delay > 0:
            time.sleep(delay)


class API:
    """Configuration and transport for talking to the v4 API."""

    def __init__(
        self,
        *,
        base_url: str = API_URL,
        headers: Mapping[str, str] | None = None,
        rate_limit: float = 4.0,
        retry_policy: RetryPolicy | None = None,
        organization_id: str = "",
        user_agent: str = "",
        logger: logging.Logger | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = ""
        self.api_email = ""
        self.api_user_service_key = ""
        self.api_token = ""
        self.base_url = base_url
        self.organization_id = organization_id
        self.user_agent = user_agent
        self.headers: dict[str, str] = dict(headers or {})
        self.auth_type = AuthType(0)
        self.rate_limiter = RateLimiter(rate_limit, 1)
        self.retry_policy = retry_policy if retry_policy is not None else RetryPolicy()
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.session = session if session is not None else requests.Session()

    def set_auth_type(self, auth_type: int) -> None:
        """Choose which credentials are sent with each request."""
        self.auth_type = AuthType(auth_type)

    def user_base_url(self, account_base: str) -> str:
        """The account URL when an organization is set, otherwise ``account_base``."""
        if self.organization_id:
            return "/accounts/" + self.organization_id
        return account_base

    def make_request(
        self,
        method: str,
        uri: str,
        params: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> bytes:
        """Send a request, retrying on failure, and return the response body."""
        body = _encode_body(params)
        policy = self.retry_policy
        resp: requests.Response | None = None
        resp_err: APIError | None = None
        resp_body = b""

        for attempt in range(policy.max_retries + 1):
            if attempt > 0:
                delay = min(2 ** (attempt - 1) * policy.min_retry_delay, policy.max_retry_delay)
                self.logger.info(
                    "Sleeping %ss before retry attempt number %d for request %s %s",
                    delay, attempt, method, uri,
                )
                time.sleep(delay)
            self.rate_limiter.wait()
            try:
                resp = self._send(method, uri, body, headers)
            except requests.RequestException as exc:
                resp_err = APIError(f"HTTP request failed: {exc}")
                self.logger.info("Error performing request: %s %s : %s", method, uri, resp_err)
                continue
            resp_err = None
            resp_body = resp.content
            if resp.status_code == 429 or resp.status_code >= 500:
                text = resp_body.decode("utf-8", "replace").replace("\n", "").replace("\t", "")
                self.logger.info(
                    "Request: %s %s got an error response %d: %s",
                    method, uri, resp.status_code, text,
                )
                continue
            break

        if resp_err is not None:
            raise resp_err
        assert resp is not None

        status = resp.status_code
        if 200 <= status < 300:
            return resp_body
        if status == 401:
            raise APIError(f"HTTP status {status}: invalid credentials", status)
        if status == 403:
            raise APIError(f"HTTP status {status}: insufficient permissions", status)
        if status in _SERVICE_FAILURE_CODES:
            raise APIError(f"HTTP status {status}: service failure", status)
        text = resp_body.decode("utf-8", "replace")
        if status == 400 and urlsplit(self.base_url + uri).path.endswith("/filters/validate-expr"):
            raise APIError(text, status)
        raise APIError(f"HTTP status {status}: content {json.dumps(text)}", status)

    def raw(self, method: str, endpoint: str, data: Any = None) -> Any:
        """Send a request and return the decoded ``result`` member untouched."""
        res = self.make_request(method, endpoint, data)
        try:
            decoded = json.loads(res)
        except ValueError as exc:
            raise APIError(f"could not decode response: {exc}") from exc
        if not isinstance(decoded, Mapping):
            raise APIError("could not decode response: not a JSON object")
        return decoded.get("result")

    def _send(
        self,
        method: str,
        uri: str,
        body: bytes | None,
        headers: Mapping[str, str] | None,
    ) -> requests.Response:
        combined: CaseInsensitiveDict = CaseInsensitiveDict(self.headers)
        combined.update(headers or {})
        if self.auth_type & AuthType.KEY_EMAIL:
            combined["X-Auth-Key"] = self.api_key
            combined["X-Auth-Email"] = self.api_email
        if self.auth_type & AuthType.USER_SERVICE:
            combined["X-Auth-User-Service-Key"] = self.api_user_service_key
        if self.auth_type & AuthType.TOKEN:
            combined["Authorization"] = "Bearer " + self.api_token
        if self.user_agent:
            combined["User-Agent"] = self.user_agent
        if not combined.get("Content-Type"):
            combined["Content-Type"] = "application/json"
        return self.session.request(method, self.base_url + uri, data=body, headers=dict(combined))


def _encode_body(params: Any) -> bytes | None:
    if params is None:
        return None
    if isinstance(params, (bytes, bytearray)):
        return bytes(params)
    to_dict = getattr(params, "to_dict", None)
    if callable(to_dict):
        params = to_dict()
    try:
        return json.dumps(params).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise APIError(f"error marshalling params to JSON: {exc}") from exc


def new(key: str, email: str, **kwargs: Any) -> API:
    """Client authenticating with an API key and e-mail address."""
    if not key or not email:
        raise ValueError(ERR_EMPTY_CREDENTIALS)
    api = API(**kwargs)
    api.api_key = key
    api.api_email = email
    api.auth_type = AuthType.KEY_EMAIL
    return api


def new_with_api_token(token: str, **kwargs: Any) -> API:
    """Client authenticating with an API token."""
    if not token:
        raise ValueError(ERR_EMPTY_API_TOKEN)
    api = API(**kwargs)
    api.api_token = token
    api.auth_type = AuthType.TOKEN
    return api


def new_with_user_service_key(key: str, **kwargs: Any) -> API:
    """Client authenticating with a user-service key."""
    if not key:
        raise ValueError(ERR_EMPTY_CREDENTIALS)
    api = API(**kwargs)
    api.api_user_service_key = key
    api.auth_type = AuthType.USER_SERVICE
    return api


def with_zone_filter(zone: str) -> Callable[[dict[str, str]], None]:
    """Request option filtering by zone name."""

    def apply(params: dict[str, str]) -> None:
        params["name"] = zone

    return apply


def with_pagination(opts: PaginationOptions) -> Callable[[dict[str, str]], None]:
    """Request option setting the page and page size."""

    def apply(params: dict[str, str]) -> None:
        params["page"] = str(opts.page)
        params["per_page"] = str(opts.per_page)

    return apply


_TIMESTAMP_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})$"
)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp; fractions beyond microseconds are truncated."""
    if not value:
        return None
    match = _TIMESTAMP_RE.match(value)
    if match is None:
        raise ValueError(f"invalid timestamp: {value!r}")
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    micros = int((fraction or "0")[:6].ljust(6, "0"))
    if zone in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        offset = timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6]))
        tz = timezone(sign * offset)
    return datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), micros, tzinfo=tz
    )


def format_timestamp(value: datetime | None) -> str | None:
    """Format a datetime as RFC 3339; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"