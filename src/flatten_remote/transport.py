from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Protocol, Self

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from flatten_remote.config import DEFAULT_TIMEOUT
from flatten_remote.exceptions import TransportError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

MIN_STATUS = 100
MAX_STATUS = 599

class TransportResponse(BaseModel):
    """Transport-agnostic HTTP response.

    Attributes:
        status: HTTP status code.
        reason: Reason phrase ("Not Found"), may be empty.
        headers: Response headers, keys lowercased.
        body: Raw response body.
    """

    model_config = ConfigDict(frozen=True)

    status: int = Field(..., ge=MIN_STATUS, le=MAX_STATUS)
    reason: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes = b""

    @field_validator("headers")
    @classmethod
    def _lower_header_names(cls, value: dict[str, str]) -> dict[str, str]:
        return {k.lower(): v for k, v in value.items()}

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300  # noqa: PLR2004

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.lower(), default)

    def json_body(self) -> Any:  # noqa: ANN401
        """Decode the body as JSON.

        Raises:
            ValueError: if the body is not valid JSON.
        """
        return json.loads(self.body)


class Transport(Protocol):
    """Anything able to perform a GET request and hand back a response.

    Implementations raise `TransportError` when no response could be obtained
    (timeout, DNS, connection reset, unencodable headers, a status outside
    100..599). HTTP error statuses are *not* raised, they come back as a
    normal response.
    """

    def fetch(self, url: str, headers: Mapping[str, str]) -> TransportResponse: ...


class HttpxTransport:
    """`Transport` backed by a synchronous `httpx.Client`.

    Use it as a context manager so that the connection pool is released at the
    end of an export.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    def fetch(self, url: str, headers: Mapping[str, str]) -> TransportResponse:
        try:
            response = self._client.get(url, headers=dict(headers))
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as e:
            # header values must be ASCII; a non-ASCII token fails while building the request
            raise TransportError(url=url, message=f"{type(e).__name__}: {e}") from e
        if not MIN_STATUS <= response.status_code <= MAX_STATUS:
            raise TransportError(url=url, message=f"invalid HTTP status {response.status_code}")
        return TransportResponse(
            status=response.status_code,
            reason=response.reason_phrase,
            headers=dict(response.headers.items()),
            body=response.content,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
