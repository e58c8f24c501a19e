"""HTTP client abstraction for registry checks.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Scripted implementation for testing
"""

from __future__ import annotations

import ssl
import urllib.error
import urllib.request
from collections import deque
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from pubmirror import __version__
from pubmirror.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """Network-level failure (no HTTP status was received).

    Attributes:
        url: The URL that failed
        message: Human-readable error message
    """

    url: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations."""

    def head(self, url: str) -> Result[int, HttpError]:
        """Send a HEAD request.

        Returns:
            Ok with the response status (including 4xx/5xx), or Err with
            HttpError when no response was received at all.
        """
        ...


class RealHttpClient:
    """HTTP client using urllib with system certificates."""

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = f"pubmirror/{__version__}",
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def head(self, url: str) -> Result[int, HttpError]:
        try:
            req = urllib.request.Request(
                url, method="HEAD", headers={"User-Agent": self.user_agent}
            )
            context = self._ssl_context if url.startswith("https:") else None
            with urllib.request.urlopen(req, timeout=self.timeout, context=context) as response:
                return Ok(int(response.status))
        except urllib.error.HTTPError as e:
            return Ok(int(e.code))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, message=str(e)))


class MockHttpClient:
    """Scripted HTTP client for tests.

    Responses are queued per URL and consumed in order; once a URL's queue is
    down to its last response, that response repeats. Unknown URLs answer 404.

    Usage:
        http = MockHttpClient()
        http.queue(url, 404, 404, 200)
    """

    def __init__(self) -> None:
        self._responses: dict[str, deque[int | HttpError]] = {}
        self.calls: list[tuple[str, str]] = []

    def queue(self, url: str, *responses: int | HttpError) -> None:
        self._responses.setdefault(url, deque()).extend(responses)

    def head(self, url: str) -> Result[int, HttpError]:
        self.calls.append(("head", url))
        pending = self._responses.get(url)
        if not pending:
            return Ok(404)
        response = pending.popleft() if len(pending) > 1 else pending[0]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)
