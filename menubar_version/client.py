"""
HTTP client that absorbs rate limiting from the GitHub API.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional

import requests
from requests.structures import CaseInsensitiveDict

from .errors import (
    HardFailure,
    HeaderParseError,
    ParseError,
    ThrottlingExhausted,
    TransportError,
    UncloneableRequest,
)
from .interfaces import Transport
from .models import NoHint, RateLimitSignal, ResetAt, RetryAfter, RetryState


logger = logging.getLogger(__name__)

THROTTLING_STATUSES = frozenset({403, 429})
INITIAL_BACKOFF = 60.0
MAX_BACKOFF = 3600.0


def _parse_int_header(name: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        raise HeaderParseError(name, value) from None


def rate_limit_signal(headers: Mapping[str, str]) -> RateLimitSignal:
    """Classify the timing hint carried by a throttled response.

    ``Retry-After`` wins over the ``x-ratelimit-*`` pair. A remaining count
    of ``0`` without a reset header carries no usable hint.
    """
    headers = CaseInsensitiveDict(headers)
    retry_after = headers.get("Retry-After")
    if retry_after is not None:
        return RetryAfter(seconds=max(0, _parse_int_header("Retry-After", retry_after)))

    remaining = headers.get("x-ratelimit-remaining")
    reset = headers.get("x-ratelimit-reset")
    if remaining is not None and remaining.strip() == "0" and reset is not None:
        return ResetAt(epoch_seconds=_parse_int_header("x-ratelimit-reset", reset))

    return NoHint()


def _is_replayable(prepared: requests.PreparedRequest) -> bool:
    return prepared.body is None or isinstance(prepared.body, (bytes, str))


class RateLimitedClient:
    """Perform one logical request, waiting out 403/429 throttling.

    Explicit server hints (``Retry-After``, ``x-ratelimit-reset``) are waited
    out exactly and leave the backoff untouched. Without a hint the wait
    starts at ``initial_backoff`` and doubles; once it would reach
    ``max_backoff`` the throttled response is raised as
    :class:`ThrottlingExhausted` instead of sleeping.
    """

    def __init__(
        self,
        session: Optional[Transport] = None,
        timeout: float = 30.0,
        initial_backoff: float = INITIAL_BACKOFF,
        max_backoff: float = MAX_BACKOFF,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.initial_backoff = initial_backoff
        self.max_backoff = max_backoff
        self.sleep = sleep
        self.clock = clock

    def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> requests.Response:
        prepared = self.session.prepare_request(
            requests.Request(method, url, headers=headers, **kwargs)
        )
        if not _is_replayable(prepared):
            raise UncloneableRequest(f"cannot replay {method} {url}: request body is a stream")
        # Proxy and CA bundle settings from the environment, as Session.request applies them.
        settings = self.session.merge_environment_settings(prepared.url, {}, None, None, None)

        state = RetryState(backoff=self.initial_backoff, ceiling=self.max_backoff)
        while True:
            state.attempts += 1
            response = self._attempt(prepared, url, settings)
            if response.status_code not in THROTTLING_STATUSES:
                if not response.ok:
                    raise HardFailure(response.status_code, response.text, url)
                logger.debug("%s %s succeeded after %d attempt(s)", method, url, state.attempts)
                return response
            self._wait(response, state, url)

    def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> requests.Response:
        return self.request("GET", url, headers=headers)

    def get_json(self, url: str, headers: Optional[Dict[str, str]] = None) -> Any:
        response = self.get(url, headers=headers)
        try:
            return response.json()
        except ValueError as e:
            raise ParseError(f"invalid JSON from {url}: {e}") from e

    def _attempt(
        self, prepared: requests.PreparedRequest, url: str, settings: Dict[str, Any]
    ) -> requests.Response:
        try:
            return self.session.send(prepared.copy(), timeout=self.timeout, **settings)
        except requests.RequestException as e:
            raise TransportError(f"request to {url} failed: {e}", url=url) from e

    def _wait(self, response: requests.Response, state: RetryState, url: str) -> None:
        signal = rate_limit_signal(response.headers)
        if isinstance(signal, RetryAfter):
            delay = float(signal.seconds)
            logger.warning("Throttled by %s, retrying after %ss as requested", url, delay)
        elif isinstance(signal, ResetAt):
            delay = max(0.0, signal.epoch_seconds - self.clock())
            logger.warning("Rate limit for %s exhausted, waiting %.0fs for reset", url, delay)
        else:
            if state.exhausted:
                logger.warning(
                    "Still throttled by %s after %d attempt(s), giving up",
                    url,
                    state.attempts,
                )
                raise ThrottlingExhausted(response.status_code, response.text, url)
            delay = state.advance()
            logger.warning("Throttled by %s without a timing hint, backing off %.0fs", url, delay)
        self.sleep(delay)
