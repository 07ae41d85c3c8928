"""
Error taxonomy for version lookups, the rate-limited client and local state.
"""

from __future__ import annotations

from typing import Optional


class MenubarVersionError(Exception):
    """Base class for every error surfaced to the top of a run."""


class ParseError(MenubarVersionError):
    """Malformed data: never retried."""


class InvalidVersion(ParseError):
    pass


class ReleaseTagError(ParseError):
    pass


class HeaderParseError(ParseError):
    """A Retry-After or rate-limit reset header that is not an integer."""

    def __init__(self, header: str, value: str) -> None:
        super().__init__(f"malformed {header} header: {value!r}")
        self.header = header
        self.value = value


class TransportError(MenubarVersionError):
    """Network-level failure (DNS, connection reset, timeout)."""

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url


class HardFailure(MenubarVersionError):
    """A non-success HTTP status that will not be retried."""

    def __init__(self, status: int, body: str, url: Optional[str] = None) -> None:
        super().__init__(f"HTTP {status} from {url or 'server'}: {body[:200]}")
        self.status = status
        self.body = body
        self.url = url


class ThrottlingExhausted(HardFailure):
    """Still throttled after the exponential backoff reached its ceiling."""


class UncloneableRequest(MenubarVersionError):
    """The request body cannot be replayed, so it can never be retried."""


class MissingData(MenubarVersionError):
    """A source answered but has nothing to report."""


class NoReleasesError(MissingData):
    def __init__(self, repo: str) -> None:
        super().__init__(f"no GitHub releases for {repo}")
        self.repo = repo


class ConfigError(MenubarVersionError):
    pass


class StoreError(MenubarVersionError):
    pass


class BuildInfoError(MenubarVersionError):
    pass
