"""
Interfaces for version sources, suppression state and HTTP transport.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

from .versioning import SemVer


class VersionSource(Protocol):
    """Provide a single version reading, possibly over the network."""

    name: str

    def version(self) -> SemVer:
        ...


class SuppressionStore(Protocol):
    """Persist the "hide until the package feed exceeds" threshold."""

    def get(self) -> Optional[SemVer]:
        ...

    def set(self, version: SemVer) -> None:
        ...


class Transport(Protocol):
    """The subset of ``requests.Session`` the rate-limited client relies on."""

    def prepare_request(self, request: Any) -> Any:
        ...

    def send(self, request: Any, **kwargs: Any) -> Any:
        ...

    def merge_environment_settings(
        self, url: Any, proxies: Any, stream: Any, verify: Any, cert: Any
    ) -> Dict[str, Any]:
        ...
