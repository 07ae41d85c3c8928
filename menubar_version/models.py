"""
Core data models for version reconciliation and request retrying.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Mapping, Optional, Union

from .versioning import SemVer


class HostFlavor(enum.Enum):
    """The menu bar host application the plugin runs under."""

    SWIFTBAR = "swiftbar"
    BITBAR = "bitbar"

    @classmethod
    def detect(cls, environ: Mapping[str, str]) -> "HostFlavor":
        # SwiftBar exports SWIFTBAR=1 to its plugins, BitBar exports nothing.
        if environ.get("SWIFTBAR"):
            return cls.SWIFTBAR
        return cls.BITBAR

    @property
    def display_name(self) -> str:
        return {HostFlavor.SWIFTBAR: "SwiftBar", HostFlavor.BITBAR: "BitBar"}[self]

    @property
    def cask(self) -> str:
        return self.value

    @property
    def bundle_plist(self) -> str:
        return f"/Applications/{self.display_name}.app/Contents/Info.plist"

    @property
    def release_repo(self) -> Optional[str]:
        """``owner/name`` of the repo publishing releases, if it still does."""
        if self is HostFlavor.SWIFTBAR:
            return "swiftbar/SwiftBar"
        return None

    @property
    def pinned_latest(self) -> Optional[SemVer]:
        # BitBar is unmaintained; 1.10.1 is its final release.
        if self is HostFlavor.BITBAR:
            return SemVer(1, 10, 1)
        return None

    @property
    def release_page(self) -> str:
        if self is HostFlavor.SWIFTBAR:
            return "https://github.com/swiftbar/SwiftBar/releases/latest"
        return "https://github.com/matryer/BitBar/releases/latest"

    def __str__(self) -> str:
        return self.display_name


@dataclass(frozen=True)
class RetryAfter:
    """Server asked for an explicit wait in seconds."""

    seconds: float


@dataclass(frozen=True)
class ResetAt:
    """Quota is exhausted until an absolute epoch timestamp."""

    epoch_seconds: float


@dataclass(frozen=True)
class NoHint:
    """Throttled without any usable timing header."""


RateLimitSignal = Union[RetryAfter, ResetAt, NoHint]


@dataclass
class RetryState:
    """Backoff bookkeeping for one logical request."""

    backoff: float = 60.0
    ceiling: float = 3600.0
    attempts: int = 0

    @property
    def exhausted(self) -> bool:
        return self.backoff >= self.ceiling

    def advance(self) -> float:
        """Return the current backoff and double it for next time."""
        delay = self.backoff
        self.backoff *= 2
        return delay


@dataclass(frozen=True)
class Readings:
    """Every value gathered during one run, before reconciliation."""

    release_feed: SemVer
    package_feed: SemVer
    installed: SemVer
    running: SemVer
    remote_plugin_commit: str


@dataclass(frozen=True)
class Decision:
    """Outcome of reconciling all version readings for one run."""

    plugin_out_of_date: bool
    app_update_available: bool
    restart_required: bool
    package_feed_behind: bool
    package_feed_ahead_of_installed: bool
    suppression_active: bool
    package_feed_version: SemVer
    release_feed_version: SemVer
    installed_version: SemVer
    running_version: SemVer

    @property
    def app_branch_visible(self) -> bool:
        return (self.app_update_available or self.restart_required) and not self.suppression_active

    @property
    def has_anything_to_show(self) -> bool:
        # The plugin-update branch is never subject to suppression.
        return self.plugin_out_of_date or self.app_branch_visible
