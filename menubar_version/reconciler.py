"""
Combine independent version readings into a single notification decision.
"""

from __future__ import annotations

import logging
from typing import Optional

from .interfaces import SuppressionStore, VersionSource
from .models import Decision, Readings
from .sources import GitHubRepo
from .versioning import SemVer


logger = logging.getLogger(__name__)


def decide(
    plugin_commit: str,
    remote_plugin_commit: str,
    installed: SemVer,
    running: SemVer,
    package_feed: SemVer,
    release_feed: SemVer,
    suppressed: Optional[SemVer] = None,
) -> Decision:
    """Reconcile version readings into a :class:`Decision`.

    Args:
        plugin_commit: Commit this plugin was built from.
        remote_plugin_commit: Head of the plugin's default branch.
        installed: Version of the installed app bundle.
        running: Version of the running app process.
        package_feed: Version offered by the package manager.
        release_feed: Latest published release.
        suppressed: Threshold below which package-feed prompts are hidden.

    Returns:
        The decision; commits are only compared for equality.
    """
    app_update_available = installed < release_feed
    restart_required = not app_update_available and running < release_feed
    suppression_active = suppressed is not None and package_feed <= suppressed

    decision = Decision(
        plugin_out_of_date=plugin_commit != remote_plugin_commit,
        app_update_available=app_update_available,
        restart_required=restart_required,
        package_feed_behind=app_update_available and package_feed < release_feed,
        package_feed_ahead_of_installed=app_update_available and package_feed > installed,
        suppression_active=suppression_active,
        package_feed_version=package_feed,
        release_feed_version=release_feed,
        installed_version=installed,
        running_version=running,
    )
    logger.debug("Decision: %s", decision)
    return decision


class Reconciler:
    """Run every lookup in a fixed order, then decide.

    Any lookup failure propagates; no partial decision is produced.
    """

    def __init__(
        self,
        release_feed: VersionSource,
        package_feed: VersionSource,
        installed: VersionSource,
        running: VersionSource,
        plugin_repo: GitHubRepo,
        store: SuppressionStore,
        plugin_commit: str,
    ) -> None:
        self.release_feed = release_feed
        self.package_feed = package_feed
        self.installed = installed
        self.running = running
        self.plugin_repo = plugin_repo
        self.store = store
        self.plugin_commit = plugin_commit

    def gather(self) -> Readings:
        # Network-heaviest and most failure-prone lookups go first.
        release_feed = self._lookup(self.release_feed)
        package_feed = self._lookup(self.package_feed)
        installed = self._lookup(self.installed)
        running = self._lookup(self.running)
        logger.debug("Looking up plugin head commit in %s", self.plugin_repo.slug)
        return Readings(
            release_feed=release_feed,
            package_feed=package_feed,
            installed=installed,
            running=running,
            remote_plugin_commit=self.plugin_repo.head_commit(),
        )

    @staticmethod
    def _lookup(source: VersionSource) -> SemVer:
        logger.debug("Looking up %s", source.name)
        return source.version()

    def run(self) -> Decision:
        readings = self.gather()
        return decide(
            plugin_commit=self.plugin_commit,
            remote_plugin_commit=readings.remote_plugin_commit,
            installed=readings.installed,
            running=readings.running,
            package_feed=readings.package_feed,
            release_feed=readings.release_feed,
            suppressed=self.store.get(),
        )
