"""
Version sources: release feed, package feed, installed bundle and running process.
"""

from __future__ import annotations

import logging
import os
import plistlib
from pathlib import Path
from typing import Dict, Mapping, Optional
from xml.parsers.expat import ExpatError

import requests

from .client import RateLimitedClient
from .errors import (
    HardFailure,
    InvalidVersion,
    MissingData,
    NoReleasesError,
    ParseError,
    TransportError,
)
from .interfaces import VersionSource
from .models import HostFlavor
from .versioning import SemVer, parse_cask_version, parse_release_tag


logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
CASK_API = "https://formulae.brew.sh/api/cask"


class GitHubRepo:
    """A GitHub repository, queried through the rate-limited client."""

    def __init__(
        self,
        slug: str,
        client: RateLimitedClient,
        headers: Optional[Dict[str, str]] = None,
        api_url: str = GITHUB_API,
    ) -> None:
        self.slug = slug
        self.client = client
        self.headers = headers or {}
        self.api_url = api_url

    @property
    def url(self) -> str:
        return f"{self.api_url}/repos/{self.slug}"

    def head_commit(self) -> str:
        """Return the sha of the latest commit on the default branch."""
        repo_info = self.client.get_json(self.url, headers=self.headers)
        try:
            branch_url = repo_info["branches_url"].replace(
                "{/branch}", f"/{repo_info['default_branch']}"
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ParseError(f"unexpected repository info for {self.slug}: {e}") from e
        branch = self.client.get_json(branch_url, headers=self.headers)
        try:
            return branch["commit"]["sha"]
        except (KeyError, TypeError) as e:
            raise ParseError(f"unexpected branch info for {self.slug}: {e}") from e

    def latest_release(self) -> Optional[Dict]:
        """Return the latest release, or None when the repo has none yet."""
        try:
            return self.client.get_json(f"{self.url}/releases/latest", headers=self.headers)
        except HardFailure as e:
            if e.status == 404:
                logger.debug("No releases published for %s", self.slug)
                return None
            raise


class ReleaseFeed(VersionSource):
    """Latest version published as a GitHub release."""

    name = "release feed"

    def __init__(
        self,
        flavor: HostFlavor,
        client: RateLimitedClient,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.flavor = flavor
        self.client = client
        self.headers = headers

    def version(self) -> SemVer:
        if self.flavor.release_repo is None:
            return self.flavor.pinned_latest
        repo = GitHubRepo(self.flavor.release_repo, self.client, self.headers)
        release = repo.latest_release()
        if release is None:
            raise NoReleasesError(repo.slug)
        tag = release.get("tag_name") if isinstance(release, dict) else None
        version = parse_release_tag(tag)
        logger.debug("Latest %s release: %s", self.flavor, version)
        return version


class PackageFeed(VersionSource):
    """Version of the host app's Homebrew cask."""

    name = "package feed"

    def __init__(
        self,
        flavor: HostFlavor,
        session: requests.Session,
        timeout: float = 30.0,
        api_url: str = CASK_API,
    ) -> None:
        self.flavor = flavor
        self.session = session
        self.timeout = timeout
        self.api_url = api_url

    @property
    def url(self) -> str:
        return f"{self.api_url}/{self.flavor.cask}.json"

    def version(self) -> SemVer:
        url = self.url
        logger.info("Fetching Homebrew cask %s", self.flavor.cask)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"request to {url} failed: {e}", url=url) from e
        with response:
            if not response.ok:
                raise HardFailure(response.status_code, response.text, url)
            try:
                data = response.json()
            except ValueError as e:
                raise ParseError(f"invalid JSON from {url}: {e}") from e
        if not isinstance(data, dict) or "version" not in data:
            raise ParseError(f"cask {self.flavor.cask} has no version field")
        return parse_cask_version(data["version"])


class InstalledBundle(VersionSource):
    """Version in the installed app bundle's ``Info.plist``."""

    name = "installed bundle"

    def __init__(self, flavor: HostFlavor, plist_path: Optional[Path] = None) -> None:
        self.flavor = flavor
        self.plist_path = Path(plist_path or flavor.bundle_plist)

    def version(self) -> SemVer:
        try:
            with open(self.plist_path, "rb") as f:
                info = plistlib.load(f)
        except FileNotFoundError as e:
            raise MissingData(f"{self.flavor} is not installed at {self.plist_path}") from e
        except OSError as e:
            raise MissingData(f"could not read {self.plist_path}: {e}") from e
        except (plistlib.InvalidFileException, ExpatError, ValueError) as e:
            raise ParseError(f"error reading plist {self.plist_path}: {e}") from e
        if not isinstance(info, dict):
            raise ParseError(f"{self.plist_path} does not contain a dictionary")
        short_version = info.get("CFBundleShortVersionString")
        if short_version is None:
            raise MissingData(f"{self.plist_path} has no CFBundleShortVersionString")
        return SemVer.parse(str(short_version).strip())


class RunningProcess(VersionSource):
    """Version of the host app process that invoked this plugin."""

    name = "running process"

    def __init__(
        self,
        flavor: HostFlavor,
        installed: InstalledBundle,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.flavor = flavor
        self.installed = installed
        self.environ = os.environ if environ is None else environ

    def version(self) -> SemVer:
        if self.flavor is HostFlavor.BITBAR:
            # BitBar does not report its version; assume it matches the bundle.
            return self.installed.version()
        raw = self.environ.get("SWIFTBAR_VERSION")
        if raw is None:
            raise MissingData("SwiftBar did not export SWIFTBAR_VERSION")
        try:
            return SemVer.parse(raw.strip())
        except InvalidVersion as e:
            raise InvalidVersion(f"SWIFTBAR_VERSION: {e}") from e
