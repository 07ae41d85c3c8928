"""
Semantic version parsing and precedence.
"""

from __future__ import annotations

from typing import Optional

import semver

from .errors import InvalidVersion, ReleaseTagError


class SemVer(semver.Version):
    """A semantic version whose parse failures belong to our error taxonomy.

    Ordering and equality come from :mod:`semver` and ignore build metadata.
    """

    @classmethod
    def parse(cls, version, optional_minor_and_patch: bool = False) -> "SemVer":
        try:
            return super().parse(version, optional_minor_and_patch)
        except (TypeError, ValueError) as e:
            raise InvalidVersion(f"invalid semantic version: {version!r}") from e


def parse_release_tag(tag: str) -> SemVer:
    """Parse a release tag of the form ``v1.2.3``.

    A tag without the leading ``v`` is rejected rather than coerced.
    """
    if not isinstance(tag, str) or not tag.startswith("v"):
        raise ReleaseTagError(f"latest release tag does not include a version number: {tag!r}")
    return SemVer.parse(tag[1:])


def parse_cask_version(value: str) -> SemVer:
    """Parse a Homebrew cask version, dropping a trailing ``,build`` suffix."""
    if not isinstance(value, str):
        raise InvalidVersion(f"expected a version string, got {value!r}")
    return SemVer.parse(value.split(",", 1)[0])


def optional_version(value: Optional[str]) -> Optional[SemVer]:
    if value is None:
        return None
    return SemVer.parse(value)
