"""
Command-line interface: the menu bar plugin entry point.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

import requests

from .build_info import plugin_commit
from .client import RateLimitedClient
from .config import DATA_PATH, PLUGIN_REPO, data_home, load_config
from .errors import MenubarVersionError
from .models import HostFlavor
from .reconciler import Reconciler
from .reporting import render_decision, render_error
from .sources import GitHubRepo, InstalledBundle, PackageFeed, ReleaseFeed, RunningProcess
from .store import JsonSuppressionStore
from .versioning import SemVer


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="menubar-version",
        description="Show a menu bar notification when SwiftBar/BitBar or this plugin can be updated",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for diagnostics written to stderr. Default: WARNING"
    )
    subparsers = parser.add_subparsers(dest="command")

    hide = subparsers.add_parser(
        "hide-until-homebrew-gt",
        help="Hide app update prompts until Homebrew offers a version above VERSION"
    )
    hide.add_argument("version", help="Semantic version, e.g. 1.4.2")
    return parser


def hide_until_homebrew_gt(version: str, store: JsonSuppressionStore) -> None:
    store.set(SemVer.parse(version))


def build_reconciler(environ=None) -> tuple:
    """Wire up every collaborator for a menu run.

    Returns:
        Tuple of (reconciler, flavor).
    """
    environ = os.environ if environ is None else environ
    config = load_config(environ=environ)
    flavor = HostFlavor.detect(environ)

    session = requests.Session()
    session.headers["User-Agent"] = config.user_agent
    client = RateLimitedClient(session, timeout=config.timeout)
    github_headers = config.github_headers()
    installed = InstalledBundle(flavor)

    reconciler = Reconciler(
        release_feed=ReleaseFeed(flavor, client, github_headers),
        package_feed=PackageFeed(flavor, session, timeout=config.timeout),
        installed=installed,
        running=RunningProcess(flavor, installed, environ),
        plugin_repo=GitHubRepo(PLUGIN_REPO, client, github_headers),
        store=JsonSuppressionStore(data_home(environ) / DATA_PATH),
        plugin_commit=plugin_commit(environ),
    )
    return reconciler, flavor


def run_menu() -> int:
    try:
        reconciler, flavor = build_reconciler()
        decision = reconciler.run()
    except MenubarVersionError as e:
        logger.error("Version check failed: %s", e)
        print("\n".join(render_error(e)))
        return 0
    except Exception as e:
        logger.exception("Unexpected failure during version check")
        print("\n".join(render_error(e)))
        return 0
    lines = render_decision(decision, flavor, str(Path(sys.argv[0]).resolve()))
    if lines:
        print("\n".join(lines))
    return 0


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command == "hide-until-homebrew-gt":
        try:
            hide_until_homebrew_gt(args.version, JsonSuppressionStore())
        except MenubarVersionError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        return

    sys.exit(run_menu())


if __name__ == "__main__":
    main()
