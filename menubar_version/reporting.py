"""
Render decisions and errors as BitBar/SwiftBar plugin output.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .config import PLUGIN_REPO
from .errors import HardFailure, MenubarVersionError, TransportError
from .models import Decision, HostFlavor


TITLE = "⬆"
ERROR_TITLE = "⚠"
SEPARATOR = "---"
PLUGIN_SOURCE = f"git+https://github.com/{PLUGIN_REPO}.git"


def _quote(value: str) -> str:
    value = str(value)
    if " " in value or '"' in value:
        return '"' + value.replace('"', '\\"') + '"'
    return value


def menu_item(text: str, **params: str) -> str:
    """Format one menu line, e.g. ``Open | href=https://...``."""
    text = str(text).replace("|", "¦")
    if not params:
        return text
    rendered = " ".join(f"{key}={_quote(value)}" for key, value in params.items())
    return f"{text} | {rendered}"


def command_item(text: str, argv: Sequence[str], terminal: bool = False) -> str:
    params: Dict[str, str] = {"bash": argv[0]}
    for index, arg in enumerate(argv[1:], start=1):
        params[f"param{index}"] = str(arg)
    params["terminal"] = "true" if terminal else "false"
    if not terminal:
        params["refresh"] = "true"
    return menu_item(text, **params)


def render_decision(decision: Decision, flavor: HostFlavor, executable: str) -> List[str]:
    """Return the plugin output lines; empty when there is nothing to show."""
    if not decision.has_anything_to_show:
        return []

    lines = [TITLE, SEPARATOR]
    if decision.plugin_out_of_date:
        lines.append(menu_item("New version of this plugin available"))
        lines.append(command_item(
            "Update Via pip",
            ["pip", "install", "--upgrade", PLUGIN_SOURCE],
            terminal=True,
        ))

    if not decision.app_branch_visible:
        return lines

    release = decision.release_feed_version
    package_feed = decision.package_feed_version
    if decision.app_update_available:
        lines.append(menu_item(f"{flavor} {release} available"))
        lines.append(menu_item(f"You have {decision.running_version}"))
        if decision.package_feed_behind:
            lines.append(menu_item(f"Homebrew has {package_feed}"))
        if decision.package_feed_ahead_of_installed:
            lines.append(command_item(
                f"Install using `brew upgrade --cask {flavor.cask}`",
                ["brew", "upgrade", "--cask", flavor.cask],
                terminal=True,
            ))
        if decision.package_feed_behind:
            lines.append(command_item(
                "Send Pull Request to Homebrew",
                ["brew", "bump-cask-pr", "--version", str(release), flavor.cask],
                terminal=True,
            ))
            lines.append(menu_item("Open GitHub Release", href=flavor.release_page))
            lines.append(command_item(
                "Hide Until Homebrew Is Updated",
                [executable, "hide-until-homebrew-gt", str(package_feed)],
            ))
    else:
        lines.append(menu_item(f"Restart to update to {flavor} {decision.installed_version}"))
        lines.append(menu_item(f"Currently running: {decision.running_version}"))
    return lines


def render_error(error: Exception, title: Optional[str] = ERROR_TITLE) -> List[str]:
    """Render a failed run so the menu bar shows what went wrong."""
    lines = [title, SEPARATOR] if title else []
    if isinstance(error, HardFailure):
        lines.append(menu_item(f"HTTP error {error.status}"))
        if error.body.strip():
            lines.append(menu_item(error.body.strip().splitlines()[0]))
    elif isinstance(error, TransportError):
        lines.append(menu_item(f"network error: {error}"))
    elif isinstance(error, MenubarVersionError):
        lines.append(menu_item(str(error)))
    else:
        lines.append(menu_item(f"unexpected error: {error}"))
    lines.append(menu_item(repr(error)))

    url = getattr(error, "url", None)
    if url:
        lines.append(menu_item(f"URL: {url}", href=url, color="blue"))
    return lines
