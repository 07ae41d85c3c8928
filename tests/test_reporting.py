"""Tests for menu rendering."""

from menubar_version.errors import HardFailure, NoReleasesError, TransportError
from menubar_version.models import HostFlavor
from menubar_version.reconciler import decide
from menubar_version.reporting import command_item, menu_item, render_decision, render_error
from menubar_version.versioning import SemVer


V = SemVer.parse
EXE = "/Users/me/Library/Plugins/menubar-version.1h"


def test_nothing_to_show_renders_empty_menu() -> None:
    decision = decide("abc", "abc", V("1.0.0"), V("1.0.0"), V("1.0.0"), V("1.0.0"))

    assert render_decision(decision, HostFlavor.SWIFTBAR, EXE) == []


def test_update_available_with_lagging_homebrew() -> None:
    decision = decide("abc", "abc", V("1.0.0"), V("1.0.0"), V("1.0.0"), V("1.1.0"))

    lines = render_decision(decision, HostFlavor.SWIFTBAR, EXE)

    assert lines[1] == "---"
    assert "SwiftBar 1.1.0 available" in lines
    assert "You have 1.0.0" in lines
    assert "Homebrew has 1.0.0" in lines
    assert (
        "Send Pull Request to Homebrew | bash=brew param1=bump-cask-pr param2=--version "
        "param3=1.1.0 param4=swiftbar terminal=true"
    ) in lines
    assert "Open GitHub Release | href=https://github.com/swiftbar/SwiftBar/releases/latest" in lines
    assert (
        f"Hide Until Homebrew Is Updated | bash={EXE} param1=hide-until-homebrew-gt "
        "param2=1.0.0 terminal=false refresh=true"
    ) in lines
    assert not any("brew upgrade" in line for line in lines)


def test_update_available_through_homebrew() -> None:
    decision = decide("abc", "abc", V("1.0.0"), V("1.0.0"), V("1.1.0"), V("1.1.0"))

    lines = render_decision(decision, HostFlavor.BITBAR, EXE)

    assert (
        "Install using `brew upgrade --cask bitbar` | bash=brew param1=upgrade "
        "param2=--cask param3=bitbar terminal=true"
    ) in lines
    assert not any("Hide Until" in line for line in lines)
    assert not any("bump-cask-pr" in line for line in lines)


def test_restart_required() -> None:
    decision = decide("abc", "abc", V("1.1.0"), V("1.0.0"), V("1.1.0"), V("1.1.0"))

    lines = render_decision(decision, HostFlavor.SWIFTBAR, EXE)

    assert lines[2:] == ["Restart to update to SwiftBar 1.1.0", "Currently running: 1.0.0"]


def test_suppressed_app_update_still_shows_plugin_update() -> None:
    decision = decide("abc", "def", V("1.0.0"), V("1.0.0"), V("1.2.0"), V("1.3.0"), V("1.2.0"))

    lines = render_decision(decision, HostFlavor.SWIFTBAR, EXE)

    assert "New version of this plugin available" in lines
    assert any(line.startswith("Update Via pip |") for line in lines)
    assert not any("available" in line and "SwiftBar" in line for line in lines)


def test_menu_item_quotes_and_escapes() -> None:
    assert menu_item("a|b") == "a¦b"
    assert command_item("Run", ["/path with space/exe", "x"]) == (
        'Run | bash="/path with space/exe" param1=x terminal=false refresh=true'
    )


def test_render_error_variants() -> None:
    lines = render_error(NoReleasesError("swiftbar/SwiftBar"))
    assert lines[:3] == ["⚠", "---", "no GitHub releases for swiftbar/SwiftBar"]

    url = "https://api.github.com/repos/swiftbar/SwiftBar/releases/latest"
    lines = render_error(HardFailure(500, "server exploded\ntrace", url))
    assert "HTTP error 500" in lines
    assert "server exploded" in lines
    assert lines[-1] == f"URL: {url} | href={url} color=blue"

    lines = render_error(TransportError("request failed", url=url), title=None)
    assert lines[0] == "network error: request failed"
