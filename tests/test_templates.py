"""Tests for script rendering."""

import shutil
from pathlib import Path

import pytest

from dynamic_motd.templates import (
    render_banner_script,
    render_body,
    render_header,
    render_trigger_script,
)
from dynamic_motd.types import IntegrationMethod
from dynamic_motd.utils.command import CommandExecutor


def test_hook_script_has_no_session_guard():
    """Test update-motd.d scripts always print."""
    script = render_banner_script(IntegrationMethod.HOOK_DIRECTORY, True)
    assert script.startswith("#!/bin/bash\n")
    assert "$-" not in render_header(IntegrationMethod.HOOK_DIRECTORY)


def test_profile_script_guards_interactive_shells():
    """Test profile.d scripts return early in non-interactive shells."""
    header = render_header(IntegrationMethod.LOGIN_PROFILE)
    assert "if [[ $- != *i* ]]; then" in header
    assert "SSH_CONNECTION" not in header


def test_profile_script_ssh_only():
    """Test the SSH session guard."""
    header = render_header(IntegrationMethod.LOGIN_PROFILE, ssh_only=True)
    assert "SSH_CONNECTION" in header
    assert "SSH_TTY" in header


def test_methods_differ_only_in_header():
    """Test both methods share the same body."""
    hook = render_banner_script(IntegrationMethod.HOOK_DIRECTORY, False)
    profile = render_banner_script(IntegrationMethod.LOGIN_PROFILE, False)
    body = render_body(False)

    assert hook.endswith(body)
    assert profile.endswith(body)
    assert hook != profile


def test_enhanced_body_uses_toilet_with_fallback():
    """Test enhanced banner keeps the plain-text block as runtime fallback."""
    body = render_body(True)
    assert 'toilet -f smblock -F metal "$HOST_NAME"' in body
    assert "command -v toilet" in body
    assert "+----" in body


def test_fallback_body_has_no_toilet():
    """Test plain-text banner."""
    body = render_body(False)
    assert "toilet" not in body
    assert "+----" in body


def test_body_collects_system_status():
    """Test status fields are gathered."""
    body = render_body(False)
    commands = ("uname -r", "free", "df -h /", "ip route get 1", "uptime -p", "/proc/loadavg")
    for command in commands:
        assert command in body


def test_trigger_script():
    """Test the trigger writes run-parts output to the cache."""
    script = render_trigger_script(Path("/etc/update-motd.d"), Path("/run/motd.dynamic"))
    assert script.startswith("#!/bin/bash\n")
    assert "run-parts /etc/update-motd.d > /run/motd.dynamic" in script


@pytest.mark.skipif(shutil.which("bash") is None, reason="bash not installed")
@pytest.mark.parametrize("enhanced", [True, False], ids=["enhanced", "fallback"])
@pytest.mark.parametrize(
    "method", [IntegrationMethod.HOOK_DIRECTORY, IntegrationMethod.LOGIN_PROFILE]
)
def test_rendered_banner_runs_in_bash(method, enhanced, tmp_path):
    """Test every rendered banner parses and prints under bash."""
    script = tmp_path / "banner.sh"
    script.write_text(render_banner_script(method, enhanced))
    executor = CommandExecutor()

    syntax = executor.execute(f"bash -n {script}", check=False)
    assert syntax.success, syntax.stderr

    shell = "bash -i" if method == IntegrationMethod.LOGIN_PROFILE else "bash"
    result = executor.execute(
        f"{shell} {script}",
        check=False,
        env={"SSH_CONNECTION": "test", "HOME": str(tmp_path)},
    )
    assert result.success, result.stderr
    assert "Welcome to" in result.stdout


def test_last_login_skipped_on_apt_hosts():
    """Test yum alone does not enable the last-login line where apt exists."""
    body = render_body(False)
    assert "! command -v apt" in body


def test_display_flags_unsupported_userspace():
    """Test the testing-release notice and the generic menu line."""
    body = render_body(False)
    assert "No end-user support" in body
    assert "System monitoring" in body
