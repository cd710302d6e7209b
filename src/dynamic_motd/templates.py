"""Rendering of the generated banner and trigger scripts."""

from functools import lru_cache
from importlib import resources
from pathlib import Path

from dynamic_motd.types import IntegrationMethod


@lru_cache(maxsize=None)
def load_fragment(name: str) -> str:
    """Read a script fragment shipped in the fragments directory."""
    return resources.files("dynamic_motd").joinpath("fragments", name).read_text()


def render_header(method: IntegrationMethod, ssh_only: bool = False) -> str:
    """Render the method-specific preamble of the banner script.

    Args:
        method: Where the script will be installed
        ssh_only: Skip the banner outside SSH sessions (profile.d only)

    Returns:
        Shebang, comments and session guards
    """
    if method == IntegrationMethod.HOOK_DIRECTORY:
        return load_fragment("header_hook.sh")

    header = load_fragment("header_profile.sh")
    if ssh_only:
        header += load_fragment("guard_ssh.sh")
    return header


def render_hostname_block(has_enhanced_renderer: bool) -> str:
    """Render the hostname art block.

    The enhanced block still checks for the renderer at login time, since
    it can be uninstalled after the banner was generated.
    """
    fallback = load_fragment("hostname_fallback.sh")
    if not has_enhanced_renderer:
        return fallback

    indented = "".join(
        f"    {line}" if line.strip() else line
        for line in fallback.splitlines(keepends=True)
    )
    return (
        "if command -v toilet &> /dev/null; then\n"
        f"    {load_fragment('hostname_enhanced.sh')}"
        "else\n"
        f"{indented}"
        "fi\n"
    )


def render_body(has_enhanced_renderer: bool) -> str:
    """Render everything after the header."""
    return (
        load_fragment("collect.sh")
        + render_hostname_block(has_enhanced_renderer)
        + load_fragment("display.sh")
    )


def render_banner_script(
    method: IntegrationMethod, has_enhanced_renderer: bool, ssh_only: bool = False
) -> str:
    """Render the complete banner script for an integration method."""
    return render_header(method, ssh_only=ssh_only) + render_body(has_enhanced_renderer)


def render_trigger_script(hook_dir: Path, banner_cache: Path) -> str:
    """Render the command PAM runs at login to regenerate the banner cache."""
    return f"""#!/bin/bash
# Regenerate the dynamic MOTD, generated by dynamic-motd
if [ -d {hook_dir} ]; then
    run-parts {hook_dir} > {banner_cache} 2>/dev/null
    chmod 644 {banner_cache} 2>/dev/null || true
fi
"""
