"""Utility modules for Dynamic MOTD."""

from dynamic_motd.utils.command import CommandExecutor
from dynamic_motd.utils.file import FileManager

__all__ = ["CommandExecutor", "FileManager"]
