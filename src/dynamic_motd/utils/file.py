"""File management utilities."""

import os
import shutil
from pathlib import Path
from typing import Callable, List

import structlog

logger = structlog.get_logger()


class FileManager:
    """Idempotent file operations with one-shot backups.

    Every removal or move treats a missing source as success, so the same
    call can be repeated on a host in any state.
    """

    def remove_quietly(self, filepath: Path) -> bool:
        """Delete a file if present.

        Args:
            filepath: Path to remove

        Returns:
            True if a file was removed, False if nothing was there
        """
        try:
            filepath.unlink()
        except FileNotFoundError:
            return False
        logger.debug("Removed file", path=str(filepath))
        return True

    def move_aside(self, filepath: Path, backup_path: Path) -> bool:
        """Move a file to its backup location without clobbering a backup.

        Args:
            filepath: File to move
            backup_path: Destination; left untouched if it already exists

        Returns:
            True if the file was moved
        """
        if not filepath.exists():
            return False
        if backup_path.exists():
            logger.warning(
                "Backup already present, leaving file in place",
                path=str(filepath),
                backup=str(backup_path),
            )
            return False
        os.replace(filepath, backup_path)
        return True

    def backup_once(self, filepath: Path, backup_path: Path) -> bool:
        """Copy a file to its backup location unless a backup exists.

        Args:
            filepath: File to back up
            backup_path: Backup destination

        Returns:
            True if a new backup was written
        """
        if backup_path.exists() or not filepath.exists():
            return False
        shutil.copy2(filepath, backup_path)
        logger.debug("Backup created", path=str(filepath), backup=str(backup_path))
        return True

    def restore_backup(self, backup_path: Path, original_path: Path) -> bool:
        """Rename a backup back over the original.

        Args:
            backup_path: Backup to consume
            original_path: Where the content is restored

        Returns:
            True if a backup was restored, False if none existed
        """
        if not backup_path.exists():
            return False
        os.replace(backup_path, original_path)
        return True

    def read_file(self, filepath: Path) -> str:
        """Read file content.

        Args:
            filepath: Path to file

        Returns:
            File content as string
        """
        with open(filepath) as f:
            return f.read()

    def write_file(self, filepath: Path, content: str, mode: int = 0o644) -> None:
        """Write content to file and set its permissions.

        Args:
            filepath: Path to file
            content: Content to write
            mode: Permission bits applied after writing
        """
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "w") as f:
            f.write(content)
        os.chmod(filepath, mode)

    def write_executable(self, filepath: Path, content: str) -> None:
        """Write a script and mark it executable."""
        self.write_file(filepath, content, mode=0o755)

    def drop_lines(self, filepath: Path, predicate: Callable[[str], bool]) -> List[str]:
        """Remove every line for which predicate is true.

        Args:
            filepath: File to edit in place
            predicate: Called with each line, newline stripped

        Returns:
            The removed lines
        """
        lines = self.read_file(filepath).splitlines(keepends=True)
        kept = [line for line in lines if not predicate(line.rstrip("\n"))]
        removed = [line.rstrip("\n") for line in lines if predicate(line.rstrip("\n"))]
        if removed:
            with open(filepath, "w") as f:
                f.writelines(kept)
        return removed

    def append_lines(self, filepath: Path, lines: List[str]) -> None:
        """Append lines to a file, starting on a fresh line.

        Args:
            filepath: Path to file
            lines: Lines to append, without newlines
        """
        prefix = ""
        content = self.read_file(filepath) if filepath.exists() else ""
        if content and not content.endswith("\n"):
            prefix = "\n"
        with open(filepath, "a") as f:
            f.write(prefix + "".join(f"{line}\n" for line in lines))
