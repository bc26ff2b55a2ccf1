"""
Atomic file writing with backup mechanisms.

This module provides utilities for atomic file operations that ensure
the preferences document is never left half-written, even if the process
dies in the middle of a write.
"""

import os
import shutil
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, List, Callable

from typedstore.core.exceptions import DataPersistenceError


class AtomicWriter:
    """
    Atomic file writer with backup mechanisms.

    Content is written to a temporary file in the target directory and then
    moved over the target with ``os.replace``. Before each replacement the
    previous version can be copied to a timestamped backup.

    Attributes:
        backup_retention_count (int): Number of backup files to keep
        logger (logging.Logger): Logger instance
    """

    def __init__(
        self,
        backup_retention_count: int = 3,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the atomic writer.

        Args:
            backup_retention_count: Number of backup files to keep (0 disables backups)
            logger: Logger instance (optional)
        """
        self.backup_retention_count = backup_retention_count
        self.logger = logger or logging.getLogger(__name__)
        self._backup_sequence = 0

    def _backup_path(self, file_path: Path) -> Path:
        # Sequence suffix keeps names unique for several writes per microsecond
        timestamp = datetime.now().strftime("%Y%m%d%H%M%S%f")
        self._backup_sequence += 1
        return file_path.with_suffix(
            f'{file_path.suffix}.bak{timestamp}{self._backup_sequence:06d}'
        )

    def write_atomic(
        self,
        file_path: Path,
        content: bytes,
        create_backup: bool = True
    ) -> Optional[Path]:
        """
        Write content to a file atomically.

        Args:
            file_path: Path to the target file
            content: Bytes to write
            create_backup: Whether to back up the current file first

        Returns:
            Path to the backup file if one was created, otherwise None

        Raises:
            DataPersistenceError: If the write operation fails
        """
        temp_file = file_path.with_suffix(f'{file_path.suffix}.tmp')

        backup_file = None
        if create_backup and self.backup_retention_count > 0 and file_path.exists():
            backup_file = self._backup_path(file_path)

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, 'wb') as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())

            if backup_file is not None:
                shutil.copy2(file_path, backup_file)

            os.replace(temp_file, file_path)

            self.logger.debug(
                f"File written atomically: {file_path}",
                extra={
                    "file_path": str(file_path),
                    "backup_file": str(backup_file) if backup_file else None
                }
            )

            if backup_file is not None:
                self.cleanup_old_backups(file_path)

            return backup_file

        except OSError as e:
            self.logger.error(
                f"Failed to write file atomically: {file_path}",
                exc_info=True,
                extra={"file_path": str(file_path), "error": str(e)}
            )

            if temp_file.exists():
                try:
                    temp_file.unlink()
                except OSError:
                    self.logger.warning(f"Failed to remove temporary file: {temp_file}")

            raise DataPersistenceError(
                f"Failed to write file atomically: {str(e)}",
                file_path=str(file_path),
                operation="write",
                original_error=e
            )

    def get_backup_files(self, file_path: Path) -> List[Path]:
        """
        Get the backup files for a given file.

        Returns:
            List of backup file paths, newest first
        """
        backup_pattern = f"{file_path.name}.bak*"
        return sorted(
            file_path.parent.glob(backup_pattern),
            key=lambda p: p.name,
            reverse=True
        )

    def cleanup_old_backups(self, file_path: Path) -> None:
        """
        Remove old backup files, keeping only the most recent ones.

        Args:
            file_path: Path to the original file
        """
        for old_backup in self.get_backup_files(file_path)[self.backup_retention_count:]:
            try:
                old_backup.unlink()
                self.logger.debug(f"Removed old backup: {old_backup}")
            except OSError as e:
                self.logger.warning(
                    f"Failed to remove old backup: {old_backup}",
                    extra={"error": str(e)}
                )

    def restore_from_backup(
        self,
        file_path: Path,
        validation_func: Optional[Callable[[bytes], bool]] = None
    ) -> Optional[Path]:
        """
        Restore a file from the most recent valid backup.

        Args:
            file_path: Path to the file to restore
            validation_func: Predicate a backup's content must satisfy (optional)

        Returns:
            Path to the backup used, or None if no valid backup was found
        """
        self.logger.warning(f"Attempting to restore {file_path} from backup")

        backup_files = self.get_backup_files(file_path)
        if not backup_files:
            self.logger.error(f"No backup files found for {file_path}")
            return None

        for backup_file in backup_files:
            try:
                content = backup_file.read_bytes()
                if validation_func is not None and not validation_func(content):
                    self.logger.warning(f"Backup failed validation: {backup_file}")
                    continue

                shutil.copy2(backup_file, file_path)
                self.logger.info(f"Successfully restored from backup: {backup_file}")
                return backup_file

            except OSError as e:
                self.logger.error(
                    f"Failed to restore from backup: {backup_file}",
                    exc_info=True,
                    extra={"error": str(e)}
                )

        self.logger.error("All backup restoration attempts failed")
        return None
