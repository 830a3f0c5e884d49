"""Filesystem helpers for iis-commons."""

import logging
import os
import shutil
import sys

from iiscommons.models import CommandResult


class FileSystemService:
    """Encapsulates local file side effects for on-host routing."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def set_permissions(self, path: str, mode: int):
        if sys.platform == "win32":
            return

        try:
            os.chmod(path, mode)
        except OSError as exc:
            self.logger.warning("Could not set permissions on %s: %s", path, exc)

    def copy_file(self, source: str, target: str) -> CommandResult:
        try:
            shutil.copy2(source, target)
        except OSError as exc:
            self.logger.debug("Copy of %s to %s failed: %s", source, target, exc)
            return CommandResult(exit_code=1, stderr=str(exc))

        self.logger.debug("Copied %s to %s", source, target)
        return CommandResult(exit_code=0)

    def remove_file(self, path: str) -> CommandResult:
        try:
            os.remove(path)
        except FileNotFoundError:
            return CommandResult(exit_code=0)
        except OSError as exc:
            self.logger.debug("Removal of %s failed: %s", path, exc)
            return CommandResult(exit_code=1, stderr=str(exc))

        self.logger.debug("Removed file: %s", path)
        return CommandResult(exit_code=0)
