"""Authorisation file persistence for iis-commons."""

import os
from typing import Dict, Mapping

from iiscommons.constants import CREDENTIAL_FILE_MODE
from iiscommons.errors import CredentialFileNotFoundError
from iiscommons.errors_catalog import actionable_error


class CredentialStore:
    """Reads and writes the flat ``key=value`` authorisation file.

    The password is stored in the platform-encrypted form and may itself
    contain ``=``, so values are always taken from after the first ``=``.
    Lines that do not start with a known field are ignored, which keeps
    blank lines and hand-written comments harmless.
    """

    CORE_FIELDS = ("user", "password", "domain", "server")
    REMOTE_FIELDS = ("remoteConnectString", "remoteCopyString")
    FIELDS = CORE_FIELDS + REMOTE_FIELDS

    def __init__(self, logger, filesystem_service=None):
        self.logger = logger
        self.filesystem_service = filesystem_service

    def read(self, path: str) -> Dict[str, str]:
        try:
            with open(path, "r", encoding="utf-8") as file_obj:
                lines = file_obj.read().splitlines()
        except OSError as exc:
            raise CredentialFileNotFoundError(
                actionable_error("credential_file_not_found", path=path)
            ) from exc

        fields: Dict[str, str] = {}
        for line in lines:
            key, sep, value = line.partition("=")
            if not sep or key not in self.FIELDS:
                if line.strip():
                    self.logger.debug("Skipping unrecognised line in %s", path)
                continue
            # First occurrence wins.
            fields.setdefault(key, value)

        return fields

    def write(self, path: str, fields: Mapping[str, str]):
        lines = [f"{key}={fields.get(key, '')}" for key in self.CORE_FIELDS]
        lines.extend(f"{key}={fields[key]}" for key in self.REMOTE_FIELDS if fields.get(key))

        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(path, "w", encoding="utf-8", newline="\n") as file_obj:
            file_obj.write("\n".join(lines) + "\n")

        if self.filesystem_service is not None:
            self.filesystem_service.set_permissions(path, CREDENTIAL_FILE_MODE)
        self.logger.info("Authorisation details written to %s", path)

    def append(self, path: str, text: str):
        if not os.path.isfile(path):
            raise CredentialFileNotFoundError(
                actionable_error("credential_file_not_found", path=path)
            )

        if not text.endswith("\n"):
            text = f"{text}\n"

        with open(path, "r+", encoding="utf-8", newline="\n") as file_obj:
            existing = file_obj.read()
            if existing and not existing.endswith("\n"):
                file_obj.write("\n")
            file_obj.write(text)
