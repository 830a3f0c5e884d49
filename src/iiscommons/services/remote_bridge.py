"""Remote execution bridge (SSH or docker exec) for iis-commons."""

import os
import re
import shlex
from typing import Optional

from iiscommons.constants import (
    NOT_CONFIGURED_EXIT_CODE,
    REMOTE_CREDENTIAL_FILE,
    SOURCE_PLACEHOLDER,
    TARGET_PLACEHOLDER,
)
from iiscommons.errors_catalog import actionable_error
from iiscommons.models import CommandResult, RemoteTarget


class RemoteBridge:
    """Runs commands, copies and removals on the platform host.

    The bridge keeps no connection state of its own: every call receives the
    RemoteTarget holding the connect and copy templates.
    """

    WRAPPING_PREFIXES = ("ssh",)

    def __init__(self, logger, command_runner, remote_credential_file: str = REMOTE_CREDENTIAL_FILE):
        self.logger = logger
        self.command_runner = command_runner
        self.remote_credential_file = remote_credential_file

    @staticmethod
    def _not_configured(template: str) -> CommandResult:
        return CommandResult(
            exit_code=NOT_CONFIGURED_EXIT_CODE,
            stderr=actionable_error("remote_not_configured", template=template),
        )

    @classmethod
    def wraps_command(cls, connect_string: str) -> bool:
        try:
            words = shlex.split(connect_string)
        except ValueError:
            words = connect_string.split()
        return bool(words) and os.path.basename(words[0]) in cls.WRAPPING_PREFIXES

    @staticmethod
    def quote_argument(command: str) -> str:
        escaped = command
        for char in ("\\", '"', "$", "`"):
            escaped = escaped.replace(char, f"\\{char}")
        return f'"{escaped}"'

    @staticmethod
    def rewrite_path(command: str, local_path: str, remote_path: str) -> str:
        """Replace ``local_path`` only where it stands as a whole shell word."""
        pattern = rf"(?<![^\s'\"=]){re.escape(local_path)}(?![^\s'\";|&)])"
        return re.sub(pattern, lambda _match: remote_path, command)

    def build_remote_command(self, connect_string: str, command: str) -> str:
        if self.wraps_command(connect_string):
            return f"{connect_string} {self.quote_argument(command)}"
        return f"{connect_string} {command}"

    def _invoke(self, connect_string: str, command: str) -> CommandResult:
        return self.command_runner.run(self.build_remote_command(connect_string, command))

    def ensure_remote_credential_file(
        self, target: RemoteTarget, local_credential_file: str
    ) -> CommandResult:
        """Copy the authorisation file to the remote host unless it is already there."""
        if not target.connect_string:
            return self._not_configured("remoteConnectString")

        check = self._invoke(
            target.connect_string, f"test -f {shlex.quote(self.remote_credential_file)}"
        )
        if check.ok:
            return check

        self.logger.info(
            "Copying authorisation file %s to remote %s", local_credential_file, self.remote_credential_file
        )
        return self.copy_remote(target, local_credential_file, self.remote_credential_file)

    def execute_remote(
        self,
        target: RemoteTarget,
        command: str,
        local_credential_file: Optional[str] = None,
    ) -> CommandResult:
        if not target.connect_string:
            return self._not_configured("remoteConnectString")

        if local_credential_file and os.path.isfile(local_credential_file):
            provisioned = self.ensure_remote_credential_file(target, local_credential_file)
            if not provisioned.ok:
                self.logger.warning(
                    "Could not provide authorisation file on remote host: %s",
                    provisioned.stderr.strip() or f"exit code {provisioned.exit_code}",
                )
                return provisioned
            command = self.rewrite_path(command, local_credential_file, self.remote_credential_file)

        return self._invoke(target.connect_string, command)

    def copy_remote(self, target: RemoteTarget, source: str, dest: str) -> CommandResult:
        template = target.copy_string
        if not template:
            return self._not_configured("remoteCopyString")

        missing = [
            placeholder
            for placeholder in (SOURCE_PLACEHOLDER, TARGET_PLACEHOLDER)
            if placeholder not in template
        ]
        if missing:
            return CommandResult(
                exit_code=NOT_CONFIGURED_EXIT_CODE,
                stderr=actionable_error(
                    "missing_placeholders", placeholders=" and ".join(missing), template=template
                ),
            )

        copy_cmd = template.replace(SOURCE_PLACEHOLDER, shlex.quote(source)).replace(
            TARGET_PLACEHOLDER, shlex.quote(dest)
        )
        return self.command_runner.run(copy_cmd)

    def remove_remote(self, target: RemoteTarget, path: str) -> CommandResult:
        if not target.connect_string:
            return self._not_configured("remoteConnectString")
        return self._invoke(target.connect_string, f"rm -f {shlex.quote(path)}")
