"""Subprocess execution service for iis-commons."""

import subprocess
from typing import Iterable, List, Optional, Union

from iiscommons.errors import CommandTimeoutError, ContextError
from iiscommons.models import CommandResult

Command = Union[str, List[str]]


class CommandRunner:
    """Runs external commands and reports their outcome as a CommandResult.

    String commands go through ``shell_executable`` so that callers can use
    pipes and redirection the way the platform scripts do. List commands are
    executed directly.
    """

    def __init__(
        self,
        logger,
        default_timeout: Optional[float] = None,
        shell_executable: str = "/bin/bash",
        subprocess_module=subprocess,
    ):
        self.logger = logger
        self.default_timeout = default_timeout
        self.shell_executable = shell_executable
        self.subprocess = subprocess_module

    @staticmethod
    def redact(text: str, secrets: Iterable[str]) -> str:
        for secret in secrets:
            if secret:
                text = text.replace(secret, "********")
        return text

    def run(
        self,
        cmd: Command,
        timeout: Optional[float] = None,
        redact: Iterable[str] = (),
    ) -> CommandResult:
        secrets = list(redact)
        cmd_str = cmd if isinstance(cmd, str) else " ".join(cmd)
        cmd_str = self.redact(cmd_str, secrets)
        self.logger.debug("Executing: %s", cmd_str)

        effective_timeout = timeout if timeout is not None else self.default_timeout
        use_shell = isinstance(cmd, str)

        try:
            result = self.subprocess.run(
                cmd,
                shell=use_shell,
                executable=self.shell_executable if use_shell else None,
                text=True,
                capture_output=True,
                timeout=effective_timeout,
            )
        except FileNotFoundError as exc:
            raise ContextError(
                f"Required command not found: {cmd_str}. Check the installation and try again."
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise CommandTimeoutError(
                f"Command timed out after {effective_timeout}s: {cmd_str}"
            ) from exc
        except OSError as exc:
            raise ContextError(f"Failed to execute command: {cmd_str}. {exc}") from exc

        stdout = result.stdout or ""
        stderr = result.stderr or ""

        # Output of a command handling secrets may itself be secret.
        if stdout and not secrets:
            self.logger.debug("Command output: %s", stdout.strip())
        if result.returncode != 0:
            message = f"Command failed ({result.returncode}): {cmd_str}"
            if stderr.strip():
                message = f"{message}\n{self.redact(stderr.strip(), secrets)}"
            self.logger.debug(message)

        return CommandResult(exit_code=result.returncode, stdout=stdout, stderr=stderr)
