"""YAML defaults for the iis-commons command line."""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import yaml

from iiscommons.errors import ContextError


class ConfigLoader:
    """Finds, reads and type-checks the optional ``.iiscommons.yml`` file.

    Path values have ``~`` expanded and ``command_timeout`` is returned as a
    float, so callers can hand the result straight to EnvironmentContext.
    """

    DEFAULT_FILE_NAME = ".iiscommons.yml"

    PATH_KEYS = ("install_root", "credential_file", "log_file")
    STRING_KEYS = ("remote_connect_string", "remote_copy_string")

    def __init__(self, search_dirs: Optional[Sequence[str]] = None):
        self.search_dirs = search_dirs

    @property
    def supported_keys(self):
        return set(self.PATH_KEYS + self.STRING_KEYS + ("command_timeout", "verbose"))

    def find_default(self) -> Optional[str]:
        """Return the first default config file, looking in the working then home directory."""
        search_dirs = self.search_dirs or (os.getcwd(), os.path.expanduser("~"))
        for directory in search_dirs:
            candidate = os.path.join(directory, self.DEFAULT_FILE_NAME)
            if os.path.isfile(candidate):
                return candidate
        return None

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path).expanduser()
        if not path.is_file():
            raise ContextError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise ContextError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise ContextError(f"Config file '{config_path}' must contain a YAML mapping.")

        unknown = sorted(str(key) for key in set(parsed) - self.supported_keys)
        if unknown:
            raise ContextError(f"Unknown configuration keys in '{config_path}': {', '.join(unknown)}")

        return {key: self._coerce(key, value, config_path) for key, value in parsed.items()}

    def _coerce(self, key: str, value: Any, config_path: str) -> Any:
        if value is None:
            return None

        if key == "command_timeout":
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ContextError(
                    f"'command_timeout' in '{config_path}' must be a positive number of seconds."
                )
            return float(value)

        if key == "verbose":
            if not isinstance(value, bool):
                raise ContextError(f"'verbose' in '{config_path}' must be true or false.")
            return value

        if not isinstance(value, str):
            raise ContextError(f"'{key}' in '{config_path}' must be a string.")
        return os.path.expanduser(value) if key in self.PATH_KEYS else value
