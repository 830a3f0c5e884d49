"""Shared domain models for iis-commons."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class PatchEvent:
    patch_id: str
    patch_date: str


@dataclass(frozen=True)
class InventorySnapshot:
    """Installation details parsed from the platform install registry."""

    current_version: str
    patch_history: Tuple[PatchEvent, ...]
    installed_modules: Tuple[str, ...]
    console_port: str
    domain_host: str
    engine_host: str


@dataclass(frozen=True)
class InventoryResolution:
    snapshot: InventorySnapshot


@dataclass(frozen=True)
class CredentialFileResolution:
    """Tier details come from the authorisation file only."""


ResolutionSource = Union[InventoryResolution, CredentialFileResolution]


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a local or remote command, copy or removal."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class RemoteTarget:
    connect_string: Optional[str] = None
    copy_string: Optional[str] = None


class AccessType(str, Enum):
    SSH = "SSH"
    DOCKER = "DOCKER"
