import logging
import os
import shlex
from typing import Optional, Tuple, Union

from packaging import version

from .constants import (
    DEFAULT_CREDENTIAL_FILE,
    DEFAULT_INSTALL_ROOT,
    HOST_MARKER_FILE,
    SOURCE_PLACEHOLDER,
    TARGET_PLACEHOLDER,
    UNKNOWN_VERSION,
    VERSION_XML,
)
from .errors import (
    ContextError,
    CredentialFileNotFoundError,
    EncryptionError,
    HostRequiredError,
)
from .errors_catalog import actionable_error
from .models import (
    AccessType,
    CommandResult,
    CredentialFileResolution,
    InventoryResolution,
    InventorySnapshot,
    PatchEvent,
    RemoteTarget,
    ResolutionSource,
)
from .rest_connection import RestConnection
from .services.command_runner import CommandRunner
from .services.credential_store import CredentialStore
from .services.filesystem import FileSystemService
from .services.inventory import parse_inventory
from .services.remote_bridge import RemoteBridge

logger = logging.getLogger("iiscommons")


class EnvironmentContext:
    """Everything a CLI tool needs to know about one Information Server environment.

    Whether the process runs on the platform host is decided once, here in the
    constructor. Tier details then come either from the install registry or,
    when that cannot be read, from the authorisation file. Commands, copies and
    removals are run locally on the host and through the remote bridge
    everywhere else.
    """

    def __init__(
        self,
        install_root: Optional[str] = None,
        credential_file: Optional[str] = None,
        remote_connect_string: Optional[str] = None,
        remote_copy_string: Optional[str] = None,
        command_timeout: Optional[float] = None,
        host_marker: str = HOST_MARKER_FILE,
        command_runner: Optional[CommandRunner] = None,
    ):
        self._install_root = install_root or DEFAULT_INSTALL_ROOT
        self._engine_home: Optional[str] = None
        self._credential_file = credential_file
        self._remote_override = RemoteTarget(remote_connect_string, remote_copy_string)
        self._remote_target: Optional[RemoteTarget] = None

        self._username: Optional[str] = None
        self._password: Optional[str] = None
        self._domain: Optional[Tuple[str, str]] = None
        self._engine_host: Optional[str] = None
        self._rest_connection: Optional[RestConnection] = None

        self.command_runner = command_runner or CommandRunner(
            logger=logger, default_timeout=command_timeout
        )
        self.filesystem_service = FileSystemService(logger=logger)
        self.credential_store = CredentialStore(
            logger=logger, filesystem_service=self.filesystem_service
        )
        self.remote_bridge = RemoteBridge(logger=logger, command_runner=self.command_runner)

        self._on_host = self._detect_host(host_marker)
        self._resolution = self._resolve_inventory()

    # -- construction -----------------------------------------------------

    def _detect_host(self, host_marker: str) -> bool:
        if os.path.isfile(host_marker):
            with open(host_marker, "r", encoding="utf-8") as file_obj:
                dshome = file_obj.read().strip()
            if dshome:
                self._engine_home = dshome
                self._install_root = os.path.dirname(os.path.dirname(dshome))
            logger.debug("Host marker %s found, install root is %s", host_marker, self._install_root)
            return True

        if os.path.isdir(self._install_root):
            logger.warning(
                "This does not appear to be the engine tier, you may run into problems..."
            )
            return True

        logger.info(
            "No local installation found at %s, using remote access.", self._install_root
        )
        return False

    def _resolve_inventory(self) -> ResolutionSource:
        try:
            xml_text = self._read_inventory_text()
            snapshot = parse_inventory(xml_text)
        except (ContextError, OSError) as exc:
            logger.warning("Install registry unavailable, using authorisation file details: %s", exc)
            return CredentialFileResolution()

        logger.debug("Install registry reports version %s", snapshot.current_version)
        return InventoryResolution(snapshot)

    def _read_inventory_text(self) -> str:
        if self._on_host:
            with open(self.version_xml_path, "r", encoding="utf-8") as file_obj:
                return file_obj.read()

        result = self.remote_bridge.execute_remote(
            self.remote_target(), f"cat {shlex.quote(self.version_xml_path)}"
        )
        if not result.ok:
            raise ContextError(
                result.stderr.strip() or f"Remote read of {self.version_xml_path} exited {result.exit_code}"
            )
        return result.stdout

    # -- paths and inventory ----------------------------------------------

    @property
    def on_host(self) -> bool:
        return self._on_host

    @property
    def resolution(self) -> ResolutionSource:
        return self._resolution

    @property
    def inventory(self) -> Optional[InventorySnapshot]:
        if isinstance(self._resolution, InventoryResolution):
            return self._resolution.snapshot
        return None

    @property
    def install_root(self) -> str:
        return self._install_root

    @property
    def engine_home(self) -> Optional[str]:
        return self._engine_home

    @property
    def asb_home(self) -> str:
        return os.path.join(self._install_root, "ASBNode")

    @property
    def istool_path(self) -> str:
        return os.path.join(self._install_root, "Clients", "istools", "cli", "istool.sh")

    @property
    def version_xml_path(self) -> str:
        return os.path.join(self._install_root, VERSION_XML)

    @property
    def current_version(self) -> str:
        snapshot = self.inventory
        return snapshot.current_version if snapshot else UNKNOWN_VERSION

    @property
    def installed_patches(self) -> Tuple[PatchEvent, ...]:
        snapshot = self.inventory
        return snapshot.patch_history if snapshot else ()

    @property
    def installed_modules(self) -> Tuple[str, ...]:
        snapshot = self.inventory
        return snapshot.installed_modules if snapshot else ()

    def version_at_least(self, minimum: str) -> bool:
        if self.current_version == UNKNOWN_VERSION:
            return False
        try:
            return version.parse(self.current_version) >= version.parse(minimum)
        except version.InvalidVersion:
            logger.warning("Cannot compare version %s with %s", self.current_version, minimum)
            return False

    # -- credential file --------------------------------------------------

    @property
    def credential_file(self) -> str:
        return self._credential_file or DEFAULT_CREDENTIAL_FILE

    @credential_file.setter
    def credential_file(self, path: str):
        if path != self._credential_file:
            # Remote templates are read from the authorisation file.
            self._remote_target = None
        self._credential_file = path

    def _read_credentials(self):
        return self.credential_store.read(self.credential_file)

    def _credential_field(self, key: str) -> str:
        value = self._read_credentials().get(key)
        if not value:
            raise ContextError(
                f"Authorisation file {self.credential_file} has no '{key}' entry."
            )
        return value

    def resolve_username(self) -> str:
        if self._username is None:
            self._username = self._credential_field("user")
        return self._username

    def resolve_password(self) -> str:
        if self._password is None:
            self._password = self._credential_field("password")
        return self._password

    def resolve_domain_host(self) -> str:
        return self._resolve_domain_parts()[0]

    def resolve_domain_port(self) -> str:
        return self._resolve_domain_parts()[1]

    def resolve_domain(self) -> str:
        host, port = self._resolve_domain_parts()
        return f"{host}:{port}"

    def resolve_engine(self) -> str:
        if self._engine_host is None:
            if isinstance(self._resolution, InventoryResolution):
                self._engine_host = self._resolution.snapshot.engine_host
            else:
                self._engine_host = self._credential_field("server")
        return self._engine_host.upper()

    def _resolve_domain_parts(self) -> Tuple[str, str]:
        if self._domain is None:
            if isinstance(self._resolution, InventoryResolution):
                snapshot = self._resolution.snapshot
                self._domain = (snapshot.domain_host, snapshot.console_port)
            else:
                domain = self._credential_field("domain")
                host, sep, port = domain.rpartition(":")
                if not sep or not host or not port:
                    raise ContextError(
                        f"Authorisation file {self.credential_file} has an invalid domain entry: {domain}"
                    )
                self._domain = (host, port)
        return self._domain

    def rest_connection(self) -> RestConnection:
        if self._rest_connection is None:
            self._rest_connection = RestConnection(
                self.resolve_username(),
                self.resolve_password(),
                self.resolve_domain_host(),
                self.resolve_domain_port(),
            )
        return self._rest_connection

    def create_auth_file(self, username: str, password: str, file: Optional[str] = None) -> str:
        """Create an authorisation file usable by most Information Server CLI tools.

        The password is encrypted with the platform's own encrypt.sh so that it
        never appears in the clear on a command line afterwards.
        """
        if not self._on_host:
            raise HostRequiredError(
                actionable_error("host_required", operation="Creating an authorisation file")
            )

        target = file or self.credential_file
        encrypt_cmd = os.path.join(self.asb_home, "bin", "encrypt.sh")
        result = self.command_runner.run([encrypt_cmd, password], redact=[password])
        encrypted = result.stdout.rstrip("\r\n")
        if not result.ok or not encrypted:
            raise EncryptionError(
                actionable_error("encryption_failed", exit_code=str(result.exit_code), command=encrypt_cmd)
            )

        self.credential_store.write(
            target,
            {
                "user": username,
                "password": encrypted,
                "domain": self.resolve_domain(),
                "server": self.resolve_engine(),
            },
        )
        self.credential_file = target
        self._username = username
        self._password = encrypted
        self._rest_connection = None
        return target

    # -- remote access ----------------------------------------------------

    def remote_target(self) -> RemoteTarget:
        if self._remote_target is None:
            connect = self._remote_override.connect_string
            copy = self._remote_override.copy_string
            if connect is None or copy is None:
                try:
                    fields = self._read_credentials()
                except CredentialFileNotFoundError:
                    logger.debug("No authorisation file for remote details at %s", self.credential_file)
                    fields = {}
                connect = connect or fields.get("remoteConnectString")
                copy = copy or fields.get("remoteCopyString")
            self._remote_target = RemoteTarget(connect, copy)
        return self._remote_target

    @staticmethod
    def build_remote_templates(
        access_type: Union[AccessType, str],
        username: Optional[str],
        private_key: Optional[str],
        host_or_container: str,
        port: Optional[Union[int, str]] = None,
    ) -> RemoteTarget:
        if not isinstance(access_type, AccessType):
            try:
                access_type = AccessType(str(access_type).upper())
            except ValueError as exc:
                raise ContextError(
                    f"Unsupported access type: {access_type}. Use SSH or DOCKER."
                ) from exc
        if not host_or_container:
            raise ContextError("A host or container name is required for remote access.")

        if access_type is AccessType.DOCKER:
            return RemoteTarget(
                f"docker exec -i {host_or_container}",
                f"docker cp {SOURCE_PLACEHOLDER} {host_or_container}:{TARGET_PLACEHOLDER}",
            )

        if not username or not private_key:
            raise ContextError("SSH access requires both a username and a private key.")
        ssh_port = f" -p {port}" if port else ""
        scp_port = f" -P {port}" if port else ""
        return RemoteTarget(
            f"ssh -i {private_key}{ssh_port} {username}@{host_or_container}",
            f"scp -i {private_key}{scp_port} {SOURCE_PLACEHOLDER} "
            f"{username}@{host_or_container}:{TARGET_PLACEHOLDER}",
        )

    def add_remote_connection_details(
        self,
        file: Optional[str],
        access_type: Union[AccessType, str],
        username: Optional[str] = None,
        private_key: Optional[str] = None,
        host_or_container: str = "",
        port: Optional[Union[int, str]] = None,
    ) -> RemoteTarget:
        templates = self.build_remote_templates(
            access_type, username, private_key, host_or_container, port
        )
        target = file or self.credential_file
        self.credential_store.append(
            target,
            f"remoteConnectString={templates.connect_string}\n"
            f"remoteCopyString={templates.copy_string}\n",
        )
        logger.info("Remote connection details appended to %s", target)
        if target == self.credential_file:
            self._remote_target = templates
        return templates

    # -- routed operations ------------------------------------------------

    def run_command(self, command: str) -> CommandResult:
        if self._on_host:
            return self.command_runner.run(command)
        return self.remote_bridge.execute_remote(
            self.remote_target(), command, local_credential_file=self.credential_file
        )

    def copy_file(self, source: str, target: str) -> CommandResult:
        if self._on_host:
            return self.filesystem_service.copy_file(source, target)
        return self.remote_bridge.copy_remote(self.remote_target(), source, target)

    def remove_file(self, file: str) -> CommandResult:
        if self._on_host:
            return self.filesystem_service.remove_file(file)
        return self.remote_bridge.remove_remote(self.remote_target(), file)
