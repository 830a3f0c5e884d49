import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .constants import DEFAULT_CREDENTIAL_FILE
from .context import EnvironmentContext
from .errors import ContextError
from .models import AccessType
from .services.config_loader import ConfigLoader

console = Console()


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


def _build_context(settings) -> EnvironmentContext:
    try:
        return EnvironmentContext(
            install_root=settings["install_root"],
            credential_file=settings["credential_file"],
            remote_connect_string=settings["remote_connect_string"],
            remote_copy_string=settings["remote_copy_string"],
            command_timeout=settings["command_timeout"],
        )
    except ContextError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help="Path to a YAML configuration file. Defaults to .iiscommons.yml in the working or home directory.",
)
@click.option("--install-root", required=False, help="Root of the Information Server installation.")
@click.option(
    "--credential-file",
    required=False,
    type=click.Path(),
    help=f"Authorisation file to use (default: {DEFAULT_CREDENTIAL_FILE}).",
)
@click.option(
    "--command-timeout",
    required=False,
    type=float,
    default=None,
    help="Timeout in seconds for external commands (default: none).",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
@click.pass_context
def main(ctx, config, install_root, credential_file, command_timeout, verbose, log_file):
    """Manage connection details for Information Server command-line tools."""
    logger = logging.getLogger("iiscommons")

    try:
        config_loader = ConfigLoader()
        config_values = config_loader.load(config or config_loader.find_default())
    except ContextError as exc:
        raise click.ClickException(str(exc)) from exc

    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")
    command_timeout = _resolve_option(command_timeout, config_values, "command_timeout")

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    ctx.obj = {
        "install_root": _resolve_option(install_root, config_values, "install_root"),
        "credential_file": _resolve_option(credential_file, config_values, "credential_file"),
        "remote_connect_string": config_values.get("remote_connect_string"),
        "remote_copy_string": config_values.get("remote_copy_string"),
        "command_timeout": float(command_timeout) if command_timeout is not None else None,
    }


@main.command("create-auth-file")
@click.option("-u", "--username", required=False, help="Username for authenticating into Information Server")
@click.option("-p", "--password", required=False, help="Password for authenticating into Information Server")
@click.option(
    "-f",
    "--file",
    "file_path",
    required=False,
    type=click.Path(),
    help="File into which to store authorisation details",
)
@click.pass_obj
def create_auth_file(settings, username, password, file_path):
    """Create an authorisation file usable by the platform CLI tools."""
    if not username:
        username = click.prompt("Please enter a username")
    if not username:
        raise click.ClickException("No username provided.")

    if not password:
        password = click.prompt("Please enter the user's password", hide_input=True)
        password_check = click.prompt("Please enter the same password again", hide_input=True)
        if password != password_check:
            raise click.ClickException("Passwords entered were not identical.")

    env_ctx = _build_context(settings)
    target = file_path or settings["credential_file"] or DEFAULT_CREDENTIAL_FILE

    try:
        written = env_ctx.create_auth_file(username, password, target)
    except ContextError as exc:
        raise click.ClickException(str(exc)) from exc

    console.print(f"[green]Authorisation file created:[/green] {written}")


@main.command("add-remote-details")
@click.option(
    "--access-type",
    required=True,
    type=click.Choice([member.value for member in AccessType], case_sensitive=False),
    help="How to reach the platform host.",
)
@click.option("--host", "host_or_container", required=True, help="SSH host or docker container name.")
@click.option("--user", "username", required=False, help="SSH username.")
@click.option("--key", "private_key", required=False, type=click.Path(), help="SSH private key file.")
@click.option("--port", required=False, type=int, help="SSH port.")
@click.option(
    "-f",
    "--file",
    "file_path",
    required=False,
    type=click.Path(),
    help="Authorisation file to append the details to",
)
@click.pass_obj
def add_remote_details(settings, access_type, host_or_container, username, private_key, port, file_path):
    """Append remote execution details to an existing authorisation file."""
    env_ctx = _build_context(settings)

    try:
        templates = env_ctx.add_remote_connection_details(
            file_path,
            access_type,
            username=username,
            private_key=private_key,
            host_or_container=host_or_container,
            port=port,
        )
    except ContextError as exc:
        raise click.ClickException(str(exc)) from exc

    console.print(f"[green]Remote access:[/green] {templates.connect_string}")


@main.command("info")
@click.pass_obj
def info(settings):
    """Show what is known about the current environment."""
    env_ctx = _build_context(settings)

    table = Table(show_header=False)
    table.add_row("Install root", env_ctx.install_root)
    table.add_row("On host", "yes" if env_ctx.on_host else "no")
    table.add_row("Version", env_ctx.current_version)
    table.add_row("Patches", ", ".join(p.patch_id for p in env_ctx.installed_patches) or "-")
    table.add_row("Modules", ", ".join(env_ctx.installed_modules) or "-")
    table.add_row("Authorisation file", env_ctx.credential_file)

    try:
        table.add_row("Domain", env_ctx.resolve_domain())
        table.add_row("Engine", env_ctx.resolve_engine())
    except ContextError as exc:
        console.print(f"[yellow]Warning:[/yellow] {exc}")

    console.print(table)


if __name__ == "__main__":
    main()
