"""
Main CLI application
"""
import typer
from rich.markup import escape
from pathlib import Path
from typing import List, Optional

from ... import __version__
from ...core.constants import EXIT_CONFIG, EXIT_OSERR, DEFAULT_LOG_LEVEL
from ...core.exceptions import ConfigError, TunnelError, ClientProcessError
from ...core.logging import setup_logging, get_logger, get_stderr_console, get_stdout_console
from ...domain.session import Launcher, LaunchOptions, select_client
from ..config.loader import ConfigLoader
from ..config.settings import connection_parameters, tls_policy, proxy_settings
from .prompts import RichPromptProvider

logger = get_logger(__name__)
stdout_console = get_stdout_console()
stderr_console = get_stderr_console()

HELP = """
Remote Manager SSH Client.

Launches a SSH (or SCP) connection to a remote device via the
Remote Manager server. The device is reached through a local
tunnel port; the SSH client connects to localhost.

<Remote-URI> specifies the URI of the remote device via the
Remote Manager server, e.g.:
https://8ba57423-ec1a-4f31-992f-a66c240cbfa0.my-devices.net

Arguments after "--" are passed to the SSH client.
"""

app = typer.Typer(
    name="webtunnel-ssh",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _version_callback(value: bool) -> None:
    if value:
        stdout_console.print(f"webtunnel-ssh {__version__}")
        raise typer.Exit()


@app.command(
    help=HELP,
    epilog="For more information, please visit the macchina.io website at https://macchina.io.",
)
def main(
    ctx: typer.Context,
    remote_uri: Optional[str] = typer.Argument(
        None,
        metavar="<Remote-URI>",
        help="URI of the remote device on the Remote Manager server",
        show_default=False,
    ),
    client_args: Optional[List[str]] = typer.Argument(
        None,
        metavar="SSH-OPTIONS...",
        help="Arguments passed through to the SSH client",
        show_default=False,
    ),
    config_files: Optional[List[Path]] = typer.Option(
        None,
        "--config-file", "-c",
        metavar="file",
        help="Load configuration data from a file (repeatable)",
    ),
    ssh_client: Optional[str] = typer.Option(
        None,
        "--ssh-client", "-C",
        metavar="program",
        help="Specify the name of the SSH client executable (default: ssh or putty.exe)",
    ),
    scp: bool = typer.Option(
        False,
        "--scp",
        help="Use scp as SSH client for copying files between local host and target",
    ),
    local_port: Optional[int] = typer.Option(
        None,
        "--local-port", "-L",
        min=1, max=65535,
        metavar="port",
        help="Specify local port number (default: ephemeral)",
    ),
    remote_port: Optional[int] = typer.Option(
        None,
        "--remote-port", "-R",
        min=1, max=65535,
        metavar="port",
        help="Specify remote port number (default: SSH/22)",
    ),
    username: Optional[str] = typer.Option(
        None,
        "--username", "-u",
        metavar="username",
        help="Specify username for Remote Manager server",
    ),
    password: Optional[str] = typer.Option(
        None,
        "--password", "-p",
        metavar="password",
        help="Specify password for Remote Manager server",
    ),
    login_name: Optional[str] = typer.Option(
        None,
        "--login-name", "-l",
        metavar="username",
        help="Specify remote (SSH) login name",
    ),
    defines: Optional[List[str]] = typer.Option(
        None,
        "--define", "-D",
        metavar="name=value",
        help="Define or override a configuration property (repeatable)",
    ),
    log_level: str = typer.Option(
        DEFAULT_LOG_LEVEL,
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Log file path",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    setup_logging(level=log_level, log_file=log_file)

    if not remote_uri:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    try:
        config = ConfigLoader().load(config_files=config_files or [], defines=defines or [])
        options = LaunchOptions(
            params=connection_parameters(config, remote_uri, local_port, remote_port),
            client=select_client(
                configured=config.get_string("ssh.executable", ""),
                option=ssh_client,
                scp=scp,
            ),
            login_name=login_name,
            trailing_args=list(client_args or []),
            username=username or config.get_string("webtunnel.username", ""),
            password=password or config.get_string("webtunnel.password", ""),
            tls=tls_policy(config),
            proxy=proxy_settings(config),
        )
        launcher = Launcher(RichPromptProvider())
        rc = launcher.run(options)
    except ConfigError as e:
        stderr_console.print(f"[red]Configuration Error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(EXIT_CONFIG)
    except TunnelError as e:
        stderr_console.print(f"[red]Tunnel Error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(EXIT_CONFIG)
    except ClientProcessError as e:
        stderr_console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(EXIT_OSERR)

    raise typer.Exit(rc)


def run():
    """CLI entry point"""
    app()


if __name__ == "__main__":
    run()
