"""
SSH client selection and argument construction
"""
import os
import shutil
from typing import List, Optional, Sequence

from ...core.constants import DEFAULT_SSH_CLIENT, SCP_CLIENT, WINDOWS_SSH_CLIENTS
from ...core.exceptions import ConfigError
from ...core.logging import get_logger
from .models import ClientSpec

logger = get_logger(__name__)


def default_client() -> str:
    """
    Platform default SSH client.

    On Windows the first of ssh.exe or putty.exe found on PATH, otherwise
    plain ``ssh``. Returns "" if nothing usable is found on Windows.
    """
    if os.name == "nt":
        for name in WINDOWS_SSH_CLIENTS:
            path = shutil.which(name)
            if path:
                return path
        return ""
    return DEFAULT_SSH_CLIENT


def select_client(
    configured: Optional[str] = None,
    option: Optional[str] = None,
    scp: bool = False,
) -> ClientSpec:
    """
    Select the client executable.

    Precedence, lowest first: platform default, ``ssh.executable``
    configuration, ``--ssh-client`` option, ``--scp`` flag.

    Raises:
        ConfigError: If no client executable is available
    """
    executable = default_client()
    if configured:
        executable = configured
    if option:
        executable = option
    if scp:
        executable = SCP_CLIENT

    if not executable:
        raise ConfigError(
            "No SSH client program available. Please configure the SSH client program "
            "using the ssh.executable configuration property or ssh-client option."
        )

    spec = ClientSpec.for_executable(executable)
    logger.debug(f"Using SSH client {executable} ({spec.style.name})")
    return spec


def locate_client(spec: ClientSpec) -> str:
    """
    Resolve the client executable to a path.

    Raises:
        ConfigError: If the executable cannot be found
    """
    path = shutil.which(spec.executable)
    if not path:
        raise ConfigError(
            f"SSH client program '{spec.executable}' not found. Please configure the SSH client "
            "program using the ssh.executable configuration property or ssh-client option."
        )
    return path


class ClientInvocationBuilder:
    """Builds the argument vector pointing a client at the local tunnel endpoint"""

    def build(
        self,
        spec: ClientSpec,
        local_port: int,
        login_name: Optional[str] = None,
        trailing_args: Sequence[str] = (),
    ) -> List[str]:
        """
        Build client arguments.

        Args:
            spec: Client executable and conventions
            local_port: Bound local tunnel port
            login_name: Remote login name (ignored by scp-style clients)
            trailing_args: User arguments passed through verbatim

        Returns:
            Arguments, excluding the executable itself
        """
        return spec.style.build_args(local_port, login_name, list(trailing_args))
