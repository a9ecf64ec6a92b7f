"""
Session launcher - program state machine
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from ...core.interfaces import PromptProvider
from ...core.logging import get_logger
from .credentials import CredentialResolver
from .invocation import ClientInvocationBuilder, locate_client
from .models import ClientSpec, ConnectionParameters, ProxySettings, TlsPolicy
from .runner import SessionRunner
from .transport import TransportConfigurator
from .tunnel import TunnelSession

logger = get_logger(__name__)


class SessionState(Enum):
    """Launcher states, in order"""
    INIT = "init"
    RESOLVE_CONFIG = "resolve-config"
    OPEN_TUNNEL = "open-tunnel"
    BUILD_INVOCATION = "build-invocation"
    SPAWN_CLIENT = "spawn-client"
    WAIT_CHILD = "wait-child"
    EXIT = "exit"


@dataclass
class LaunchOptions:
    """Everything a launch needs, resolved from options and configuration"""
    params: ConnectionParameters
    client: ClientSpec
    login_name: Optional[str] = None
    trailing_args: List[str] = field(default_factory=list)
    username: Optional[str] = None
    password: Optional[str] = None
    tls: Optional[TlsPolicy] = None
    proxy: Optional[ProxySettings] = None


class Launcher:
    """
    Runs one SSH/SCP session through the Remote Manager.

    Init -> ResolveConfig -> OpenTunnel -> BuildInvocation -> SpawnClient
    -> WaitChild -> Exit. Errors before SpawnClient propagate without
    starting the client. The tunnel is closed once the client exits.
    """

    def __init__(
        self,
        prompt_provider: PromptProvider,
        tunnel_session: Optional[TunnelSession] = None,
        runner: Optional[SessionRunner] = None,
        builder: Optional[ClientInvocationBuilder] = None,
        configurator: Optional[TransportConfigurator] = None,
        locate: Callable[[ClientSpec], str] = locate_client,
    ):
        self.credential_resolver = CredentialResolver(prompt_provider)
        self.tunnel_session = tunnel_session or TunnelSession()
        self.runner = runner or SessionRunner()
        self.builder = builder or ClientInvocationBuilder()
        self.configurator = configurator or TransportConfigurator()
        self.locate = locate
        self.state = SessionState.INIT

    def run(self, options: LaunchOptions) -> int:
        """
        Run the session.

        Args:
            options: Launch options

        Returns:
            The client's exit status

        Raises:
            ConfigError: If configuration or the client executable is unusable
            TunnelError: If the tunnel cannot be opened
            ClientProcessError: If the client cannot be spawned
        """
        try:
            self.state = SessionState.RESOLVE_CONFIG
            options.params.validate()
            executable = self.locate(options.client)
            transport = self.configurator.configure(options.tls, options.proxy)
            credentials = self.credential_resolver.resolve(options.username, options.password)

            self.state = SessionState.OPEN_TUNNEL
            with self.tunnel_session.open(options.params, credentials, transport) as tunnel:
                self.state = SessionState.BUILD_INVOCATION
                args = self.builder.build(
                    options.client,
                    tunnel.local_port,
                    options.login_name,
                    options.trailing_args,
                )

                self.state = SessionState.SPAWN_CLIENT
                rc = self.runner.run(executable, args)
                self.state = SessionState.WAIT_CHILD
            return rc
        finally:
            self.state = SessionState.EXIT
