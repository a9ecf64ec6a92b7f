"""
Relay transport configuration: TLS trust policy and HTTP proxy
"""
import os
import ssl
from dataclasses import dataclass, field
from typing import Optional

from ...core.exceptions import ConfigError
from ...core.logging import get_logger
from .models import TlsPolicy, ProxySettings

logger = get_logger(__name__)


@dataclass(frozen=True)
class TransportSettings:
    """
    Transport settings shared by every relay connection of a run.

    Built once by TransportConfigurator before the tunnel is opened and
    passed explicitly to the connection factory.
    """
    tls: TlsPolicy = field(default_factory=TlsPolicy)
    proxy: Optional[ProxySettings] = None
    ssl_context: Optional[ssl.SSLContext] = field(default=None, compare=False, repr=False)

    @property
    def proxy_url(self) -> Optional[str]:
        return self.proxy.url if self.proxy else None


class TransportConfigurator:
    """Builds TransportSettings from a TLS policy and optional proxy settings"""

    def configure(
        self,
        tls: Optional[TlsPolicy] = None,
        proxy: Optional[ProxySettings] = None,
    ) -> TransportSettings:
        """
        Validate the policies and build the client SSL context.

        Args:
            tls: TLS trust policy (default: accept unknown certificates)
            proxy: HTTP proxy settings, or None for direct connections

        Returns:
            Immutable transport settings

        Raises:
            ConfigError: If the cipher list, CA location or proxy settings are invalid
        """
        tls = tls or TlsPolicy()
        logger.debug(f"TLS policy: {tls.to_dict()}")
        if proxy is not None:
            proxy.validate()
            logger.debug(f"Using HTTP proxy {proxy.host}:{proxy.port}")

        return TransportSettings(
            tls=tls,
            proxy=proxy,
            ssl_context=self.create_ssl_context(tls),
        )

    def create_ssl_context(self, tls: TlsPolicy) -> ssl.SSLContext:
        """Create a client SSL context enforcing ``tls``"""
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)

        if tls.ciphers:
            try:
                context.set_ciphers(tls.ciphers)
            except ssl.SSLError as e:
                raise ConfigError(f"Invalid tls.ciphers '{tls.ciphers}': {e}") from e

        if tls.accept_unknown_certificate:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
            return context

        context.verify_mode = ssl.CERT_REQUIRED
        context.check_hostname = tls.extended_verification
        if tls.ca_location:
            location = os.path.expanduser(tls.ca_location)
            try:
                if os.path.isdir(location):
                    context.load_verify_locations(capath=location)
                else:
                    context.load_verify_locations(cafile=location)
            except (OSError, ssl.SSLError) as e:
                raise ConfigError(f"Cannot load tls.caLocation '{tls.ca_location}': {e}") from e
        else:
            context.load_default_certs(ssl.Purpose.SERVER_AUTH)
        return context
