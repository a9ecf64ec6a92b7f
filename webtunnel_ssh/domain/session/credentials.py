"""
Relay credential resolution
"""
from typing import Optional

from ...core.interfaces import PromptProvider
from ...core.logging import get_logger
from .models import Credentials

logger = get_logger(__name__)

USERNAME_PROMPT = "Remote Manager Username"
PASSWORD_PROMPT = "Remote Manager Password"


class CredentialResolver:
    """
    Resolves Remote Manager credentials.

    Fields supplied through configuration or command-line options are used
    as-is; missing fields are asked for once each through the prompt
    provider. The answer is never validated, so a blank password typed at
    the prompt is passed on to the relay unchanged.
    """

    def __init__(self, prompt_provider: PromptProvider):
        self.prompt_provider = prompt_provider

    def resolve(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> Credentials:
        """
        Resolve credentials, prompting for missing fields.

        Args:
            username: Username from configuration or options
            password: Password from configuration or options

        Returns:
            Resolved credentials
        """
        if not username:
            username = self.prompt_provider.prompt(USERNAME_PROMPT)
        if not password:
            password = self.prompt_provider.prompt(PASSWORD_PROMPT, password=True)

        credentials = Credentials(username=username or "", password=password or "")
        if not credentials.is_complete():
            logger.warning("Remote Manager credentials are incomplete; the relay will likely reject them")
        return credentials
