"""
SSH client process runner
"""
import subprocess
from typing import List, Sequence

from ...core.constants import EXIT_CONFIG
from ...core.exceptions import ClientProcessError
from ...core.logging import get_logger

logger = get_logger(__name__)


class SessionRunner:
    """Runs the SSH client in the foreground and reports its exit status"""

    def run(self, executable: str, args: Sequence[str]) -> int:
        """
        Spawn ``executable`` with inherited standard streams and wait for it.

        Args:
            executable: Client executable name or path
            args: Client arguments

        Returns:
            The client's exit code; 128 + N if it was killed by signal N;
            EXIT_CONFIG if ``executable`` is empty

        Raises:
            ClientProcessError: If the process cannot be spawned
        """
        if not executable:
            logger.error("No SSH client program available")
            return EXIT_CONFIG

        command: List[str] = [executable, *args]
        logger.debug(f"Launching SSH client: {executable}")
        try:
            process = subprocess.Popen(command)
        except OSError as e:
            raise ClientProcessError(f"Cannot launch SSH client '{executable}': {e}") from e

        rc = self._wait(process)
        logger.debug(f"SSH client terminated with exit code {rc}")
        return rc

    def _wait(self, process: subprocess.Popen) -> int:
        # Ctrl-C reaches the client directly; keep waiting for it to exit
        while True:
            try:
                rc = process.wait()
                break
            except KeyboardInterrupt:
                continue
        if rc < 0:
            return 128 - rc
        return rc
