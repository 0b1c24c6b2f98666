"""
Minikube Service for K3s Suite

Starts, stops and reports the status of the local development cluster by
shelling out to the minikube CLI. Commands run in a worker thread so a slow
`minikube start` never blocks the event loop.
"""

import asyncio
import json
import logging
import subprocess
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from config.settings import AppConfig

logger = logging.getLogger(__name__)

# Public API
__all__ = [
    'MinikubeService',
    'MinikubeError',
    'MinikubeNotInstalledError',
    'MinikubeCommandError',
    'CommandResult',
    'get_minikube_service',
    'STOPPED_STATUS',
]

# Reported when `minikube status` fails without printing JSON
STOPPED_STATUS = {'Host': 'Stopped', 'Kubelet': 'Stopped', 'APIServer': 'Stopped'}


class MinikubeError(RuntimeError):
    """Base error for minikube operations."""
    pass


class MinikubeNotInstalledError(MinikubeError):
    """Raised when the minikube binary is not on PATH."""
    pass


class MinikubeCommandError(MinikubeError):
    """Raised when a minikube command exits non-zero or times out."""
    pass


@dataclass
class CommandResult:
    """Outcome of one minikube invocation."""
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class MinikubeService:
    """Thin async wrapper around the minikube CLI."""

    def __init__(self, binary: str = 'minikube', timeout: Optional[int] = None):
        self.binary = binary
        self.timeout = timeout if timeout is not None else AppConfig.MINIKUBE_TIMEOUT

    async def _run(self, args: List[str]) -> CommandResult:
        """
        Run a minikube command.

        Non-zero exit is reported in the result, not raised: `minikube status`
        exits non-zero whenever the cluster is not running.

        Raises:
            MinikubeNotInstalledError: Binary not found
            MinikubeCommandError: Command timed out
        """
        command = [self.binary] + args
        logger.debug(f"Running: {' '.join(command)}")
        try:
            completed = await asyncio.to_thread(
                subprocess.run,
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except FileNotFoundError:
            raise MinikubeNotInstalledError(f"{self.binary} command not found")
        except subprocess.TimeoutExpired:
            raise MinikubeCommandError(
                f"'{' '.join(command)}' timed out after {self.timeout}s"
            )

        if completed.returncode != 0:
            logger.warning(
                f"Minikube command '{' '.join(args)}' exited with {completed.returncode}: "
                f"{(completed.stderr or '').strip()[:200]}"
            )
        return CommandResult(
            returncode=completed.returncode,
            stdout=completed.stdout or '',
            stderr=completed.stderr or '',
        )

    async def get_status(self) -> Dict[str, Any]:
        """
        Get cluster status from `minikube status -o json`.

        Returns:
            The JSON status object when minikube printed one (it does so even
            when stopped), STOPPED_STATUS when the command failed without
            JSON, or {'status': 'Unknown', 'details': stderr} otherwise.
        """
        result = await self._run(['status', '-o', 'json'])

        if result.stdout.strip():
            try:
                status = json.loads(result.stdout)
                if isinstance(status, dict):
                    return status
            except ValueError as e:
                logger.error(f"Failed to parse minikube status JSON: {e}")

        if not result.ok:
            return dict(STOPPED_STATUS)
        return {'status': 'Unknown', 'details': result.stderr}

    async def start(self) -> str:
        """Start the cluster and return minikube's output"""
        return await self._run_checked(['start'])

    async def stop(self) -> str:
        """Stop the cluster and return minikube's output"""
        return await self._run_checked(['stop'])

    async def _run_checked(self, args: List[str]) -> str:
        result = await self._run(args)
        if not result.ok:
            message = result.stderr.strip() or f"minikube {' '.join(args)} exited with {result.returncode}"
            raise MinikubeCommandError(message)
        logger.info(f"minikube {' '.join(args)} completed")
        return result.stdout


_minikube_service: Optional[MinikubeService] = None
_minikube_service_lock = threading.Lock()


def get_minikube_service() -> MinikubeService:
    """
    Get or create the singleton MinikubeService instance.

    Thread-safe using double-checked locking pattern.
    """
    global _minikube_service

    if _minikube_service is not None:
        return _minikube_service

    with _minikube_service_lock:
        if _minikube_service is None:
            _minikube_service = MinikubeService()
        return _minikube_service
