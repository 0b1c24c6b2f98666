"""
System module: local development cluster control.

This module provides:
- MinikubeService: start/stop/status via the minikube CLI
- get_minikube_service(): Singleton accessor
"""
from system.minikube import (
    MinikubeService,
    MinikubeError,
    MinikubeNotInstalledError,
    MinikubeCommandError,
    get_minikube_service,
)

__all__ = [
    'MinikubeService',
    'MinikubeError',
    'MinikubeNotInstalledError',
    'MinikubeCommandError',
    'get_minikube_service',
]
