"""
Application Services Layer

Orchestrates domain services and coordinates use cases.
"""

from .dependency_container import DependencyContainer, DependencyNotFoundError
from .share_service import DownloadHandle, ShareService
from .sweep_scheduler import SweepScheduler

__all__ = [
    'DependencyContainer',
    'DependencyNotFoundError',
    'DownloadHandle',
    'ShareService',
    'SweepScheduler',
]
