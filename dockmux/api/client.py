"""
Docker Client - Main API entry point
"""

import logging
from typing import Optional

from .http_client import DockerHTTPClient
from .images import ImageCollection
from .containers import ContainerCollection
from .networks import NetworkCollection
from .volumes import VolumeCollection

logger = logging.getLogger(__name__)


class DockerClient:
    """
    Docker API Client
    Pure Python implementation without external dependencies
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = 60,
                 version: Optional[str] = None):
        """
        Initialize Docker client

        Args:
            base_url: Daemon address: socket path, unix://, tcp:// (default: auto-detect)
            timeout: Request timeout in seconds
            version: API version prefix, e.g. '1.43'
        """
        self.http = DockerHTTPClient(base_url=base_url, timeout=timeout, version=version)
        self.images = ImageCollection(self)
        self.containers = ContainerCollection(self)
        self.networks = NetworkCollection(self)
        self.volumes = VolumeCollection(self)

    @classmethod
    def from_settings(cls, settings) -> 'DockerClient':
        """
        Build client from a SettingsManager

        Empty values fall back to auto-detection and defaults.
        """
        return cls(
            base_url=settings.get('docker_socket_path') or None,
            timeout=settings.get('timeout') or 60,
            version=settings.get('api_version') or None,
        )

    def version(self) -> dict:
        """Get Docker version info"""
        return self.http.get('/version')

    def info(self) -> dict:
        """Get Docker system info"""
        return self.http.get('/info')

    def ping(self) -> str:
        """Ping Docker daemon"""
        return self.http.get('/_ping')

    def close(self):
        """Close client (connections are per request, nothing to release)"""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
