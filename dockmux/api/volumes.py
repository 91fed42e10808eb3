"""
Docker Volumes API
"""

import logging
from typing import List, Dict, Optional, Any

from .exceptions import NotFound, VolumeNotFound

logger = logging.getLogger(__name__)


class Volume:
    """Docker Volume object"""

    def __init__(self, client, attrs: dict):
        self.client = client
        self.attrs = attrs
        self.name = attrs.get('Name', '')
        self.id = self.name
        self.driver = attrs.get('Driver', 'local')
        self.mountpoint = attrs.get('Mountpoint', '')

    def __repr__(self):
        return f"<Volume: {self.name}>"

    def remove(self, force: bool = False):
        """Remove volume"""
        return self.client.remove(self.name, force=force)


class VolumeCollection:
    """Docker Volumes Collection"""

    def __init__(self, client):
        self.client = client

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Volume]:
        """
        List volumes

        Args:
            filters: dict of filters (e.g., {'dangling': ['true']})
        """
        data = self.client.http.get('/volumes', params={'filters': filters or None}) or {}

        for warning in data.get('Warnings') or []:
            logger.warning(f"Volume list: {warning}")

        return [Volume(self, vol) for vol in data.get('Volumes') or []]

    def get(self, name: str) -> Volume:
        """
        Get volume by name

        Raises:
            VolumeNotFound: If volume not found
        """
        try:
            data = self.client.http.get(f'/volumes/{name}')
        except NotFound as e:
            raise VolumeNotFound(f"Volume not found: {name}",
                                 response=e.response, status_code=e.status_code) from e
        return Volume(self, data)

    def create(self, name: Optional[str] = None, driver: str = 'local',
               driver_opts: Optional[Dict[str, str]] = None,
               labels: Optional[Dict[str, str]] = None) -> Volume:
        """
        Create volume

        Args:
            name: Volume name (daemon generates one if omitted)
            driver: Volume driver
            driver_opts: Driver options
            labels: Labels dict
        """
        data = {'Driver': driver}
        if name:
            data['Name'] = name
        if driver_opts:
            data['DriverOpts'] = driver_opts
        if labels:
            data['Labels'] = labels

        result = self.client.http.post('/volumes/create', data=data)
        logger.info(f"Volume created: {result.get('Name')}")
        return Volume(self, result)

    def remove(self, name: str, force: bool = False):
        """Remove volume"""
        return self.client.http.delete(f'/volumes/{name}', params={'force': force},
                                       errors={404: VolumeNotFound})

    def prune(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Remove unused volumes

        Returns:
            Dict with VolumesDeleted and SpaceReclaimed
        """
        return self.client.http.post('/volumes/prune', params={'filters': filters or None})
