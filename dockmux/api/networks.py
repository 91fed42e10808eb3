"""
Docker Networks API
"""

import logging
from typing import List, Dict, Optional, Any

from .exceptions import NetworkNotFound, NotFound

logger = logging.getLogger(__name__)

SCOPE_LOCAL = 'local'
SCOPE_GLOBAL = 'global'
SCOPE_SWARM = 'swarm'
NETWORK_SCOPES = (SCOPE_LOCAL, SCOPE_GLOBAL, SCOPE_SWARM)


def check_scope(scope: str):
    """Raise ValueError unless scope is local, global or swarm"""
    if scope not in NETWORK_SCOPES:
        raise ValueError(f"Network scope must be {SCOPE_LOCAL}, {SCOPE_GLOBAL} or {SCOPE_SWARM}")


def ipam_config(driver: str = 'default', config: Optional[List[Dict[str, str]]] = None,
                options: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """
    Build an IPAM block for network creation

    Args:
        driver: IPAM driver name
        config: List of pool configs, e.g. [{'Subnet': '172.28.0.0/16'}]
        options: Driver-specific options
    """
    ipam = {'Driver': driver}
    if config is not None:
        ipam['Config'] = config
    if options is not None:
        ipam['Options'] = options
    return ipam


class Network:
    """Docker Network object"""

    def __init__(self, client, attrs: dict):
        self.client = client
        self.attrs = attrs
        self.id = attrs.get('Id', '')
        self.short_id = self.id[:12]
        self.name = attrs.get('Name', '')
        self.driver = attrs.get('Driver', 'unknown')
        self.scope = attrs.get('Scope', SCOPE_LOCAL)

    def __repr__(self):
        return f"<Network: {self.name or self.short_id}>"

    @property
    def containers(self) -> Dict[str, Any]:
        return self.attrs.get('Containers') or {}

    def reload(self):
        """Reload network data"""
        self.attrs = self.client.get(self.id).attrs
        return self

    def connect(self, container_id: str, aliases: Optional[List[str]] = None):
        return self.client.connect(self.id, container_id, aliases=aliases)

    def disconnect(self, container_id: str, force: bool = False):
        return self.client.disconnect(self.id, container_id, force=force)

    def remove(self):
        """Remove network"""
        return self.client.remove(self.id)


class NetworkCollection:
    """Docker Networks Collection"""

    def __init__(self, client):
        self.client = client

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Network]:
        """
        List networks

        Args:
            filters: dict of filters (e.g., {'name': ['mynet']})

        Returns:
            List of Network objects
        """
        data = self.client.http.get('/networks', params={'filters': filters or None})
        return [Network(self, net) for net in data or []]

    def get(self, network_id: str) -> Network:
        """
        Get network by ID or name

        Raises:
            NetworkNotFound: If network not found
        """
        try:
            data = self.client.http.get(f'/networks/{network_id}')
        except NotFound as e:
            raise NetworkNotFound(f"Network not found: {network_id}",
                                  response=e.response, status_code=e.status_code) from e
        return Network(self, data)

    def create(self, name: str, driver: str = 'bridge', internal: bool = False,
               attachable: bool = True, options: Optional[Dict[str, str]] = None,
               labels: Optional[Dict[str, str]] = None, ipam: Optional[Dict[str, Any]] = None,
               scope: Optional[str] = None, enable_ipv6: bool = False) -> Network:
        """
        Create network

        Args:
            name: Network name
            driver: Network driver
            internal: Restrict external access
            attachable: Allow manual container attachment
            options: Driver options dict
            labels: Labels dict
            ipam: IPAM block, see ipam_config()
            scope: 'local', 'global' or 'swarm'
            enable_ipv6: Enable IPv6

        Returns:
            Network object
        """
        data = {
            'Name': name,
            'Driver': driver,
            'Internal': internal,
            'Attachable': attachable,
            'CheckDuplicate': True,
        }

        if scope is not None:
            check_scope(scope)
            data['Scope'] = scope
        if enable_ipv6:
            data['EnableIPv6'] = True
        if options:
            data['Options'] = options
        if labels:
            data['Labels'] = labels
        if ipam:
            data['IPAM'] = ipam

        result = self.client.http.post('/networks/create', data=data)
        if result.get('Warning'):
            logger.warning(f"Network create: {result['Warning']}")

        logger.info(f"Network created: {name}")
        return self.get(result['Id'])

    def remove(self, network_id: str):
        """Remove network"""
        return self.client.http.delete(f'/networks/{network_id}', errors={404: NetworkNotFound})

    def connect(self, network_id: str, container_id: str, aliases: Optional[List[str]] = None):
        """Connect a container to a network"""
        data = {'Container': container_id}
        if aliases:
            data['EndpointConfig'] = {'Aliases': aliases}
        return self.client.http.post(f'/networks/{network_id}/connect', data=data,
                                     errors={404: NetworkNotFound})

    def disconnect(self, network_id: str, container_id: str, force: bool = False):
        """Disconnect a container from a network"""
        data = {'Container': container_id, 'Force': force}
        return self.client.http.post(f'/networks/{network_id}/disconnect', data=data,
                                     errors={404: NetworkNotFound})

    def prune(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Remove unused networks

        Returns:
            Dict with NetworksDeleted
        """
        return self.client.http.post('/networks/prune', params={'filters': filters or None})
