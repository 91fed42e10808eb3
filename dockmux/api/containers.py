"""
Docker Containers API
"""

import logging
from typing import List, Dict, Any, Optional, Union

from .channel import ByteChannel
from .demux import Demultiplexer
from .exceptions import (
    ContainerAlreadyStarted,
    ContainerNotFound,
    ContainerRemoveConflict,
    NotFound,
)

logger = logging.getLogger(__name__)

BASE_PATH = '/containers'


class Container:
    """Docker Container object"""

    def __init__(self, attrs: Dict[str, Any], client):
        self.attrs = attrs
        self.client = client
        self.id = attrs.get('Id', '')
        self.short_id = self.id[:12] if self.id else ''
        self.name = attrs.get('Name', attrs.get('Names', [''])[0] if attrs.get('Names') else '').lstrip('/')

        # Inspect returns a State object, list returns a string
        state = attrs.get('State', {})
        if isinstance(state, dict):
            self.status = state.get('Status', 'unknown')
        else:
            self.status = state if isinstance(state, str) else attrs.get('Status', 'unknown')

        self.image = attrs.get('Image', attrs.get('ImageID', ''))
        self.labels = attrs.get('Labels') or attrs.get('Config', {}).get('Labels') or {}

    def __repr__(self):
        return f"<Container: {self.name or self.short_id}>"

    @property
    def tty(self) -> bool:
        """Container was created with a pseudo-terminal"""
        return bool(self.attrs.get('Config', {}).get('Tty', False))

    def reload(self):
        """Reload container data"""
        updated = self.client.inspect(self.id)
        self.attrs = updated.attrs
        self.name = updated.name
        self.status = updated.status
        self.labels = updated.labels
        return self

    def start(self, detach_keys: Optional[str] = None):
        """Start this container"""
        return self.client.start(self.id, detach_keys=detach_keys)

    def stop(self, timeout: Optional[int] = None):
        """Stop this container"""
        return self.client.stop(self.id, timeout=timeout)

    def restart(self, timeout: Optional[int] = None):
        """Restart this container"""
        return self.client.restart(self.id, timeout=timeout)

    def kill(self, signal: Optional[str] = None):
        """Kill this container"""
        return self.client.kill(self.id, signal=signal)

    def rename(self, new_name: str):
        """Rename this container"""
        self.client.rename(self.id, new_name)
        self.name = new_name

    def pause(self):
        return self.client.pause(self.id)

    def unpause(self):
        return self.client.unpause(self.id)

    def remove(self, force: bool = False, v: bool = False, link: bool = False):
        """Remove this container"""
        return self.client.remove(self.id, force=force, v=v, link=link)

    def wait(self, condition: Optional[str] = None) -> Dict[str, Any]:
        """Wait for this container to stop"""
        return self.client.wait(self.id, condition=condition)

    def logs(self, **kwargs):
        """Get container logs, see ContainerCollection.logs"""
        kwargs.setdefault('tty', self.tty if 'Config' in self.attrs else None)
        return self.client.logs(self.id, **kwargs)

    def attach(self, **kwargs):
        """Attach to container output, see ContainerCollection.attach"""
        kwargs.setdefault('tty', self.tty if 'Config' in self.attrs else None)
        return self.client.attach(self.id, **kwargs)


class LogStream:
    """
    Frames of one logs/attach session

    Owns the streaming response; close it (or use it as a context manager)
    to release the connection when iteration stops early.
    """

    def __init__(self, response, stdout: bool = True, stderr: bool = True,
                 tty: Optional[bool] = None):
        self.response = response
        self.channel = ByteChannel(response)
        self.demux = Demultiplexer(self.channel, stdout=stdout, stderr=stderr, tty=tty)

    def __iter__(self):
        try:
            for frame in self.demux:
                yield frame
        finally:
            self.close()

    def close(self):
        """Close the underlying connection"""
        self.channel.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class ContainerCollection:
    """Docker Containers collection"""

    def __init__(self, client):
        self.client = client

    def _not_found(self, container_id: str, e: NotFound) -> ContainerNotFound:
        return ContainerNotFound(f"Container not found: {container_id}",
                                 response=e.response, status_code=e.status_code)

    def list(self, all: bool = False, limit: Optional[int] = None, size: bool = False,
             filters: Optional[Dict[str, Any]] = None) -> List[Container]:
        """
        List containers

        Args:
            all: Show all containers (including stopped)
            limit: Maximum number of containers to return
            size: Return container sizes
            filters: Filters to apply

        Returns:
            List of Container objects
        """
        params = {'all': all, 'limit': limit, 'size': size or None, 'filters': filters or None}

        containers_data = self.client.http.get(f'{BASE_PATH}/json', params=params)
        return [Container(c_data, self) for c_data in containers_data or []]

    def inspect(self, container_id: str, size: bool = False) -> Container:
        """
        Get low-level information about a container

        Args:
            container_id: Container ID or name
            size: Include SizeRw and SizeRootFs

        Raises:
            ContainerNotFound: If container not found
        """
        try:
            container_data = self.client.http.get(
                f'{BASE_PATH}/{container_id}/json',
                params={'size': size or None}
            )
        except NotFound as e:
            raise self._not_found(container_id, e) from e
        return Container(container_data, self)

    def get(self, container_id: str) -> Container:
        """Get container by ID or name"""
        return self.inspect(container_id)

    def create(self, image: str, name: Optional[str] = None,
               command: Optional[Union[str, List[str]]] = None,
               environment: Optional[Dict[str, str]] = None,
               volumes: Optional[Dict[str, Dict[str, str]]] = None,
               ports: Optional[Dict[str, int]] = None,
               stdin_open: bool = False, tty: bool = False,
               network_mode: Optional[str] = None, hostname: Optional[str] = None,
               auto_remove: bool = False, platform: Optional[str] = None,
               **kwargs) -> Container:
        """
        Create container

        Args:
            image: Image name or ID
            name: Container name
            command: Command to run (string runs through sh -c)
            environment: Environment variables
            volumes: Volume mounts {host_path: {'bind': container_path, 'mode': 'rw'}}
            ports: Port bindings {container_port: host_port}
            stdin_open: Keep STDIN open
            tty: Allocate TTY
            network_mode: Network mode
            hostname: Container hostname
            auto_remove: Auto-remove when stopped
            platform: Platform (e.g., linux/amd64)
            **kwargs: Raw create config entries

        Returns:
            Container object
        """
        if not image:
            raise ValueError("Container image is required")

        config = {
            'Image': image,
            'Tty': tty,
            'OpenStdin': stdin_open,
            'StdinOnce': False,
            'AttachStdin': stdin_open,
            'AttachStdout': True,
            'AttachStderr': True,
        }

        if command:
            if isinstance(command, str):
                config['Cmd'] = ['sh', '-c', command]
            else:
                config['Cmd'] = list(command)

        if environment:
            config['Env'] = [f"{k}={v}" for k, v in environment.items()]

        if hostname:
            config['Hostname'] = hostname

        host_config = {}

        if auto_remove:
            host_config['AutoRemove'] = auto_remove

        if network_mode:
            host_config['NetworkMode'] = network_mode

        if volumes:
            binds = []
            for host_path, mount_info in volumes.items():
                container_path = mount_info.get('bind', '')
                mode = mount_info.get('mode', 'rw')
                binds.append(f"{host_path}:{container_path}:{mode}")
            host_config['Binds'] = binds

        if ports:
            port_bindings = {}
            exposed_ports = {}
            for container_port, host_port in ports.items():
                port_key = f"{container_port}/tcp"
                exposed_ports[port_key] = {}
                port_bindings[port_key] = [{'HostPort': str(host_port)}]
            config['ExposedPorts'] = exposed_ports
            host_config['PortBindings'] = port_bindings

        if host_config:
            config['HostConfig'] = host_config

        config.update(kwargs)

        params = {'name': name, 'platform': platform}
        result = self.client.http.post(f'{BASE_PATH}/create', params=params, data=config)

        for warning in result.get('Warnings') or []:
            logger.warning(f"Container create: {warning}")

        container_id = result.get('Id')
        logger.info(f"Container created: {name or container_id[:12]}")
        return self.get(container_id)

    def run(self, image: str, command: Optional[Union[str, List[str]]] = None, **kwargs) -> Container:
        """Create and start container"""
        container = self.create(image, command=command, **kwargs)
        container.start()
        return container

    def start(self, container_id: str, detach_keys: Optional[str] = None):
        """
        Start container

        Raises:
            ContainerAlreadyStarted: If the container is already running
            ContainerNotFound: If container not found
        """
        return self.client.http.post(
            f'{BASE_PATH}/{container_id}/start',
            params={'detachKeys': detach_keys},
            errors={304: ContainerAlreadyStarted, 404: ContainerNotFound}
        )

    def stop(self, container_id: str, timeout: Optional[int] = None):
        """Stop container"""
        return self.client.http.post(
            f'{BASE_PATH}/{container_id}/stop',
            params={'t': timeout},
            errors={404: ContainerNotFound}
        )

    def restart(self, container_id: str, timeout: Optional[int] = None):
        """Restart container"""
        return self.client.http.post(
            f'{BASE_PATH}/{container_id}/restart',
            params={'t': timeout},
            errors={404: ContainerNotFound}
        )

    def kill(self, container_id: str, signal: Optional[str] = None):
        """Kill container"""
        return self.client.http.post(
            f'{BASE_PATH}/{container_id}/kill',
            params={'signal': signal},
            errors={404: ContainerNotFound}
        )

    def rename(self, container_id: str, new_name: str):
        """Rename container"""
        return self.client.http.post(
            f'{BASE_PATH}/{container_id}/rename',
            params={'name': new_name},
            errors={404: ContainerNotFound}
        )

    def pause(self, container_id: str):
        """Pause all processes in container"""
        return self.client.http.post(f'{BASE_PATH}/{container_id}/pause',
                                     errors={404: ContainerNotFound})

    def unpause(self, container_id: str):
        """Resume a paused container"""
        return self.client.http.post(f'{BASE_PATH}/{container_id}/unpause',
                                     errors={404: ContainerNotFound})

    def remove(self, container_id: str, force: bool = False, v: bool = False, link: bool = False):
        """
        Remove container

        Args:
            container_id: Container ID
            force: Kill the container first if running
            v: Remove anonymous volumes
            link: Remove the link instead of the container

        Raises:
            ContainerNotFound: If container not found
            ContainerRemoveConflict: If the container cannot be removed now
        """
        params = {'force': force, 'v': v, 'link': link}
        return self.client.http.delete(
            f'{BASE_PATH}/{container_id}',
            params=params,
            errors={404: ContainerNotFound, 409: ContainerRemoveConflict}
        )

    def wait(self, container_id: str, condition: Optional[str] = None) -> Dict[str, Any]:
        """
        Block until container stops

        Args:
            container_id: Container ID
            condition: 'not-running', 'next-exit' or 'removed'

        Returns:
            Dict with StatusCode and optional Error
        """
        return self.client.http.post(
            f'{BASE_PATH}/{container_id}/wait',
            params={'condition': condition},
            errors={404: ContainerNotFound},
            timeout=None
        )

    def prune(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Remove stopped containers

        Returns:
            Dict with ContainersDeleted and SpaceReclaimed
        """
        return self.client.http.post(f'{BASE_PATH}/prune', params={'filters': filters or None})

    def logs(self, container_id: str, stdout: bool = True, stderr: bool = True,
             stream: bool = False, timestamps: bool = False, tail: str = 'all',
             since: Optional[int] = None, until: Optional[int] = None,
             follow: bool = False, tty: Optional[bool] = None):
        """
        Get container logs

        Args:
            container_id: Container ID
            stdout: Return stdout stream
            stderr: Return stderr stream
            stream: Return a LogStream of frames instead of a string
            timestamps: Show timestamps
            tail: Number of lines to show from end ('all' for all)
            since: Show logs since timestamp (Unix epoch)
            until: Show logs before timestamp (Unix epoch)
            follow: Keep the stream open for new output
            tty: Container has a TTY (None: detect from the stream)

        Returns:
            LogStream if stream, otherwise the log text
        """
        params = {
            'stdout': stdout,
            'stderr': stderr,
            'timestamps': timestamps,
            'tail': tail,
            'follow': follow,
            'since': since,
            'until': until,
        }

        response = self.client.http.get(
            f'{BASE_PATH}/{container_id}/logs',
            params=params,
            stream=True,
            errors={404: ContainerNotFound},
            **({'timeout': None} if follow else {})
        )
        logs = LogStream(response, stdout=stdout, stderr=stderr, tty=tty)

        if stream:
            return logs
        return '\n'.join(frame.text for frame in logs)

    def attach(self, container_id: str, stdout: bool = True, stderr: bool = True,
               stdin: bool = False, logs: bool = False, detach_keys: Optional[str] = None,
               tty: Optional[bool] = None) -> LogStream:
        """
        Attach to container output

        Args:
            container_id: Container ID
            stdout: Attach to stdout
            stderr: Attach to stderr
            stdin: Attach to stdin
            logs: Replay previous output first
            detach_keys: Key sequence for detaching
            tty: Container has a TTY (None: detect from the stream)

        Returns:
            LogStream of frames until the container exits or the stream is closed
        """
        params = {
            'stream': True,
            'stdout': stdout,
            'stderr': stderr,
            'stdin': stdin,
            'logs': logs,
            'detachKeys': detach_keys,
        }

        response = self.client.http.post(
            f'{BASE_PATH}/{container_id}/attach',
            params=params,
            stream=True,
            errors={404: ContainerNotFound},
            timeout=None
        )
        return LogStream(response, stdout=stdout, stderr=stderr, tty=tty)
