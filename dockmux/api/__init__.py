"""
Docker Engine API client - Pure Python implementation without external dependencies
Works with Docker daemon via Unix socket or TCP
"""

from .client import DockerClient
from .channel import ByteChannel
from .containers import LogStream
from .demux import Demultiplexer, demultiplex
from .frames import Frame, Stream
from .exceptions import (
    DockerException,
    APIError,
    NotFound,
    Conflict,
    ImageNotFound,
    ContainerNotFound,
    NetworkNotFound,
    VolumeNotFound,
    ContainerAlreadyStarted,
    ContainerRemoveConflict,
    StreamError,
    StreamTruncated,
)

__all__ = [
    'DockerClient',
    'ByteChannel',
    'LogStream',
    'Demultiplexer',
    'demultiplex',
    'Frame',
    'Stream',
    'DockerException',
    'APIError',
    'NotFound',
    'Conflict',
    'ImageNotFound',
    'ContainerNotFound',
    'NetworkNotFound',
    'VolumeNotFound',
    'ContainerAlreadyStarted',
    'ContainerRemoveConflict',
    'StreamError',
    'StreamTruncated',
]
