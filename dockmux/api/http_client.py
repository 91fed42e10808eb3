"""
HTTP Client for the Docker daemon
Pure Python implementation using http.client and socket, over a Unix socket or TCP
"""

import socket
import http.client
import json
import logging
import platform
import os
from typing import Optional, Dict, Any, Tuple, Type
from urllib.parse import quote, urlparse

from .exceptions import APIError, create_api_error

logger = logging.getLogger(__name__)

DEFAULT_UNIX_SOCKET = '/var/run/docker.sock'
DEFAULT_TCP_PORT = 2375

_CLIENT_TIMEOUT = object()


class UnixHTTPConnection(http.client.HTTPConnection):
    """HTTP connection over Unix socket"""

    def __init__(self, socket_path: str, timeout: Optional[float] = 60):
        super().__init__('localhost', timeout=timeout)
        self.socket_path = socket_path

    def connect(self):
        """Connect to Unix socket"""
        self.sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self.sock.settimeout(self.timeout)
        self.sock.connect(self.socket_path)


class StreamingResponse:
    """
    Open response body together with the connection it is read from.
    Closing it releases the socket.
    """

    def __init__(self, response: http.client.HTTPResponse, connection: http.client.HTTPConnection):
        self.response = response
        self.connection = connection

    @property
    def status(self) -> int:
        return self.response.status

    @property
    def closed(self) -> bool:
        return self.response.isclosed()

    def getheader(self, name: str, default=None):
        return self.response.getheader(name, default)

    def read(self, amt: Optional[int] = None) -> bytes:
        return self.response.read(amt)

    def read1(self, amt: int = -1) -> bytes:
        return self.response.read1(amt)

    def readline(self, limit: int = -1) -> bytes:
        return self.response.readline(limit)

    def __iter__(self):
        while True:
            line = self.response.readline()
            if not line:
                break
            yield line

    def close(self):
        """Close response body and underlying connection"""
        try:
            self.response.close()
        finally:
            self.connection.close()
        logger.debug("Streaming response closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def default_base_url() -> str:
    """
    Detect Docker daemon address

    Returns:
        DOCKER_HOST if set, otherwise the platform socket path
    """
    docker_host = os.environ.get('DOCKER_HOST')
    if docker_host:
        return docker_host

    if platform.system() == "Darwin":  # macOS
        socket_path = os.path.expanduser('~/.docker/run/docker.sock')
        if os.path.exists(socket_path):
            return socket_path
    return DEFAULT_UNIX_SOCKET


def parse_base_url(base_url: str) -> Tuple[str, Any]:
    """
    Split daemon address into transport kind and address

    Args:
        base_url: 'unix:///path', bare socket path, 'tcp://host:port' or 'http://host:port'

    Returns:
        ('unix', socket_path) or ('tcp', (host, port))
    """
    if base_url.startswith('unix://'):
        return 'unix', base_url[len('unix://'):]
    if base_url.startswith(('tcp://', 'http://')):
        parsed = urlparse(base_url.replace('tcp://', 'http://', 1))
        if not parsed.hostname:
            raise ValueError(f"Invalid Docker host: {base_url}")
        return 'tcp', (parsed.hostname, parsed.port or DEFAULT_TCP_PORT)
    if '://' in base_url:
        raise ValueError(f"Unsupported Docker host scheme: {base_url}")
    return 'unix', base_url


def build_url(path: str, params: Optional[Dict[str, Any]] = None) -> str:
    """
    Build request URL with query params

    None values are skipped, booleans become 'true'/'false',
    lists and dicts are JSON encoded.
    """
    if not params:
        return path

    query_parts = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        elif isinstance(value, (list, dict)):
            value = json.dumps(value)
        query_parts.append(f"{key}={quote(str(value))}")

    if not query_parts:
        return path
    return f"{path}?{'&'.join(query_parts)}"


class DockerHTTPClient:
    """HTTP client for Docker daemon"""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = 60,
                 version: Optional[str] = None):
        """
        Initialize Docker HTTP client

        Args:
            base_url: Daemon address (default: auto-detect)
            timeout: Request timeout in seconds
            version: API version prefix, e.g. '1.43'
        """
        self.timeout = timeout
        self.version = version
        self.base_url = base_url or default_base_url()
        self.transport, self.address = parse_base_url(self.base_url)

        if self.transport == 'unix':
            self.socket_path = self.address
            if not os.path.exists(self.socket_path):
                raise FileNotFoundError(f"Docker socket not found: {self.socket_path}")

        logger.debug(f"Docker HTTP client using {self.transport} transport: {self.address}")

    def _connection(self, timeout: Optional[float]) -> http.client.HTTPConnection:
        if self.transport == 'unix':
            return UnixHTTPConnection(self.address, timeout=timeout)
        host, port = self.address
        return http.client.HTTPConnection(host, port, timeout=timeout)

    def _path(self, path: str) -> str:
        if self.version:
            return f"/v{self.version}{path}"
        return path

    def request(self, method: str, path: str, data: Optional[Any] = None,
                params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None,
                stream: bool = False, errors: Optional[Dict[int, Type[APIError]]] = None,
                timeout: Any = _CLIENT_TIMEOUT) -> Any:
        """
        Make HTTP request to Docker daemon

        Args:
            method: HTTP method (GET, POST, DELETE, etc.)
            path: API path
            data: JSON data for request body, or raw bytes
            params: URL query parameters
            headers: HTTP headers
            stream: If True, return StreamingResponse for streaming
            errors: Status code to exception class overrides
            timeout: Socket timeout for this request (default: client timeout, None: no timeout)

        Returns:
            Parsed JSON response or StreamingResponse if stream=True
        """
        url = build_url(self._path(path), params)

        req_headers = {'Host': 'localhost'}
        if headers:
            req_headers.update(headers)

        body = None
        if data is not None:
            if isinstance(data, bytes):
                # Raw bytes data (e.g., tar archive)
                body = data
                if 'Content-Length' not in req_headers:
                    req_headers['Content-Length'] = str(len(body))
            else:
                body = json.dumps(data).encode('utf-8')
                req_headers['Content-Type'] = 'application/json'
                req_headers['Content-Length'] = str(len(body))

        if timeout is _CLIENT_TIMEOUT:
            timeout = self.timeout

        logger.debug(f"{method} {url}")
        conn = self._connection(timeout)
        keep_open = False
        try:
            conn.request(method, url, body=body, headers=req_headers)
            response = conn.getresponse()

            if response.status >= 400 or (errors and response.status in errors):
                error_body = response.read().decode('utf-8', errors='replace')
                try:
                    error_msg = json.loads(error_body).get('message', error_body)
                except (ValueError, AttributeError):
                    error_msg = error_body or response.reason

                raise create_api_error(
                    f"Docker API error: {error_msg}",
                    status_code=response.status,
                    response=response,
                    errors=errors
                )

            # Caller is responsible for reading and closing
            if stream:
                keep_open = True
                return StreamingResponse(response, conn)

            response_data = response.read()
            if not response_data:
                return None

            try:
                text = response_data.decode('utf-8')
            except UnicodeDecodeError:
                return response_data

            try:
                return json.loads(text)
            except json.JSONDecodeError:
                # Return raw text if not JSON
                return text

        finally:
            if not keep_open:
                conn.close()

    def get(self, path: str, **kwargs) -> Any:
        """Make GET request"""
        return self.request('GET', path, **kwargs)

    def post(self, path: str, **kwargs) -> Any:
        """Make POST request"""
        return self.request('POST', path, **kwargs)

    def delete(self, path: str, **kwargs) -> Any:
        """Make DELETE request"""
        return self.request('DELETE', path, **kwargs)

    def put(self, path: str, **kwargs) -> Any:
        """Make PUT request"""
        return self.request('PUT', path, **kwargs)
