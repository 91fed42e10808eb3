"""
Docker API Exceptions
"""

from typing import Dict, Optional, Type


class DockerException(Exception):
    """Base Docker exception"""
    pass


class APIError(DockerException):
    """Docker API error"""

    def __init__(self, message, response=None, status_code=None):
        super().__init__(message)
        self.response = response
        self.status_code = status_code


class NotFound(APIError):
    """Resource not found (HTTP 404)"""
    pass


class Conflict(APIError):
    """Request conflicts with the resource state (HTTP 409)"""
    pass


class ImageNotFound(NotFound):
    """Image not found"""
    pass


class ContainerNotFound(NotFound):
    """Container not found"""
    pass


class NetworkNotFound(NotFound):
    """Network not found"""
    pass


class VolumeNotFound(NotFound):
    """Volume not found"""
    pass


class ContainerAlreadyStarted(APIError):
    """Start requested for a container that is already running (HTTP 304)"""
    pass


class ContainerRemoveConflict(Conflict):
    """Container cannot be removed in its current state"""
    pass


class StreamError(DockerException):
    """Log/attach stream violated the framing protocol"""
    pass


class StreamTruncated(StreamError):
    """Stream ended in the middle of a frame header or payload"""

    def __init__(self, message, expected: int = 0, received: int = 0):
        super().__init__(message)
        self.expected = expected
        self.received = received


_STATUS_ERRORS = {
    404: NotFound,
    409: Conflict,
}


def create_api_error(message: str, status_code: Optional[int] = None, response=None,
                     errors: Optional[Dict[int, Type[APIError]]] = None) -> APIError:
    """
    Build the most specific APIError for a status code

    Args:
        message: Error message
        status_code: HTTP status code returned by the daemon
        response: Raw response object
        errors: Per-request overrides {status_code: exception class}

    Returns:
        APIError instance (not raised)
    """
    cls = None
    if errors:
        cls = errors.get(status_code)
    if cls is None:
        cls = _STATUS_ERRORS.get(status_code, APIError)
    return cls(message, response=response, status_code=status_code)
