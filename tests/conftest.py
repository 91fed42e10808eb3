"""Shared test fixtures for dockmux."""

import io
from unittest.mock import MagicMock

import pytest

from dockmux.api.channel import ByteChannel


@pytest.fixture()
def channel_of():
    """Factory: ByteChannel over in-memory bytes."""
    def make(data: bytes) -> ByteChannel:
        return ByteChannel(io.BytesIO(data))
    return make


@pytest.fixture()
def fake_client():
    """Client stand-in whose HTTP transport is a MagicMock."""
    client = MagicMock()
    client.http = MagicMock()
    return client
