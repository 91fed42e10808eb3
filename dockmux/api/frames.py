"""
Log/attach output frames
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Stream(Enum):
    """Output channel a frame belongs to"""

    STDIN = 0
    STDOUT = 1
    STDERR = 2
    # Not a wire value: the session is not multiplexed (container has a TTY)
    UNKNOWN = -1

    @classmethod
    def from_type(cls, value: int) -> Optional['Stream']:
        """
        Map a frame header type byte to a stream

        Returns:
            Stream member, or None if the byte is not a stream type tag
        """
        if value in (0, 1, 2):
            return cls(value)
        return None


@dataclass(frozen=True)
class Frame:
    """One decoded line of container output"""

    text: str
    length: int
    stream: Stream

    def __str__(self):
        return self.text
