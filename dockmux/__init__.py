"""
dockmux - Docker Engine API client with log/attach stream demultiplexing
"""

__version__ = '1.0.0'
