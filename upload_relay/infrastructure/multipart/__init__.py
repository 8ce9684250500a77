"""
Multipart request parsing.
"""

from .parser import FilePartStream, MultipartParser

__all__ = [
    "FilePartStream",
    "MultipartParser",
]
