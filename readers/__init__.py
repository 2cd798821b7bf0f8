#!/usr/bin/env python3
"""
Readers Module
Binary decoding of CocosBuilder .ccbi files
"""

from pathlib import Path

from .bit_cursor import BitCursor
from .string_cache import StringCache
from .ccbi_reader import CCBReader, read_file_bytes

# Supported file extensions
CCBI_EXTENSIONS = {'.ccbi'}
SUPPORTED_EXTENSIONS = CCBI_EXTENSIONS


def create_reader(loader_library=None, **kwargs):
    """Factory function to create a reader with sensible defaults

    Args:
        loader_library: NodeLoaderLibrary to dispatch through
                        (default: NodeLoaderLibrary.new_default_library())
        **kwargs: Passed on to CCBReader

    Returns:
        CCBReader: Reader ready for read_node_graph_from_file / _from_data
    """
    if loader_library is None:
        # Lazy import, loaders depend on the reader module for typing only
        from loaders import NodeLoaderLibrary
        loader_library = NodeLoaderLibrary.new_default_library(kwargs.get('progress_callback'))
    return CCBReader(loader_library, **kwargs)


def is_supported_format(input_file):
    """Check if a file has a supported format

    Args:
        input_file: Path to input file

    Returns:
        bool: True if format is supported
    """
    ext = Path(input_file).suffix.lower()
    return ext in SUPPORTED_EXTENSIONS


__all__ = [
    'BitCursor',
    'StringCache',
    'CCBReader',
    'create_reader',
    'is_supported_format',
    'read_file_bytes',
    'CCBI_EXTENSIONS',
    'SUPPORTED_EXTENSIONS',
]
