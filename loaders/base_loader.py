#!/usr/bin/env python3
"""
Base Loader Module
Abstract base class for per-class node loaders

The reader looks up one loader per class name and uses it in two steps:
load_node() constructs the node, parse_properties() consumes the node's
property block from the stream. Everything a loader reads between those
calls is opaque to the reader.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from readers.ccbi_reader import CCBReader


class BaseNodeLoader(ABC):
    """Abstract base class for node loaders

    A loader instance is shared by every node of its class, across the
    readers of embedded files too, so it keeps no per-node state.
    """

    def __init__(self, progress_callback=None):
        """Initialize loader

        Args:
            progress_callback: Optional function to call for log messages
                              Signature: callback(message: str) -> None
        """
        self.progress_callback = progress_callback

    def log(self, message):
        """Send progress/status message

        Args:
            message: Message to log
        """
        if self.progress_callback:
            self.progress_callback(message)
        print(message)

    def load_node(self, parent, reader: 'CCBReader'):
        """Construct a node for the class this loader is registered under

        Args:
            parent: Parent node, None for the root of a file
            reader: Reader positioned right after the node header

        Returns:
            The new node
        """
        return self.create_node(parent, reader)

    @abstractmethod
    def create_node(self, parent, reader: 'CCBReader'):
        """Return a new, empty node instance"""
        pass

    @abstractmethod
    def parse_properties(self, node, parent, reader: 'CCBReader') -> Dict[str, Any]:
        """Read the node's property block and apply it to the node

        Args:
            node: Node returned by load_node()
            parent: Parent node, None for the root of a file
            reader: Reader positioned at the property block

        Returns:
            Custom (per-document) properties of this node by name; the
            reader assigns them onto the node afterwards
        """
        pass
