#!/usr/bin/env python3
"""
Loaders Module
Per-class node loaders and the registry the reader dispatches through
"""

from typing import Dict, Optional

from core.constants import DEFAULT_NODE_CLASS

from .base_loader import BaseNodeLoader
from .node_loader import NodeLoader, BlockData, get_absolute_position, get_absolute_size
from .ccb_file_loader import CCBFileLoader

# Class names decoded with the generic loader by the default library
GENERIC_NODE_CLASSES = (
    'CCLayer',
    'CCLayerColor',
    'CCLayerGradient',
    'CCSprite',
    'CCScale9Sprite',
    'CCLabelTTF',
    'CCLabelBMFont',
    'CCMenu',
    'CCMenuItemImage',
    'CCControlButton',
    'CCParticleSystemQuad',
    'CCScrollView',
)


class NodeLoaderLibrary:
    """Registry mapping class names to loaders

    The reader falls back to the DEFAULT_NODE_CLASS loader when a class name
    has no entry, so a library should always register one.
    """

    def __init__(self):
        self._loaders: Dict[str, BaseNodeLoader] = {}

    def register_loader(self, class_name: str, loader: BaseNodeLoader):
        self._loaders[class_name] = loader

    def unregister_loader(self, class_name: str):
        self._loaders.pop(class_name, None)

    def get_loader(self, class_name: str) -> Optional[BaseNodeLoader]:
        """Return the loader registered for class_name, or None"""
        return self._loaders.get(class_name)

    def purge(self):
        self._loaders.clear()

    def __contains__(self, class_name):
        return class_name in self._loaders

    def __len__(self):
        return len(self._loaders)

    @classmethod
    def new_default_library(cls, progress_callback=None) -> 'NodeLoaderLibrary':
        """Create a library with the generic loaders registered

        Args:
            progress_callback: Passed on to every loader for log messages

        Returns:
            NodeLoaderLibrary: 'CCNode', 'CCBFile' and the common cocos
                               class names, all backed by SceneNode types
        """
        library = cls()
        generic = NodeLoader(progress_callback)
        library.register_loader(DEFAULT_NODE_CLASS, generic)
        library.register_loader('CCBFile', CCBFileLoader(progress_callback))
        for class_name in GENERIC_NODE_CLASSES:
            library.register_loader(class_name, generic)
        return library


__all__ = [
    'BaseNodeLoader',
    'NodeLoader',
    'CCBFileLoader',
    'NodeLoaderLibrary',
    'BlockData',
    'get_absolute_position',
    'get_absolute_size',
    'GENERIC_NODE_CLASSES',
]
