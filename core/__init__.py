#!/usr/bin/env python3
"""
Core Module
Format constants, errors and the data structures a decoded file produces.
"""

from .constants import (
    CCB_VERSION,
    CCB_MAGIC,
    CCBI_EXTENSION,
    DEFAULT_CONTAINER_SIZE,
    DEFAULT_NODE_CLASS,
    ALL_CONTROL_EVENTS,
    PropertyType,
    FloatType,
    Platform,
    TargetType,
    EasingType,
    PositionType,
    SizeType,
    ScaleType,
    KeyframeCallbackType,
)
from .errors import CCBIError, FormatError, BoundsError
from .scene_node import SceneNode, CCBFile
from .sprite_frames import SpriteFrame, BaseSpriteFrameCache, SpriteFrameCache
from .timeline import (
    AnimationManager,
    Keyframe,
    PendingBinding,
    Sequence,
    SequenceProperty,
)

__all__ = [
    'CCB_VERSION',
    'CCB_MAGIC',
    'CCBI_EXTENSION',
    'DEFAULT_CONTAINER_SIZE',
    'DEFAULT_NODE_CLASS',
    'ALL_CONTROL_EVENTS',
    'PropertyType',
    'FloatType',
    'Platform',
    'TargetType',
    'EasingType',
    'PositionType',
    'SizeType',
    'ScaleType',
    'KeyframeCallbackType',
    'CCBIError',
    'FormatError',
    'BoundsError',
    'SceneNode',
    'CCBFile',
    'SpriteFrame',
    'BaseSpriteFrameCache',
    'SpriteFrameCache',
    'AnimationManager',
    'Keyframe',
    'PendingBinding',
    'Sequence',
    'SequenceProperty',
]
