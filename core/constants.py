#!/usr/bin/env python3
"""
Constants Module
Format constants shared by the CCBI reader, loaders and timeline model.

Values mirror the CocosBuilder 'ccbi' binary format, version 5.
"""

from enum import IntEnum

# Only this format version is accepted
CCB_VERSION = 5

# Magic bytes as stored in the file. The reader compares them back-to-front
# against "ccbi".
CCB_MAGIC = "ccbi"

# Supported file extensions
CCBI_EXTENSION = '.ccbi'

# Used when the caller does not supply a container size (width, height)
DEFAULT_CONTAINER_SIZE = (480.0, 320.0)

# Fallback loader used when a class name has no registered loader
DEFAULT_NODE_CLASS = 'CCNode'

# Control events passed when binding owner callbacks on control nodes
ALL_CONTROL_EVENTS = 255


class PropertyType(IntEnum):
    """Property type tags used by node properties and animated channels"""
    POSITION = 0
    SIZE = 1
    POINT = 2
    POINT_LOCK = 3
    SCALE_LOCK = 4
    DEGREES = 5
    INTEGER = 6
    FLOAT = 7
    FLOAT_VAR = 8
    CHECK = 9
    SPRITEFRAME = 10
    TEXTURE = 11
    BYTE = 12
    COLOR3 = 13
    COLOR4_VAR = 14
    FLIP = 15
    BLENDMODE = 16
    FNT_FILE = 17
    TEXT = 18
    FONT_TTF = 19
    INTEGER_LABELED = 20
    BLOCK = 21
    ANIMATION = 22
    CCB_FILE = 23
    STRING = 24
    BLOCK_CCCONTROL = 25
    FLOAT_SCALE = 26
    FLOAT_XY = 27


class FloatType(IntEnum):
    """Leading tag byte of an encoded float"""
    ZERO = 0
    ONE = 1
    MINUS_ONE = 2
    HALF = 3
    INTEGER = 4
    FULL = 5


class Platform(IntEnum):
    ALL = 0
    IOS = 1
    MAC = 2


class TargetType(IntEnum):
    """Member-variable / selector assignment target"""
    NONE = 0
    DOCUMENT_ROOT = 1
    OWNER = 2


class EasingType(IntEnum):
    """Keyframe easing kinds"""
    INSTANT = 0
    LINEAR = 1
    CUBIC_IN = 2
    CUBIC_OUT = 3
    CUBIC_INOUT = 4
    ELASTIC_IN = 5
    ELASTIC_OUT = 6
    ELASTIC_INOUT = 7
    BOUNCE_IN = 8
    BOUNCE_OUT = 9
    BOUNCE_INOUT = 10
    BACK_IN = 11
    BACK_OUT = 12
    BACK_INOUT = 13


# Easing kinds followed by an extra float "easing amount"
EASINGS_WITH_OPTION = frozenset({
    EasingType.CUBIC_IN,
    EasingType.CUBIC_OUT,
    EasingType.CUBIC_INOUT,
    EasingType.ELASTIC_IN,
    EasingType.ELASTIC_OUT,
    EasingType.ELASTIC_INOUT,
})


class PositionType(IntEnum):
    RELATIVE_BOTTOM_LEFT = 0
    RELATIVE_TOP_LEFT = 1
    RELATIVE_TOP_RIGHT = 2
    RELATIVE_BOTTOM_RIGHT = 3
    PERCENT = 4
    MULTIPLY_RESOLUTION = 5


class SizeType(IntEnum):
    ABSOLUTE = 0
    PERCENT = 1
    RELATIVE_CONTAINER = 2
    HORIZONTAL_PERCENT = 3
    VERTICAL_PERCENT = 4
    MULTIPLY_RESOLUTION = 5


class ScaleType(IntEnum):
    ABSOLUTE = 0
    MULTIPLY_RESOLUTION = 1


class KeyframeCallbackType(IntEnum):
    """Scope of a timeline callback keyframe"""
    DOCUMENT = 1
    OWNER = 2
