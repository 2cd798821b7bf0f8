#!/usr/bin/env python3
"""
Errors Module
Exceptions raised while decoding CCBI data.
"""


class CCBIError(ValueError):
    """Base class for fatal decode failures"""
    pass


class FormatError(CCBIError):
    """Bad magic bytes, unsupported version or malformed string data"""
    pass


class BoundsError(CCBIError, IndexError):
    """Read past the end of the buffer or string cache index out of range"""
    pass
