#!/usr/bin/env python3
"""
Sprite Frames Module
Sprite-frame lookup used when decoding sprite-frame keyframes.

The reader only calls the three methods of BaseSpriteFrameCache. The
default SpriteFrameCache does not touch the disk; it hands back
lightweight SpriteFrame handles so that files can be inspected without the
host's texture pipeline.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True)
class SpriteFrame:
    """Resolved sprite-frame handle

    Attributes:
        name: Frame name inside the sheet, or the image path
        sheet: Sheet path the frame comes from, None for standalone images
    """
    name: str
    sheet: Optional[str] = None


class BaseSpriteFrameCache(ABC):
    """Interface of the sprite-frame cache collaborator"""

    @abstractmethod
    def add_sprite_frames(self, sheet_path: str):
        """Load every frame of a sprite sheet"""
        pass

    @abstractmethod
    def get_sprite_frame(self, name: str):
        """Return a previously loaded frame by name"""
        pass

    @abstractmethod
    def sprite_frame_from_image(self, image_path: str):
        """Return a frame covering a whole standalone image"""
        pass


class SpriteFrameCache(BaseSpriteFrameCache):
    """In-memory sprite-frame cache producing SpriteFrame handles"""

    def __init__(self):
        self.loaded_sheets: List[str] = []
        self._frames: Dict[str, SpriteFrame] = {}

    def add_sprite_frames(self, sheet_path):
        self.loaded_sheets.append(sheet_path)

    def get_sprite_frame(self, name):
        frame = self._frames.get(name)
        if frame is None:
            # Sheets are not parsed; attribute the frame to the most recently loaded sheet
            sheet = self.loaded_sheets[-1] if self.loaded_sheets else None
            frame = SpriteFrame(name=name, sheet=sheet)
            self._frames[name] = frame
        return frame

    def sprite_frame_from_image(self, image_path):
        return SpriteFrame(name=image_path)
