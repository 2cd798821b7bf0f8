#!/usr/bin/env python3
"""
Node Loader Module
Generic loader used for 'CCNode' and as the fallback for unknown classes.

Reads the standard property block that every node carries:

    regular property count (var-uint)
    extra property count   (var-uint)
    per property:
        type     (var-uint, PropertyType)
        name     (cached string)
        platform (byte)
        value    (layout depends on type)

Extra properties of scalar types are collected as custom properties for the
reader to assign. Regular properties are applied to well-known node
attributes and everything else lands in node.properties.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from core.constants import (
    Platform,
    PositionType,
    PropertyType,
    ScaleType,
    SizeType,
    TargetType,
)
from core.errors import FormatError
from core.scene_node import CCBFile, SceneNode

from .base_loader import BaseNodeLoader

# Property name -> node attribute for properties with a dedicated attribute
NODE_ATTRIBUTES = {
    'position': 'position',
    'contentSize': 'content_size',
    'anchorPoint': 'anchor_point',
    'rotation': 'rotation',
    'tag': 'tag',
    'visible': 'visible',
}

# Extra properties of these types become custom properties
CUSTOM_PROPERTY_TYPES = frozenset({
    PropertyType.CHECK,
    PropertyType.INTEGER,
    PropertyType.FLOAT,
    PropertyType.STRING,
})


@dataclass
class BlockData:
    """Resolved selector of a BLOCK / BLOCK_CCCONTROL property

    Attributes:
        selector: Handler callable
        target: Object the handler belongs to
        control_events: Event filter bits (BLOCK_CCCONTROL only)
    """
    selector: Callable
    target: Any
    control_events: Optional[int] = None


def get_absolute_position(pt: Tuple[float, float], position_type: int,
                          container_size: Tuple[float, float],
                          resolution_scale: float = 1.0) -> Tuple[float, float]:
    """Resolve a stored position against its container

    Args:
        pt: (x, y) as stored in the file
        position_type: PositionType of the stored value
        container_size: (width, height) of the parent
        resolution_scale: Multiplier for MULTIPLY_RESOLUTION positions

    Returns:
        tuple: Absolute (x, y) in points
    """
    x, y = pt
    width, height = container_size

    if position_type == PositionType.RELATIVE_TOP_LEFT:
        return (x, height - y)
    elif position_type == PositionType.RELATIVE_TOP_RIGHT:
        return (width - x, height - y)
    elif position_type == PositionType.RELATIVE_BOTTOM_RIGHT:
        return (width - x, y)
    elif position_type == PositionType.PERCENT:
        return (float(int(width * x / 100.0)), float(int(height * y / 100.0)))
    elif position_type == PositionType.MULTIPLY_RESOLUTION:
        return (x * resolution_scale, y * resolution_scale)
    return (x, y)


def get_absolute_size(size: Tuple[float, float], size_type: int,
                      container_size: Tuple[float, float],
                      resolution_scale: float = 1.0) -> Tuple[float, float]:
    """Resolve a stored size against its container"""
    width, height = size
    container_width, container_height = container_size

    if size_type == SizeType.RELATIVE_CONTAINER:
        return (container_width - width, container_height - height)
    elif size_type == SizeType.PERCENT:
        return (float(int(container_width * width / 100.0)),
                float(int(container_height * height / 100.0)))
    elif size_type == SizeType.HORIZONTAL_PERCENT:
        return (float(int(container_width * width / 100.0)), height)
    elif size_type == SizeType.VERTICAL_PERCENT:
        return (width, float(int(container_height * height / 100.0)))
    elif size_type == SizeType.MULTIPLY_RESOLUTION:
        return (width * resolution_scale, height * resolution_scale)
    return (width, height)


class NodeLoader(BaseNodeLoader):
    """Loader for plain nodes; parses every property type generically"""

    node_class = SceneNode

    def create_node(self, parent, reader):
        return self.node_class(reader.current_class_name or 'CCNode')

    def parse_properties(self, node, parent, reader):
        num_regular = reader.read_int(False)
        num_extra = reader.read_int(False)
        custom_properties = {}

        for i in range(num_regular + num_extra):
            is_extra = i >= num_regular
            prop_type = reader.read_int(False)
            name = reader.read_cached_string()
            platform = reader.read_byte()

            value = self.parse_property_value(node, parent, reader, prop_type, name)

            set_prop = platform in (Platform.ALL, Platform.IOS, Platform.MAC)

            target = node
            if is_extra:
                if isinstance(node, CCBFile) and node.ccb_file_node is not None:
                    # Extra properties override the ones the embedded file exposes
                    target = node.ccb_file_node
                    exposed = getattr(target, 'user_object', None) or ()
                    set_prop = set_prop and name in exposed
                elif node is reader.animation_manager.root_node and hasattr(node, 'user_object'):
                    # Remember exposed names for files that embed this one
                    if node.user_object is None:
                        node.user_object = []
                    node.user_object.append(name)

            if not set_prop:
                continue

            # Custom values are assigned by the reader after the wrapper splice
            if is_extra and prop_type in CUSTOM_PROPERTY_TYPES:
                custom_properties[name] = value
                continue

            if name in reader.animated_properties:
                reader.animation_manager.set_base_value(value, node, name)

            self.on_handle_property(target, parent, reader, prop_type, name, value)

        return custom_properties

    # ------------------------------------------------------------------
    # Value parsing
    # ------------------------------------------------------------------

    def parse_property_value(self, node, parent, reader, prop_type, name):
        """Consume one property value from the stream

        Raises:
            FormatError: For a type tag outside PropertyType; the rest of
                         the stream cannot be interpreted after that
        """
        container = reader.animation_manager.get_container_size(parent)
        scale = reader.resolution_scale

        if prop_type == PropertyType.POSITION:
            x = reader.read_float()
            y = reader.read_float()
            position_type = reader.read_int(False)
            return get_absolute_position((x, y), position_type, container, scale)
        elif prop_type == PropertyType.SIZE:
            width = reader.read_float()
            height = reader.read_float()
            size_type = reader.read_int(False)
            return get_absolute_size((width, height), size_type, container, scale)
        elif prop_type in (PropertyType.POINT, PropertyType.POINT_LOCK,
                           PropertyType.FLOAT_XY, PropertyType.FLOAT_VAR):
            return (reader.read_float(), reader.read_float())
        elif prop_type == PropertyType.SCALE_LOCK:
            x = reader.read_float()
            y = reader.read_float()
            scale_type = reader.read_int(False)
            if scale_type == ScaleType.MULTIPLY_RESOLUTION:
                x *= scale
                y *= scale
            return (x, y)
        elif prop_type in (PropertyType.DEGREES, PropertyType.FLOAT):
            return reader.read_float()
        elif prop_type == PropertyType.FLOAT_SCALE:
            value = reader.read_float()
            if reader.read_int(False) == ScaleType.MULTIPLY_RESOLUTION:
                value *= scale
            return value
        elif prop_type in (PropertyType.INTEGER, PropertyType.INTEGER_LABELED):
            return reader.read_int(True)
        elif prop_type == PropertyType.CHECK:
            return reader.read_bool()
        elif prop_type == PropertyType.BYTE:
            return reader.read_byte()
        elif prop_type == PropertyType.COLOR3:
            return (reader.read_byte(), reader.read_byte(), reader.read_byte())
        elif prop_type == PropertyType.COLOR4_VAR:
            color = tuple(reader.read_byte() for _ in range(4))
            variance = tuple(reader.read_byte() for _ in range(4))
            return (color, variance)
        elif prop_type == PropertyType.FLIP:
            return (reader.read_bool(), reader.read_bool())
        elif prop_type == PropertyType.BLENDMODE:
            return (reader.read_int(False), reader.read_int(False))
        elif prop_type == PropertyType.SPRITEFRAME:
            sheet = reader.read_cached_string()
            frame = reader.read_cached_string()
            return reader.resolve_sprite_frame(sheet, frame)
        elif prop_type == PropertyType.ANIMATION:
            animation_file = reader.read_cached_string()
            animation_name = reader.read_cached_string()
            return (reader.root_path + animation_file, animation_name)
        elif prop_type in (PropertyType.TEXTURE, PropertyType.FNT_FILE):
            return reader.root_path + reader.read_cached_string()
        elif prop_type in (PropertyType.FONT_TTF, PropertyType.TEXT, PropertyType.STRING):
            return reader.read_cached_string()
        elif prop_type == PropertyType.BLOCK:
            return self._parse_block(node, reader, control=False)
        elif prop_type == PropertyType.BLOCK_CCCONTROL:
            return self._parse_block(node, reader, control=True)
        elif prop_type == PropertyType.CCB_FILE:
            file_name = reader.read_cached_string()
            return reader.read_sub_file(file_name, container)

        raise FormatError(f"unexpected property type {prop_type} for property '{name}'")

    def _parse_block(self, node, reader, control: bool) -> Optional[BlockData]:
        """Read a selector property and resolve or record its binding

        Direct mode resolves the handler now against the document root or the
        owner. Document-controlled mode records the name for the binding pass.
        """
        selector_name = reader.read_cached_string()
        selector_target = reader.read_int(False)
        control_events = reader.read_int(False) if control else None

        if selector_target == TargetType.NONE:
            return None

        if reader.is_document_controlled:
            if selector_target == TargetType.DOCUMENT_ROOT:
                reader.add_document_callback(selector_name, node, control_events)
            else:
                reader.add_owner_callback(selector_name, node)
            return None

        if selector_target == TargetType.DOCUMENT_ROOT:
            target = reader.animation_manager.root_node
        else:
            target = reader.owner

        if target is None:
            self.log(f"Warning: No target for selector '{selector_name}', skipping")
            return None
        if not selector_name:
            self.log("Warning: Unexpected empty selector, skipping")
            return None

        hook_name = 'on_resolve_ccb_cccontrol_selector' if control else 'on_resolve_ccb_menu_item_selector'
        handler = None
        hook = getattr(target, hook_name, None)
        if callable(hook):
            handler = hook(target, selector_name)
        resolver = reader.selector_resolver
        if handler is None and resolver is not None and callable(getattr(resolver, hook_name, None)):
            handler = getattr(resolver, hook_name)(target, selector_name)

        if handler is None:
            self.log(f"Warning: Skipping selector '{selector_name}', no resolver handled it")
            return None
        return BlockData(selector=handler, target=target, control_events=control_events)

    # ------------------------------------------------------------------
    # Applying values
    # ------------------------------------------------------------------

    def on_handle_property(self, node, parent, reader, prop_type, name, value):
        """Apply a parsed property value to the node

        Override in subclasses to claim class-specific properties, calling
        the base implementation for everything else.
        """
        if prop_type in (PropertyType.BLOCK, PropertyType.BLOCK_CCCONTROL):
            if value is not None:
                self._bind_block(node, value)
            return

        if name == 'scale' and prop_type == PropertyType.SCALE_LOCK:
            node.scale_x, node.scale_y = value
        elif name in NODE_ATTRIBUTES and hasattr(node, NODE_ATTRIBUTES[name]):
            setattr(node, NODE_ATTRIBUTES[name], value)
        elif isinstance(getattr(node, 'properties', None), dict):
            node.properties[name] = value

    @staticmethod
    def _bind_block(node, block: BlockData):
        if block.control_events is not None:
            add_target = getattr(node, 'add_target_with_action_for_control_events', None)
            if callable(add_target):
                add_target(block.target, block.selector, block.control_events)
                return
        set_callback = getattr(node, 'set_callback', None)
        if callable(set_callback):
            set_callback(block.selector, block.target)
        elif isinstance(getattr(node, 'properties', None), dict):
            node.properties.setdefault('callbacks', []).append(block)
