#!/usr/bin/env python3
"""
Scene Node Module
Plain node types produced by the default loader library.

Hosts that bring their own scene graph register their own loaders instead;
the reader only relies on add_child(), children and a few optional hooks.
"""

from typing import Any, Dict, List, Optional, Tuple


class SceneNode:
    """Generic scene-graph node

    Attributes:
        class_name: Class name the node was decoded from
        position: (x, y) in points, already resolved against the container
        content_size: (width, height) in points
        anchor_point: (x, y) normalized anchor
        rotation: Degrees
        scale_x, scale_y: Scale multipliers
        tag: Integer tag
        visible: Visibility flag
        user_object: Free slot used by loaders during decode
        properties: Properties without a dedicated attribute, by name
        custom_properties: Custom properties assigned by the reader
    """

    def __init__(self, class_name: str = 'CCNode'):
        self.class_name = class_name
        self.parent: Optional['SceneNode'] = None
        self.children: List[Any] = []
        self.position: Tuple[float, float] = (0.0, 0.0)
        self.content_size: Tuple[float, float] = (0.0, 0.0)
        self.anchor_point: Tuple[float, float] = (0.0, 0.0)
        self.rotation = 0.0
        self.scale_x = 1.0
        self.scale_y = 1.0
        self.tag = -1
        self.visible = True
        self.user_object = None
        self.properties: Dict[str, Any] = {}
        self.custom_properties: Dict[str, Any] = {}

    def add_child(self, child):
        if isinstance(child, SceneNode):
            child.parent = self
        self.children.append(child)

    def on_assign_ccb_custom_property(self, target, name, value) -> bool:
        """Accept every custom property into custom_properties"""
        target.custom_properties[name] = value
        return True

    def walk(self):
        """Yield this node and all descendants depth-first"""
        yield self
        for child in self.children:
            if isinstance(child, SceneNode):
                yield from child.walk()
            else:
                yield child

    def __repr__(self):
        return f"<{type(self).__name__} {self.class_name} tag={self.tag} children={len(self.children)}>"


class CCBFile(SceneNode):
    """Wrapper for an embedded sub-file

    The reader splices the wrapper out of the graph and keeps only
    ccb_file_node, which receives the wrapper's transform.
    """

    def __init__(self, class_name: str = 'CCBFile'):
        super().__init__(class_name)
        self.ccb_file_node = None
