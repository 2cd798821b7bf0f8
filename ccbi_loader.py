#!/usr/bin/env python3
"""
CCBI Loader - Main Entry Module
Decodes a .ccbi file and wires up its name bindings.

Loading happens in two passes:
1. CCBReader decodes the node graph and records every outlet and callback
   name it meets (document-controlled files only)
2. resolve_bindings() applies those names: owner outlets and callbacks go
   to the caller's owner, document outlets and callbacks go to a controller
   instantiated from the root node's controller name
"""

import importlib
from collections.abc import Mapping

from core.constants import ALL_CONTROL_EVENTS, CCBI_EXTENSION, KeyframeCallbackType
from core.errors import CCBIError
from core.scene_node import SceneNode
from readers import create_reader


class CCBILoader:
    """Loader facade over CCBReader

    Collaborators given here are handed to every reader this loader creates.
    The reader of the last load() stays available as last_reader, the error
    of a failed load as last_error.
    """

    def __init__(self, root_path='', loader_library=None, controller_namespace=None,
                 member_variable_assigner=None, selector_resolver=None,
                 node_loader_listener=None, sprite_frame_cache=None, file_loader=None,
                 resolution_scale=1.0, progress_callback=None):
        """Initialize loader

        Args:
            root_path: Prefix for resource paths referenced by the file
            loader_library: NodeLoaderLibrary (default: the generic library)
            controller_namespace: Mapping or object that document controller
                                  names are looked up in. Without it, dotted
                                  names are imported as 'module.Class'.
            member_variable_assigner: See CCBReader
            selector_resolver: See CCBReader
            node_loader_listener: See CCBReader
            sprite_frame_cache: See CCBReader
            file_loader: See CCBReader
            resolution_scale: See CCBReader
            progress_callback: Optional function to call for progress updates
                              Signature: callback(message: str) -> None
        """
        self.root_path = root_path
        self.loader_library = loader_library
        self.controller_namespace = controller_namespace
        self.member_variable_assigner = member_variable_assigner
        self.selector_resolver = selector_resolver
        self.node_loader_listener = node_loader_listener
        self.sprite_frame_cache = sprite_frame_cache
        self.file_loader = file_loader
        self.resolution_scale = resolution_scale
        self.progress_callback = progress_callback

        self.last_reader = None
        self.last_error = None

    def log(self, message):
        """Send progress updates to callback"""
        if self.progress_callback:
            self.progress_callback(message)
        print(message)

    def create_reader(self):
        return create_reader(
            self.loader_library,
            member_variable_assigner=self.member_variable_assigner,
            selector_resolver=self.selector_resolver,
            node_loader_listener=self.node_loader_listener,
            root_path=self.root_path,
            sprite_frame_cache=self.sprite_frame_cache,
            file_loader=self.file_loader,
            resolution_scale=self.resolution_scale,
            progress_callback=self.progress_callback,
        )

    def load(self, source, owner=None, parent_size=None):
        """Decode a .ccbi file (or buffer) and resolve its bindings

        Args:
            source: File path (the .ccbi extension is appended when missing)
                    or the file contents as bytes
            owner: Object receiving owner-scope outlets and callbacks
            parent_size: (width, height) of the container

        Returns:
            Root node, or None if the file could not be read or decoded
        """
        reader = self.create_reader()
        self.last_reader = reader
        self.last_error = None

        try:
            if isinstance(source, (bytes, bytearray, memoryview)):
                node = reader.read_node_graph_from_data(bytes(source), owner, parent_size)
            else:
                node = reader.read_node_graph_from_file(self.ccbi_path(source), owner, parent_size)
        except (CCBIError, OSError) as e:
            self.last_error = e
            self.log(f"ERROR: Could not load ccbi: {e}")
            return None

        self.resolve_bindings(reader, owner)
        return node

    def load_as_scene(self, source, owner=None, parent_size=None):
        """Load a file and wrap its root in a fresh scene node

        Returns:
            SceneNode: 'CCScene' node with the loaded root as its only child,
                       or None if loading failed
        """
        node = self.load(source, owner, parent_size)
        if node is None:
            return None
        scene = SceneNode('CCScene')
        scene.add_child(node)
        return scene

    @staticmethod
    def ccbi_path(path):
        path = str(path)
        if not path.lower().endswith(CCBI_EXTENSION):
            path += CCBI_EXTENSION
        return path

    # ------------------------------------------------------------------
    # Binding resolution
    # ------------------------------------------------------------------

    def resolve_bindings(self, reader, owner=None):
        """Apply the names recorded by a finished decode

        Names that cannot be resolved are logged and skipped.

        Args:
            reader: CCBReader after read_node_graph_from_data/_from_file
            owner: Owner passed to the decode
        """
        if owner is not None:
            for binding in reader.owner_callbacks:
                self._bind_callback(binding.node, owner, binding.name, ALL_CONTROL_EVENTS)
            for binding in reader.owner_outlets:
                self._assign_outlet(owner, binding.name, binding.node)

        nodes = reader.nodes_with_animation_managers
        managers = reader.animation_managers_for_nodes
        if not nodes or not managers:
            return

        for node, manager in zip(nodes, managers):
            node.animation_manager = manager

            controller_name = manager.document_controller_name
            if not controller_name:
                continue

            controller_class = self.resolve_controller_class(controller_name)
            if controller_class is None:
                self.log(f"Warning: Document controller '{controller_name}' not found, skipping bindings")
                continue

            controller = controller_class()
            controller.controller_name = controller_name
            node.controller = controller
            controller.root_node = node

            for binding in manager.document_callbacks:
                self._bind_callback(binding.node, controller, binding.name, binding.control_events)
            for binding in manager.document_outlets:
                self._assign_outlet(controller, binding.name, binding.node)

            on_did_load = getattr(controller, 'on_did_load_from_ccb', None)
            if callable(on_did_load):
                on_did_load()

            for key in manager.keyframe_callbacks:
                callback_type, _, callback_name = key.partition(':')
                if callback_type == str(int(KeyframeCallbackType.DOCUMENT)):
                    target = controller
                elif callback_type == str(int(KeyframeCallbackType.OWNER)) and owner is not None:
                    target = owner
                else:
                    continue

                handler = getattr(target, callback_name, None)
                if not callable(handler):
                    self.log(f"Warning: Keyframe callback '{callback_name}' not found on {type(target).__name__}")
                    continue
                manager.set_call_func(handler, key)

    def resolve_controller_class(self, name):
        """Find the controller class for a document controller name

        With a controller_namespace, the name is only looked up inside it.
        Without one, a dotted name 'package.module.Class' is passed to
        importlib, which imports (and so executes) whatever installed module
        the file names. Pass a namespace when loading untrusted files.

        Returns:
            The class, or None if the name does not resolve
        """
        if self.controller_namespace is not None:
            obj = self.controller_namespace
            for part in name.split('.'):
                if isinstance(obj, Mapping):
                    obj = obj.get(part)
                else:
                    obj = getattr(obj, part, None)
                if obj is None:
                    return None
            return obj

        module_name, _, class_name = name.rpartition('.')
        if not module_name:
            return None
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            self.log(f"Warning: Could not import controller module '{module_name}': {e}")
            return None
        return getattr(module, class_name, None)

    def _bind_callback(self, node, target, name, control_events):
        handler = getattr(target, name, None)
        if not callable(handler):
            self.log(f"Warning: Callback '{name}' not found on {type(target).__name__}, skipping")
            return

        add_target = getattr(node, 'add_target_with_action_for_control_events', None)
        if control_events is not None and callable(add_target):
            add_target(target, handler, control_events)
            return
        set_callback = getattr(node, 'set_callback', None)
        if callable(set_callback):
            set_callback(handler, target)
        elif isinstance(getattr(node, 'properties', None), dict):
            node.properties.setdefault('callbacks', []).append((target, handler))
        else:
            self.log(f"Warning: Node {node!r} cannot take callback '{name}'")

    def _assign_outlet(self, target, name, node):
        try:
            setattr(target, name, node)
        except AttributeError as e:
            self.log(f"Warning: Could not assign outlet '{name}' on {type(target).__name__}: {e}")
