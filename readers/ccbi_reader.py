#!/usr/bin/env python3
"""
CCBI Reader Module
Decodes a CocosBuilder .ccbi file into a node graph plus its timeline model.

File layout, in order:
  1. Header: magic bytes, format version, document-controlled flag
  2. String cache
  3. Sequences (timelines), then the auto-play sequence id
  4. Node graph, each node followed by its children

Node construction and property parsing are delegated to the loader
registered for the node's class name. Name bindings found while reading a
document-controlled file are only recorded here; CCBILoader resolves them
once the whole graph exists.
"""

import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from core.constants import (
    CCB_MAGIC,
    CCB_VERSION,
    CCBI_EXTENSION,
    DEFAULT_CONTAINER_SIZE,
    DEFAULT_NODE_CLASS,
    EASINGS_WITH_OPTION,
    EasingType,
    PropertyType,
    TargetType,
)
from core.errors import FormatError
from core.scene_node import CCBFile
from core.sprite_frames import BaseSpriteFrameCache, SpriteFrameCache
from core.timeline import (
    CALLBACK,
    OUTLET,
    AnimationManager,
    Keyframe,
    PendingBinding,
    Sequence,
    SequenceProperty,
)

from .bit_cursor import BitCursor
from .string_cache import StringCache


def read_file_bytes(path) -> bytes:
    """Default file loader: read a whole file from disk"""
    return Path(path).read_bytes()


class CCBReader:
    """Reader for one .ccbi file (and the sub-files it embeds)

    The reader is also the stream API handed to loaders: read_int(),
    read_float(), read_cached_string() and friends consume bytes at the
    current position.
    """

    def __init__(self, loader_library, member_variable_assigner=None, selector_resolver=None,
                 node_loader_listener=None, root_path: str = '',
                 sprite_frame_cache: Optional[BaseSpriteFrameCache] = None,
                 file_loader: Optional[Callable[[str], bytes]] = None,
                 resolution_scale: float = 1.0, progress_callback=None):
        """Initialize reader

        Args:
            loader_library: NodeLoaderLibrary used to look up loaders by class name
            member_variable_assigner: Fallback for member-variable and custom
                                      property assignment (on_assign_ccb_member_variable,
                                      on_assign_ccb_custom_property)
            selector_resolver: Fallback for resolving selector names in direct mode
            node_loader_listener: Fallback receiver of on_node_loaded(node, loader)
            root_path: Prefix for every resource path in the file
            sprite_frame_cache: Sprite-frame collaborator (default: SpriteFrameCache)
            file_loader: Callable returning the bytes of a path (default: read from disk)
            resolution_scale: Multiplier for MULTIPLY_RESOLUTION values
            progress_callback: Optional function to call for log messages
                              Signature: callback(message: str) -> None
        """
        self.loader_library = loader_library
        self.member_variable_assigner = member_variable_assigner
        self.selector_resolver = selector_resolver
        self.node_loader_listener = node_loader_listener
        self.root_path = root_path
        self.sprite_frame_cache = sprite_frame_cache if sprite_frame_cache is not None else SpriteFrameCache()
        self.file_loader = file_loader or read_file_bytes
        self.resolution_scale = resolution_scale
        self.progress_callback = progress_callback

        self.loaded_sprite_sheets: List[str] = []
        self.owner_outlets: List[PendingBinding] = []
        self.owner_callbacks: List[PendingBinding] = []
        # id(root node) -> (root node, manager), shared with sub-file readers
        self.animation_managers: Dict[int, Tuple[Any, AnimationManager]] = {}
        self.nodes_with_animation_managers: Optional[List[Any]] = None
        self.animation_managers_for_nodes: Optional[List[AnimationManager]] = None

        self.owner = None
        self.animation_manager: Optional[AnimationManager] = None
        self.document_controlled = False
        self.animated_properties = set()
        self.current_class_name: Optional[str] = None

        self._cursor: Optional[BitCursor] = None
        self._string_cache: Optional[StringCache] = None

    @classmethod
    def from_parent(cls, parent: 'CCBReader') -> 'CCBReader':
        """Create a reader for a sub-file that borrows the parent's collaborators"""
        reader = cls(
            parent.loader_library,
            member_variable_assigner=parent.member_variable_assigner,
            selector_resolver=parent.selector_resolver,
            node_loader_listener=parent.node_loader_listener,
            root_path=parent.root_path,
            sprite_frame_cache=parent.sprite_frame_cache,
            file_loader=parent.file_loader,
            resolution_scale=parent.resolution_scale,
            progress_callback=parent.progress_callback,
        )
        reader.loaded_sprite_sheets = parent.loaded_sprite_sheets
        reader.owner_outlets = parent.owner_outlets
        reader.owner_callbacks = parent.owner_callbacks
        reader.animation_managers = parent.animation_managers
        return reader

    def log(self, message):
        """Send progress updates to callback"""
        if self.progress_callback:
            self.progress_callback(message)
        print(message)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def read_node_graph_from_file(self, path, owner=None, parent_size=None):
        """Read a .ccbi file through the file loader and decode it

        Args:
            path: File path passed to the file loader
            owner: Object receiving owner-scope outlets and callbacks
            parent_size: (width, height) of the container, default DEFAULT_CONTAINER_SIZE

        Returns:
            Root node of the decoded graph
        """
        data = self.file_loader(str(path))
        return self.read_node_graph_from_data(data, owner, parent_size)

    def read_node_graph_from_data(self, data: bytes, owner=None, parent_size=None):
        """Decode a complete .ccbi byte buffer

        Args:
            data: File contents
            owner: Object receiving owner-scope outlets and callbacks
            parent_size: (width, height) of the container, default DEFAULT_CONTAINER_SIZE

        Returns:
            Root node of the decoded graph

        Raises:
            FormatError: Bad magic bytes or unsupported version
            BoundsError: Truncated data or string index out of range
        """
        self.init_with_data(data, owner)
        self.animation_manager.root_container_size = tuple(parent_size or DEFAULT_CONTAINER_SIZE)

        self.owner_outlets = []
        self.owner_callbacks = []
        self.animation_managers = {}

        node = self.read_file(clean_up=True)

        if self.document_controlled:
            pairs = list(self.animation_managers.values())
            self.nodes_with_animation_managers = [n for n, _ in pairs]
            self.animation_managers_for_nodes = [m for _, m in pairs]

        return node

    def init_with_data(self, data: bytes, owner=None):
        if not data:
            raise FormatError("no data to decode")
        self._cursor = BitCursor(data)
        self._string_cache = StringCache()
        self.owner = owner
        self.animation_manager = AnimationManager(DEFAULT_CONTAINER_SIZE)
        self.animation_manager.owner = owner

    def read_file(self, clean_up: bool = True):
        """Decode header, string cache, sequences and node graph"""
        self._read_header()
        self._string_cache.read(self._cursor)
        self._read_sequences()

        node = self._read_node_graph(None)
        self.animation_managers[id(node)] = (node, self.animation_manager)

        if clean_up:
            self._clean_up_node_graph(node)
        return node

    def read_sub_file(self, file_name: str, container_size: Tuple[float, float]):
        """Decode an embedded .ccbi file referenced by a CCB_FILE property

        The sub-file shares this reader's collaborators, owner binding lists,
        loaded sprite sheets and animation-manager map, but gets its own
        timeline model.

        Args:
            file_name: Path relative to root_path; the extension is replaced by .ccbi
            container_size: Size the sub-file's root is laid out in

        Returns:
            Root node of the embedded graph
        """
        path = os.path.splitext(self.root_path + file_name)[0] + CCBI_EXTENSION
        data = self.file_loader(path)

        sub_reader = CCBReader.from_parent(self)
        sub_reader.init_with_data(data, self.owner)
        sub_reader.animation_manager.root_container_size = tuple(container_size)
        return sub_reader.read_file(clean_up=False)

    # ------------------------------------------------------------------
    # Stream API used by loaders
    # ------------------------------------------------------------------

    def read_int(self, signed: bool) -> int:
        return self._cursor.read_int(signed)

    def read_byte(self) -> int:
        return self._cursor.read_byte()

    def read_bool(self) -> bool:
        return self._cursor.read_bool()

    def read_float(self) -> float:
        return self._cursor.read_float()

    def read_cached_string(self) -> str:
        return self._string_cache.read_cached_string(self._cursor)

    @property
    def string_cache(self) -> Optional[StringCache]:
        return self._string_cache

    @property
    def is_document_controlled(self) -> bool:
        return self.document_controlled

    def add_owner_outlet(self, name: str, node):
        if node is None:
            return
        self.owner_outlets.append(PendingBinding(OUTLET, name, node))

    def add_owner_callback(self, name: str, node):
        self.owner_callbacks.append(PendingBinding(CALLBACK, name, node))

    def add_document_callback(self, name: str, node, control_events: Optional[int] = None):
        self.animation_manager.add_document_callback(name, node, control_events)

    @property
    def owner_outlet_names(self) -> List[str]:
        return [b.name for b in self.owner_outlets]

    @property
    def owner_outlet_nodes(self) -> List[Any]:
        return [b.node for b in self.owner_outlets]

    @property
    def owner_callback_names(self) -> List[str]:
        return [b.name for b in self.owner_callbacks]

    @property
    def owner_callback_nodes(self) -> List[Any]:
        return [b.node for b in self.owner_callbacks]

    def resolve_sprite_frame(self, sheet: str, frame: str):
        """Resolve a (sheet, frame) pair through the sprite-frame cache

        An empty sheet name means frame is a standalone image. Sheets are
        handed to the cache at most once per decode.
        """
        if not sheet:
            return self.sprite_frame_cache.sprite_frame_from_image(self.root_path + frame)

        sheet_path = self.root_path + sheet
        if sheet_path not in self.loaded_sprite_sheets:
            self.sprite_frame_cache.add_sprite_frames(sheet_path)
            self.loaded_sprite_sheets.append(sheet_path)
        return self.sprite_frame_cache.get_sprite_frame(frame)

    # ------------------------------------------------------------------
    # Header and timelines
    # ------------------------------------------------------------------

    def _read_header(self):
        magic = self._cursor.read_bytes(4)[::-1]
        if magic != CCB_MAGIC.encode('ascii'):
            raise FormatError(f"bad magic bytes {magic[::-1]!r}, not a ccbi file")

        version = self._cursor.read_uint()
        if version != CCB_VERSION:
            self.log(f"WARNING! Incompatible ccbi file version (file: {version} reader: {CCB_VERSION})")
            raise FormatError(f"unsupported ccbi version {version}, expected {CCB_VERSION}")

        self.document_controlled = self._cursor.read_bool()
        self.animation_manager.document_controlled = self.document_controlled

    def _read_sequences(self):
        manager = self.animation_manager
        num_sequences = self._cursor.read_uint()
        for _ in range(num_sequences):
            seq = Sequence()
            seq.duration = self.read_float()
            seq.name = self.read_cached_string()
            seq.sequence_id = self._cursor.read_uint()
            seq.chained_sequence_id = self._cursor.read_sint()
            seq.callback_channel = self._read_callback_keyframes()
            seq.sound_channel = self._read_sound_keyframes()
            manager.sequences.append(seq)

        manager.auto_play_sequence_id = self._cursor.read_sint()

    def _read_callback_keyframes(self) -> Optional[SequenceProperty]:
        num_keyframes = self._cursor.read_uint()
        if not num_keyframes:
            return None

        channel = SequenceProperty()
        for _ in range(num_keyframes):
            time = self.read_float()
            callback_name = self.read_cached_string()
            callback_type = self._cursor.read_uint()

            if self.document_controlled:
                self.animation_manager.keyframe_callbacks.append(f"{callback_type}:{callback_name}")

            channel.keyframes.append(Keyframe(time=time, value=(callback_name, callback_type)))
        return channel

    def _read_sound_keyframes(self) -> Optional[SequenceProperty]:
        num_keyframes = self._cursor.read_uint()
        if not num_keyframes:
            return None

        channel = SequenceProperty()
        for _ in range(num_keyframes):
            time = self.read_float()
            sound_file = self.read_cached_string()
            pitch = self.read_float()
            pan = self.read_float()
            gain = self.read_float()
            channel.keyframes.append(Keyframe(time=time, value=(sound_file, pitch, pan, gain)))
        return channel

    def read_keyframe(self, prop_type: int) -> Keyframe:
        """Read one keyframe of an animated node property

        Args:
            prop_type: PropertyType of the owning channel, selects the value layout

        Returns:
            Keyframe: Value is None for types that carry no keyframe value
        """
        time = self.read_float()
        easing = self._cursor.read_uint()
        easing_opt = 0.0
        if easing in EASINGS_WITH_OPTION:
            easing_opt = self.read_float()

        try:
            easing = EasingType(easing)
        except ValueError:
            self.log(f"Warning: Unknown easing type {easing}")

        value = None
        if prop_type == PropertyType.CHECK:
            value = self.read_bool()
        elif prop_type == PropertyType.BYTE:
            value = self.read_byte()
        elif prop_type == PropertyType.COLOR3:
            value = (self.read_byte(), self.read_byte(), self.read_byte())
        elif prop_type == PropertyType.DEGREES:
            value = self.read_float()
        elif prop_type in (PropertyType.FLOAT_XY, PropertyType.SCALE_LOCK, PropertyType.POSITION):
            value = (self.read_float(), self.read_float())
        elif prop_type == PropertyType.SPRITEFRAME:
            sheet = self.read_cached_string()
            frame = self.read_cached_string()
            value = self.resolve_sprite_frame(sheet, frame)

        return Keyframe(time=time, value=value, easing_type=easing, easing_opt=easing_opt)

    def _read_animated_properties(self):
        """Read a node's per-sequence property channels

        Returns:
            dict: sequence id -> property name -> SequenceProperty
        """
        sequences = {}
        num_sequences = self._cursor.read_uint()
        for _ in range(num_sequences):
            seq_id = self._cursor.read_uint()
            node_props = {}

            num_props = self._cursor.read_uint()
            for _ in range(num_props):
                prop = SequenceProperty()
                prop.name = self.read_cached_string()
                prop.type = self._cursor.read_uint()
                self.animated_properties.add(prop.name)

                num_keyframes = self._cursor.read_uint()
                for _ in range(num_keyframes):
                    prop.keyframes.append(self.read_keyframe(prop.type))
                node_props[prop.name] = prop
            sequences[seq_id] = node_props
        return sequences

    # ------------------------------------------------------------------
    # Node graph
    # ------------------------------------------------------------------

    def _read_node_graph(self, parent):
        manager = self.animation_manager
        cursor = self._cursor

        class_name = self.read_cached_string()
        controller_name = None
        if self.document_controlled:
            controller_name = self.read_cached_string()

        assignment_type = cursor.read_uint()
        assignment_name = None
        if assignment_type != TargetType.NONE:
            assignment_name = self.read_cached_string()

        loader = self.loader_library.get_loader(class_name)
        if loader is None:
            self.log(f"No loader registered for '{class_name}', using {DEFAULT_NODE_CLASS}")
            loader = self.loader_library.get_loader(DEFAULT_NODE_CLASS)
            if loader is None:
                raise FormatError(f"no loader for '{class_name}' and no {DEFAULT_NODE_CLASS} fallback")

        self.current_class_name = class_name
        node = loader.load_node(parent, self)

        if manager.root_node is None:
            manager.root_node = node
        if self.document_controlled and node is manager.root_node:
            manager.document_controller_name = controller_name

        self.animated_properties = set()
        sequences = self._read_animated_properties()
        if sequences:
            manager.add_node(node, sequences)

        custom_properties = loader.parse_properties(node, parent, self)

        is_sub_file = isinstance(node, CCBFile) and node.ccb_file_node is not None
        if is_sub_file:
            node = self._splice_sub_file(node)
        elif isinstance(node, CCBFile):
            self.log("Warning: CCBFile node without an embedded file, keeping the wrapper")

        if assignment_type != TargetType.NONE:
            self._assign_member_variable(node, assignment_type, assignment_name)

        if custom_properties and not self.document_controlled:
            self._assign_custom_properties(node, custom_properties)

        self.animated_properties = set()

        num_children = cursor.read_uint()
        for _ in range(num_children):
            child = self._read_node_graph(node)
            node.add_child(child)

        # The embedded file's reader already notified for the spliced node
        if not is_sub_file:
            on_loaded = getattr(node, 'on_node_loaded', None)
            if callable(on_loaded):
                on_loaded(node, loader)
            elif self.node_loader_listener is not None:
                self.node_loader_listener.on_node_loaded(node, loader)

        return node

    def _splice_sub_file(self, wrapper):
        """Replace a CCBFile wrapper by the node it embeds"""
        embedded = wrapper.ccb_file_node
        embedded.position = wrapper.position
        embedded.rotation = wrapper.rotation
        embedded.scale_x = wrapper.scale_x
        embedded.scale_y = wrapper.scale_y
        embedded.tag = wrapper.tag
        embedded.visible = True

        self.animation_manager.move_animations_from_node(wrapper, embedded)
        if self.animation_manager.root_node is wrapper:
            self.animation_manager.root_node = embedded

        wrapper.ccb_file_node = None
        return embedded

    def _assign_member_variable(self, node, assignment_type, name):
        if self.document_controlled:
            if assignment_type == TargetType.DOCUMENT_ROOT:
                self.animation_manager.add_document_outlet(name, node)
            else:
                self.add_owner_outlet(name, node)
            return

        if assignment_type == TargetType.DOCUMENT_ROOT:
            target = self.animation_manager.root_node
        else:
            target = self.owner
        if target is None:
            return

        assigned = False
        hook = getattr(target, 'on_assign_ccb_member_variable', None)
        if callable(hook):
            assigned = hook(target, name, node)

        assigner = self.member_variable_assigner
        if not assigned and callable(getattr(assigner, 'on_assign_ccb_member_variable', None)):
            assigned = assigner.on_assign_ccb_member_variable(target, name, node)

        if not assigned:
            self.log(f"Warning: Member variable '{name}' was not assigned")

    def _assign_custom_properties(self, node, custom_properties):
        assigner = self.member_variable_assigner
        hook = getattr(node, 'on_assign_ccb_custom_property', None)
        for name, value in custom_properties.items():
            assigned = False
            if callable(hook):
                assigned = hook(node, name, value)
            if not assigned and callable(getattr(assigner, 'on_assign_ccb_custom_property', None)):
                assigned = assigner.on_assign_ccb_custom_property(node, name, value)
            if not assigned:
                self.log(f"Warning: Custom property '{name}' was not assigned")

    def _clean_up_node_graph(self, node):
        if hasattr(node, 'user_object'):
            node.user_object = None
        for child in getattr(node, 'children', ()):
            self._clean_up_node_graph(child)
