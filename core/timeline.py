#!/usr/bin/env python3
"""
Timeline Module
Animation data decoded from a CCBI file.

A file carries a list of sequences (named timelines). Each sequence may have
a callback channel and a sound channel, and every animated node contributes
one property channel per animated property and sequence. The
AnimationManager owns all of it for one decoded file, along with the
deferred name bindings recorded while the file was read in
document-controlled mode.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .constants import EasingType, PropertyType

# sequence id -> property name -> channel
NodeSequences = Dict[int, Dict[str, 'SequenceProperty']]

OUTLET = 'outlet'
CALLBACK = 'callback'


@dataclass
class Keyframe:
    """Single keyframe of a channel

    Attributes:
        time: Time in seconds from the start of the sequence
        value: Value whose shape depends on the channel type
        easing_type: Easing applied from this keyframe to the next
        easing_opt: Easing amount (cubic and elastic kinds only, else 0.0)
    """
    time: float
    value: Any = None
    easing_type: EasingType = EasingType.INSTANT
    easing_opt: float = 0.0


@dataclass
class SequenceProperty:
    """Channel of keyframes sharing one name and property type

    Callback and sound channels are unnamed and carry type -1.
    """
    name: str = ''
    type: int = -1
    keyframes: List[Keyframe] = field(default_factory=list)

    @property
    def property_type(self) -> Optional[PropertyType]:
        try:
            return PropertyType(self.type)
        except ValueError:
            return None


@dataclass
class Sequence:
    """Named timeline

    Attributes:
        sequence_id: Id referenced by node channels and chaining
        name: Display name
        duration: Length in seconds
        chained_sequence_id: Sequence to play after this one, -1 for none
        callback_channel: Keyframes holding (callback_name, callback_type)
        sound_channel: Keyframes holding (sound_file, pitch, pan, gain)
    """
    sequence_id: int = 0
    name: str = ''
    duration: float = 0.0
    chained_sequence_id: int = -1
    callback_channel: Optional[SequenceProperty] = None
    sound_channel: Optional[SequenceProperty] = None


@dataclass
class PendingBinding:
    """Name binding recorded during decode and resolved afterwards

    Attributes:
        kind: OUTLET (assign node to a named slot) or CALLBACK (bind a named
              handler onto the node)
        name: Slot or handler name on the owner / document controller
        node: Node the binding refers to
        control_events: Control-event filter bits for callbacks on control nodes
    """
    kind: str
    name: str
    node: Any
    control_events: Optional[int] = None


class AnimationManager:
    """Timeline model of one decoded file

    Holds the sequences, the per-node property channels, the root node and
    the document-level bindings. Nodes are tracked by identity so that node
    types without hashing support can be animated.
    """

    def __init__(self, root_container_size: Tuple[float, float] = (0.0, 0.0)):
        self.sequences: List[Sequence] = []
        self.root_node = None
        self.root_container_size = root_container_size
        self.owner = None
        self.auto_play_sequence_id = -1
        self.document_controlled = False
        self.document_controller_name: Optional[str] = None
        self.document_outlets: List[PendingBinding] = []
        self.document_callbacks: List[PendingBinding] = []
        self.keyframe_callbacks: List[str] = []
        self._call_funcs: Dict[str, Callable] = {}
        self._nodes: Dict[int, Tuple[Any, NodeSequences]] = {}
        self._base_values: Dict[int, Dict[str, Any]] = {}

    def get_container_size(self, node=None) -> Tuple[float, float]:
        """Size that relative positions and sizes of node's children refer to"""
        if node is not None:
            size = getattr(node, 'content_size', None)
            if size is not None:
                return size
        return self.root_container_size

    # ------------------------------------------------------------------
    # Sequences
    # ------------------------------------------------------------------

    def get_sequence(self, sequence_id: int) -> Optional[Sequence]:
        for seq in self.sequences:
            if seq.sequence_id == sequence_id:
                return seq
        return None

    def get_sequence_id(self, name: str) -> int:
        """Return the id of the sequence called name, or -1"""
        for seq in self.sequences:
            if seq.name == name:
                return seq.sequence_id
        return -1

    # ------------------------------------------------------------------
    # Per-node channels
    # ------------------------------------------------------------------

    def add_node(self, node, sequences: NodeSequences):
        self._nodes[id(node)] = (node, sequences)

    def get_sequences_for_node(self, node) -> Optional[NodeSequences]:
        entry = self._nodes.get(id(node))
        return entry[1] if entry else None

    def move_animations_from_node(self, from_node, to_node):
        """Transfer the channels registered for from_node onto to_node"""
        entry = self._nodes.pop(id(from_node), None)
        if entry is not None:
            self._nodes[id(to_node)] = (to_node, entry[1])
        base_values = self._base_values.pop(id(from_node), None)
        if base_values is not None:
            self._base_values[id(to_node)] = base_values

    def set_base_value(self, value, node, property_name: str):
        """Remember the static value of a property that is also animated"""
        self._base_values.setdefault(id(node), {})[property_name] = value

    def get_base_value(self, node, property_name: str):
        return self._base_values.get(id(node), {}).get(property_name)

    @property
    def animated_nodes(self) -> List[Any]:
        return [node for node, _ in self._nodes.values()]

    # ------------------------------------------------------------------
    # Document bindings
    # ------------------------------------------------------------------

    def add_document_outlet(self, name: str, node):
        self.document_outlets.append(PendingBinding(OUTLET, name, node))

    def add_document_callback(self, name: str, node, control_events: Optional[int] = None):
        self.document_callbacks.append(PendingBinding(CALLBACK, name, node, control_events))

    @property
    def document_outlet_names(self) -> List[str]:
        return [b.name for b in self.document_outlets]

    @property
    def document_callback_names(self) -> List[str]:
        return [b.name for b in self.document_callbacks]

    # ------------------------------------------------------------------
    # Keyframe callbacks
    # ------------------------------------------------------------------

    def set_call_func(self, func: Callable, key: str):
        self._call_funcs[key] = func

    def get_call_func(self, key: str) -> Optional[Callable]:
        return self._call_funcs.get(key)
