# conftest.py
"""Shared fixtures and a byte builder for hand-made .ccbi documents."""

import struct
from dataclasses import dataclass, field
from typing import Any, List, Tuple

import pytest

from core.constants import CCB_VERSION, EASINGS_WITH_OPTION, PropertyType, TargetType
from loaders import NodeLoaderLibrary


class BitWriter:
    """Inverse of BitCursor: LSB-first bits, MSB-first var-int payloads"""

    def __init__(self):
        self._out = bytearray()
        self._byte = 0
        self._bit = 0

    def write_bit(self, bit):
        if bit:
            self._byte |= 1 << self._bit
        self._bit += 1
        if self._bit == 8:
            self._out.append(self._byte)
            self._byte = 0
            self._bit = 0

    def align(self):
        if self._bit:
            self._out.append(self._byte)
            self._byte = 0
            self._bit = 0

    def _write_encoded(self, current):
        num_bits = current.bit_length() - 1
        for _ in range(num_bits):
            self.write_bit(0)
        self.write_bit(1)
        for i in reversed(range(num_bits)):
            self.write_bit((current >> i) & 1)
        self.align()

    def write_uint(self, value):
        self._write_encoded(value + 1)

    def write_sint(self, value):
        self._write_encoded(2 * value + 1 if value >= 0 else -2 * value)

    def write_byte(self, value):
        self.align()
        self._out.append(value & 0xFF)

    def write_bool(self, value):
        self.write_byte(1 if value else 0)

    def write_bytes(self, data):
        self.align()
        self._out.extend(data)

    def write_float(self, value):
        sentinels = {0.0: 0, 1.0: 1, -1.0: 2, 0.5: 3}
        if value in sentinels and not (value == 0.0 and struct.pack('<f', value)[3]):
            self.write_byte(sentinels[value])
        else:
            self.write_full_float(value)

    def write_full_float(self, value):
        self.write_byte(5)
        self.write_bytes(struct.pack('<f', value))

    def write_int_float(self, value):
        self.write_byte(4)
        self.write_sint(value)

    def getvalue(self):
        self.align()
        return bytes(self._out)


@dataclass
class NodeSpec:
    """Description of one node for CCBIWriter.write_node

    props / extra: (PropertyType, name, value) or (PropertyType, name, value, platform)
    animated: {sequence_id: [(name, PropertyType, [(time, easing, easing_opt, value), ...])]}
    """
    class_name: str = 'CCNode'
    props: List[Tuple] = field(default_factory=list)
    extra: List[Tuple] = field(default_factory=list)
    children: List['NodeSpec'] = field(default_factory=list)
    controller: str = ''
    assign_type: int = TargetType.NONE
    assign_name: str = ''
    animated: dict = field(default_factory=dict)


class CCBIWriter(BitWriter):
    """Builds a complete document; the body is written first, the
    header and string table are prepended by build()"""

    def __init__(self, document_controlled=False, version=CCB_VERSION, magic=b'ibcc'):
        super().__init__()
        self.document_controlled = document_controlled
        self.version = version
        self.magic = magic
        self.strings: List[str] = []

    def string_index(self, text):
        if text not in self.strings:
            self.strings.append(text)
        return self.strings.index(text)

    def write_string(self, text):
        self.write_uint(self.string_index(text))

    # -- timelines --

    def write_sequences(self, sequences=(), auto_play=-1):
        """sequences: dicts with id, name and optional duration, chained,
        callbacks [(time, name, type)], sounds [(time, file, pitch, pan, gain)]"""
        self.write_uint(len(sequences))
        for seq in sequences:
            self.write_float(seq.get('duration', 1.0))
            self.write_string(seq['name'])
            self.write_uint(seq['id'])
            self.write_sint(seq.get('chained', -1))

            callbacks = seq.get('callbacks', ())
            self.write_uint(len(callbacks))
            for time, name, callback_type in callbacks:
                self.write_float(time)
                self.write_string(name)
                self.write_uint(callback_type)

            sounds = seq.get('sounds', ())
            self.write_uint(len(sounds))
            for time, sound_file, pitch, pan, gain in sounds:
                self.write_float(time)
                self.write_string(sound_file)
                self.write_float(pitch)
                self.write_float(pan)
                self.write_float(gain)
        self.write_sint(auto_play)

    def write_keyframe_value(self, prop_type, value):
        if prop_type == PropertyType.CHECK:
            self.write_bool(value)
        elif prop_type == PropertyType.BYTE:
            self.write_byte(value)
        elif prop_type == PropertyType.COLOR3:
            for component in value:
                self.write_byte(component)
        elif prop_type == PropertyType.DEGREES:
            self.write_float(value)
        elif prop_type in (PropertyType.FLOAT_XY, PropertyType.SCALE_LOCK, PropertyType.POSITION):
            self.write_float(value[0])
            self.write_float(value[1])
        elif prop_type == PropertyType.SPRITEFRAME:
            self.write_string(value[0])
            self.write_string(value[1])

    # -- nodes --

    def write_property_value(self, prop_type, value):
        if prop_type in (PropertyType.POSITION, PropertyType.SIZE, PropertyType.SCALE_LOCK):
            x, y, kind = value
            self.write_float(x)
            self.write_float(y)
            self.write_uint(kind)
        elif prop_type in (PropertyType.POINT, PropertyType.POINT_LOCK,
                           PropertyType.FLOAT_XY, PropertyType.FLOAT_VAR):
            self.write_float(value[0])
            self.write_float(value[1])
        elif prop_type in (PropertyType.DEGREES, PropertyType.FLOAT):
            self.write_float(value)
        elif prop_type == PropertyType.FLOAT_SCALE:
            self.write_float(value[0])
            self.write_uint(value[1])
        elif prop_type in (PropertyType.INTEGER, PropertyType.INTEGER_LABELED):
            self.write_sint(value)
        elif prop_type == PropertyType.CHECK:
            self.write_bool(value)
        elif prop_type == PropertyType.BYTE:
            self.write_byte(value)
        elif prop_type == PropertyType.COLOR3:
            for component in value:
                self.write_byte(component)
        elif prop_type == PropertyType.FLIP:
            self.write_bool(value[0])
            self.write_bool(value[1])
        elif prop_type == PropertyType.BLENDMODE:
            self.write_uint(value[0])
            self.write_uint(value[1])
        elif prop_type in (PropertyType.SPRITEFRAME, PropertyType.ANIMATION):
            self.write_string(value[0])
            self.write_string(value[1])
        elif prop_type in (PropertyType.TEXTURE, PropertyType.FNT_FILE, PropertyType.FONT_TTF,
                           PropertyType.TEXT, PropertyType.STRING, PropertyType.CCB_FILE):
            self.write_string(value)
        elif prop_type == PropertyType.BLOCK:
            self.write_string(value[0])
            self.write_uint(value[1])
        elif prop_type == PropertyType.BLOCK_CCCONTROL:
            self.write_string(value[0])
            self.write_uint(value[1])
            self.write_uint(value[2])
        else:
            raise ValueError(f"no writer for property type {prop_type}")

    def write_properties(self, props=(), extra=()):
        self.write_uint(len(props))
        self.write_uint(len(extra))
        for entry in list(props) + list(extra):
            prop_type, name, value = entry[:3]
            platform = entry[3] if len(entry) > 3 else 0
            self.write_uint(prop_type)
            self.write_string(name)
            self.write_byte(platform)
            self.write_property_value(prop_type, value)

    def write_node(self, spec: NodeSpec):
        self.write_string(spec.class_name)
        if self.document_controlled:
            self.write_string(spec.controller)
        self.write_uint(spec.assign_type)
        if spec.assign_type != TargetType.NONE:
            self.write_string(spec.assign_name)

        self.write_uint(len(spec.animated))
        for seq_id, channels in spec.animated.items():
            self.write_uint(seq_id)
            self.write_uint(len(channels))
            for name, prop_type, keyframes in channels:
                self.write_string(name)
                self.write_uint(prop_type)
                self.write_uint(len(keyframes))
                for time, easing, easing_opt, value in keyframes:
                    self.write_float(time)
                    self.write_uint(easing)
                    if easing in EASINGS_WITH_OPTION:
                        self.write_float(easing_opt)
                    self.write_keyframe_value(prop_type, value)

        self.write_properties(spec.props, spec.extra)

        self.write_uint(len(spec.children))
        for child in spec.children:
            self.write_node(child)

    def build(self):
        head = BitWriter()
        head.write_bytes(self.magic)
        head.write_uint(self.version)
        head.write_bool(self.document_controlled)
        head.write_uint(len(self.strings))
        for text in self.strings:
            raw = text.encode('utf-8')
            head.write_byte(len(raw) >> 8)
            head.write_byte(len(raw) & 0xFF)
            head.write_bytes(raw)
        return head.getvalue() + self.getvalue()


def build_document(root: NodeSpec, document_controlled=False, sequences=(), auto_play=-1):
    writer = CCBIWriter(document_controlled=document_controlled)
    writer.write_sequences(sequences, auto_play)
    writer.write_node(root)
    return writer.build()


class RecordingListener:
    """Node loader listener that records every notification"""

    def __init__(self):
        self.loaded: List[Any] = []

    def on_node_loaded(self, node, loader):
        self.loaded.append(node)


# --- Fixtures ---

@pytest.fixture
def loader_library():
    """Fresh default loader library per test"""
    return NodeLoaderLibrary.new_default_library()


@pytest.fixture
def messages():
    """List collecting progress_callback messages"""
    return []


@pytest.fixture
def files():
    """In-memory file system for sub-file reads: {path: bytes}"""
    store = {}

    def _loader(path):
        if path not in store:
            raise FileNotFoundError(path)
        return store[path]

    _loader.store = store
    return _loader
